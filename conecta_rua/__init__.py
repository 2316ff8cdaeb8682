"""
Conecta Rua
Civic issue reporting for Ponta Grossa: map markers, photos and comments.
"""

__version__ = "0.1.0"
