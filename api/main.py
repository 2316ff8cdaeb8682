"""
Conecta Rua - Vercel Serverless Entry Point
Serves the map pages and the JSON API.
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from conecta_rua.api.main import app

# Vercel serverless handler
handler = app
