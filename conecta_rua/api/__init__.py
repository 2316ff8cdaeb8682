"""
Conecta Rua - Web API
"""
