"""
Web adapters for the registry.
"""
