"""
Multi-tenant external data-source gateway.
"""
