"""Endpoint routers, one module per record type."""
