"""Entrypoints layer - Delivery mechanisms.

This layer contains:
- API: HTTP endpoints (FastAPI routes) and the application factory
- Bootstrap: builds the service graph from Settings

Entrypoints translate external requests into service calls
and format responses for the delivery mechanism.
"""
