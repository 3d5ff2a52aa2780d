# src/token_studio/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import metadata_router, networks_router, tokens_router

__all__ = [
    "metadata_router",
    "networks_router",
    "tokens_router",
]
