# src/token_studio/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .metadata import router as metadata_router
from .networks import router as networks_router
from .tokens import router as tokens_router

__all__ = [
    "metadata_router",
    "networks_router",
    "tokens_router",
]
