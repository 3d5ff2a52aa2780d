# src/token_studio/models/__init__.py
"""SQLAlchemy models for the Token Studio service."""

from .metadata import TemporaryMetadata, TokenMetadata, TokenMetadataHistory
from .token import Token

__all__ = [
    "TemporaryMetadata",
    "Token",
    "TokenMetadata",
    "TokenMetadataHistory",
]
