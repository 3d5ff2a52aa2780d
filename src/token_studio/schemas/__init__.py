# src/token_studio/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .metadata import (
    HistoryEntryResponse,
    LogoUploadResponse,
    MetadataCreate,
    MetadataResponse,
    MetadataUpdate,
    SessionLink,
    SessionResponse,
    SessionUpsert,
    TokenCategory,
)
from .token import NetworkResponse, TokenRegister, TokenResponse

__all__ = [
    "HistoryEntryResponse",
    "LogoUploadResponse",
    "MetadataCreate", "MetadataResponse", "MetadataUpdate",
    "NetworkResponse",
    "SessionLink", "SessionResponse", "SessionUpsert",
    "TokenCategory",
    "TokenRegister", "TokenResponse",
]
