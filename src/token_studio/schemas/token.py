# src/token_studio/schemas/token.py
"""Token registry and network schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .metadata import CamelModel


class TokenRegister(CamelModel):
    """Body for recording a token that was deployed on-chain."""

    network: str = Field(..., min_length=1, max_length=32)
    address: str = Field(..., min_length=1, max_length=64)
    name: str | None = Field(None, max_length=100)
    symbol: str | None = Field(None, max_length=20)


class TokenResponse(CamelModel):
    """Schema for token information returned by the API."""

    id: int
    network: str
    address: str
    canonical_address: str
    owner_address: str
    name: str | None
    symbol: str | None
    created_at: datetime


class NetworkResponse(CamelModel):
    """Supported network description."""

    id: str
    name: str
    family: str
    explorer_url: str
    is_testnet: bool
