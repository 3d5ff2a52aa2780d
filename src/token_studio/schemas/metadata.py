# src/token_studio/schemas/metadata.py
"""Pydantic schemas for token metadata, draft sessions and history."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_URL_LENGTH = 255


class TokenCategory(str, Enum):
    """Fixed set of category tags a token can carry."""

    DEFI = "defi"
    GAMING = "gaming"
    UTILITY = "utility"
    MEME = "meme"
    LAUNCHPAD = "launchpad"
    STABLECOIN = "stablecoin"
    NFT = "nft"
    GOVERNANCE = "governance"
    SOCIAL = "social"
    PRIVACY = "privacy"
    INFRASTRUCTURE = "infrastructure"


def validate_https_url(value: str | None) -> str | None:
    """Empty links are allowed; anything else must be an https:// URL."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > MAX_URL_LENGTH:
        raise ValueError(f"URL must be at most {MAX_URL_LENGTH} characters")
    if not value.startswith("https://"):
        raise ValueError("URL must start with https://")
    return value


class CamelModel(BaseModel):
    """Accept snake_case or camelCase input and emit camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MetadataFields(CamelModel):
    """Descriptive fields shared by records and draft sessions."""

    name: str | None = Field(None, max_length=100)
    symbol: str | None = Field(None, max_length=20)
    description: str | None = Field(None, max_length=300)
    website_url: str | None = None
    twitter_url: str | None = None
    telegram_url: str | None = None
    discord_url: str | None = None
    whitepaper_url: str | None = None
    github_url: str | None = None
    tags: list[TokenCategory] | None = None

    @field_validator(
        "website_url",
        "twitter_url",
        "telegram_url",
        "discord_url",
        "whitepaper_url",
        "github_url",
    )
    @classmethod
    def _check_link(cls, value: str | None) -> str | None:
        return validate_https_url(value)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[TokenCategory] | None) -> list[TokenCategory] | None:
        if value is None:
            return None
        return list(dict.fromkeys(value))

    def field_values(self) -> dict[str, Any]:
        """Return explicitly supplied fields keyed by column name."""
        data = self.model_dump(exclude_unset=True, include=set(MetadataFields.model_fields))
        if "tags" in data:
            data["tags"] = [tag.value for tag in (self.tags or [])]
        return data


class LogoUrlMixin(CamelModel):
    logo_url: str | None = None

    @field_validator("logo_url")
    @classmethod
    def _check_logo_url(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not value.startswith(("https://", "http://")):
            raise ValueError("Logo URL must be an http(s) URL")
        return value


class _RecordFields(MetadataFields, LogoUrlMixin):
    def field_values(self) -> dict[str, Any]:
        data = super().field_values()
        if "logo_url" in self.model_fields_set:
            data["logo_url"] = self.logo_url
        return data


class MetadataCreate(_RecordFields):
    """Body for creating (or upserting) token metadata."""

    token_address: str | None = Field(None, min_length=1, max_length=64)
    network: str | None = None


class MetadataUpdate(_RecordFields):
    """Body for updating metadata; only supplied fields change."""

    network: str | None = None


class MetadataResponse(CamelModel):
    """Token metadata returned by the API."""

    id: int | None = None
    network: str | None = None
    token_address: str | None = None
    name: str | None = None
    symbol: str | None = None
    description: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    twitter_url: str | None = None
    telegram_url: str | None = None
    discord_url: str | None = None
    whitepaper_url: str | None = None
    github_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    verified: bool = False
    last_updated_by: str | None = None
    update_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    provisional: bool = False


class HistoryEntryResponse(CamelModel):
    """One audit-trail entry; ``previous_data`` is the pre-update snapshot."""

    id: int
    network: str
    token_address: str
    updated_by: str
    update_timestamp: datetime
    previous_data: dict[str, Any]


class SessionUpsert(MetadataFields):
    """Body for creating or refreshing a pre-deployment draft."""

    session_id: str = Field(..., min_length=1, max_length=64)
    logo_data: str | None = None

    @field_validator("session_id")
    @classmethod
    def _strip_session_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("sessionId is required")
        return value


class SessionResponse(CamelModel):
    """Draft session as stored."""

    session_id: str
    creator_address: str
    name: str | None = None
    symbol: str | None = None
    description: str | None = None
    logo_data: str | None = None
    website_url: str | None = None
    twitter_url: str | None = None
    telegram_url: str | None = None
    discord_url: str | None = None
    whitepaper_url: str | None = None
    github_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime


class SessionLink(CamelModel):
    """Request binding a draft session onto a deployed token."""

    token_address: str = Field(..., min_length=1, max_length=64)
    session_id: str = Field(..., min_length=1, max_length=64)
    network: str | None = None


class LogoUploadResponse(CamelModel):
    """URL of a stored logo."""

    logo_url: str
