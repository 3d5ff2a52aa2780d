# src/token_studio/models/metadata.py
"""Models for token metadata, pre-deployment drafts and the edit audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from token_studio.db.session import Base
from token_studio.db.time import utcnow

if TYPE_CHECKING:
    from .token import Token

# Set-valued on PostgreSQL (GIN-indexed for containment), JSON list elsewhere.
TagList = JSON().with_variant(ARRAY(Text), "postgresql")
Snapshot = JSON().with_variant(JSONB(), "postgresql")

LINK_FIELDS: tuple[str, ...] = (
    "website_url",
    "twitter_url",
    "telegram_url",
    "discord_url",
    "whitepaper_url",
    "github_url",
)
DESCRIPTIVE_FIELDS: tuple[str, ...] = ("name", "symbol", "description", *LINK_FIELDS, "tags")


class TokenMetadata(Base):
    """Permanent metadata bound to a deployed token."""

    __tablename__ = "token_metadata"
    __table_args__ = (
        UniqueConstraint("network", "token_address", name="uq_token_metadata_network_address"),
        Index("idx_token_metadata_tags", "tags", postgresql_using="gin"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tokens.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    token_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    symbol: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(String(300), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    twitter_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    telegram_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    whitepaper_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tags: Mapped[list[str]] = mapped_column(TagList, nullable=False, default=list)

    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_updated_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # Monotonic; bumped by exactly one per successful update.
    update_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    token: Mapped[Token] = relationship("Token", back_populates="token_metadata")

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-safe copy of the row for the audit trail."""
        data: dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, list):
                value = list(value)
            data[column.key] = value
        return data


class TemporaryMetadata(Base):
    """Draft metadata collected before the token exists on-chain."""

    __tablename__ = "temporary_metadata"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    creator_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    symbol: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(String(300), nullable=True)
    # Inline base64 image (optionally a data: URL) awaiting durable storage.
    logo_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    twitter_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    telegram_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    whitepaper_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    github_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tags: Mapped[list[str]] = mapped_column(TagList, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)


class TokenMetadataHistory(Base):
    """Append-only audit record written before every metadata update."""

    __tablename__ = "token_metadata_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    token_address: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    update_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    previous_data: Mapped[dict[str, Any]] = mapped_column(Snapshot, nullable=False)

    token: Mapped[Token] = relationship("Token", back_populates="history")
