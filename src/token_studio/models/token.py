# src/token_studio/models/token.py
"""SQLAlchemy model for deployed tokens known to the service."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from token_studio.db.session import Base
from token_studio.db.time import utcnow

if TYPE_CHECKING:
    from .metadata import TokenMetadata, TokenMetadataHistory


class Token(Base):
    """A deployed token contract (EVM) or mint (Solana).

    The same address string may legitimately exist on several networks, so the
    identity is the pair of network and canonical address.
    """

    __tablename__ = "tokens"
    __table_args__ = (
        UniqueConstraint("network", "canonical_address", name="uq_tokens_network_address"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    # Address exactly as deployed; RPC calls need the original casing for base58 mints.
    address: Mapped[str] = mapped_column(String(64), nullable=False)
    canonical_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Owner seen at registration time; authorization always re-resolves on-chain.
    owner_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    symbol: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    token_metadata: Mapped[TokenMetadata | None] = relationship(
        "TokenMetadata",
        back_populates="token",
        cascade="all, delete-orphan",
        uselist=False,
    )
    history: Mapped[list[TokenMetadataHistory]] = relationship(
        "TokenMetadataHistory",
        back_populates="token",
        cascade="all, delete-orphan",
    )
