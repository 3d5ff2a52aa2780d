"""Data access helpers for tokens, metadata records, drafts and history."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import ColumnElement, Text, delete, select, type_coerce
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Session

from token_studio.models import TemporaryMetadata, Token, TokenMetadata, TokenMetadataHistory

__all__ = ["MetadataRepository", "tag_contains"]


def tag_contains(tag: str) -> ColumnElement[bool]:
    """Array containment (`tags @> ARRAY[tag]`) for the PostgreSQL tag column."""
    return type_coerce(TokenMetadata.tags, ARRAY(Text)).contains([tag])


class MetadataRepository:
    """Thin wrapper around database access for the metadata tables."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    # Tokens

    def find_tokens(self, canonical_address: str, network: str | None = None) -> list[Token]:
        """Return registered tokens with this address, optionally on one network."""
        stmt = select(Token).where(Token.canonical_address == canonical_address)
        if network is not None:
            stmt = stmt.where(Token.network == network)
        return list(self.session.execute(stmt.order_by(Token.id)).scalars())

    def add_token(self, token: Token) -> Token:
        self.session.add(token)
        self.session.flush()
        return token

    # Metadata records

    def find_metadata(
        self, canonical_address: str, network: str | None = None
    ) -> list[TokenMetadata]:
        """Return metadata records with this address, optionally on one network."""
        stmt = select(TokenMetadata).where(TokenMetadata.token_address == canonical_address)
        if network is not None:
            stmt = stmt.where(TokenMetadata.network == network)
        return list(self.session.execute(stmt.order_by(TokenMetadata.id)).scalars())

    def get_metadata_for_update(self, token_id: int) -> TokenMetadata | None:
        """Load a token's record, row-locked until the transaction ends.

        The lock serializes concurrent read-modify-write cycles so the history
        snapshot and update counter always reflect the row actually replaced.
        """
        stmt = (
            select(TokenMetadata)
            .where(TokenMetadata.token_id == token_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalars().first()

    def list_metadata(
        self,
        *,
        tag: str | None = None,
        verified: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[TokenMetadata]:
        """List records filtered by tag containment and verification flag."""
        stmt = select(TokenMetadata)
        if verified is not None:
            stmt = stmt.where(TokenMetadata.verified.is_(verified))
        stmt = stmt.order_by(TokenMetadata.updated_at.desc(), TokenMetadata.id.desc())

        if tag is None:
            return list(self.session.execute(stmt.limit(limit).offset(offset)).scalars())

        if self.session.get_bind().dialect.name == "postgresql":
            stmt = stmt.where(tag_contains(tag))
            return list(self.session.execute(stmt.limit(limit).offset(offset)).scalars())

        # JSON-backed tags have no portable containment operator.
        rows = [row for row in self.session.execute(stmt).scalars() if tag in (row.tags or [])]
        return rows[offset:offset + limit]

    # History

    def add_history(self, entry: TokenMetadataHistory) -> TokenMetadataHistory:
        self.session.add(entry)
        return entry

    def list_history(self, token_id: int) -> list[TokenMetadataHistory]:
        """Return a token's audit trail, newest first."""
        stmt = (
            select(TokenMetadataHistory)
            .where(TokenMetadataHistory.token_id == token_id)
            .order_by(
                TokenMetadataHistory.update_timestamp.desc(),
                TokenMetadataHistory.id.desc(),
            )
        )
        return list(self.session.execute(stmt).scalars())

    # Draft sessions

    def get_session(self, session_id: str) -> TemporaryMetadata | None:
        """Return a draft by id regardless of expiry."""
        stmt = select(TemporaryMetadata).where(TemporaryMetadata.session_id == session_id)
        return self.session.execute(stmt).scalars().first()

    def get_live_session(
        self, session_id: str, creator_address: str, now: datetime
    ) -> TemporaryMetadata | None:
        """Return the caller's draft only while it has not expired."""
        stmt = select(TemporaryMetadata).where(
            TemporaryMetadata.session_id == session_id,
            TemporaryMetadata.creator_address == creator_address,
            TemporaryMetadata.expires_at > now,
        )
        return self.session.execute(stmt).scalars().first()

    def delete_expired_sessions(self, now: datetime) -> int:
        """Delete every draft whose expiry has passed; return the count."""
        result = self.session.execute(
            delete(TemporaryMetadata)
            .where(TemporaryMetadata.expires_at <= now)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
