"""Metadata lifecycle: drafts, linking, ownership-gated edits and the audit trail.

Every mutation of a `TokenMetadata` row goes through `MetadataService._write`,
which locks the row, snapshots it into `TokenMetadataHistory`, applies the
new values and bumps ``update_count`` inside one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from token_studio.core.settings import settings
from token_studio.db.time import as_utc, utcnow
from token_studio.models import TemporaryMetadata, Token, TokenMetadata, TokenMetadataHistory
from token_studio.models.metadata import DESCRIPTIVE_FIELDS
from token_studio.repositories import MetadataRepository
from token_studio.schemas.metadata import (
    MetadataCreate,
    MetadataResponse,
    MetadataUpdate,
    SessionLink,
    SessionUpsert,
)
from token_studio.services.assets import LogoStorage, validate_inline_logo, validate_logo
from token_studio.services.errors import (
    ConflictError,
    ForbiddenError,
    MetadataValidationError,
    NotFoundError,
    PersistenceError,
    UpstreamUnavailableError,
)
from token_studio.services.ownership import OwnerResolver, is_token_owner
from token_studio.services.tokens import resolve_token
from token_studio.utils.address import canonical_address

logger = logging.getLogger(__name__)


class MetadataService:
    """Request-scoped facade over the metadata tables."""

    def __init__(
        self,
        db: Session,
        resolver: OwnerResolver,
        storage: LogoStorage,
        *,
        admin_addresses: frozenset[str] | None = None,
        session_ttl: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.repo = MetadataRepository(db)
        self.resolver = resolver
        self.storage = storage
        self.admin_addresses = (
            admin_addresses if admin_addresses is not None else settings.admin_address_set
        )
        self.session_ttl = session_ttl or timedelta(hours=settings.session_ttl_hours)
        self.clock = clock

    # Reads

    def get(self, token_address: str, network: str | None = None) -> TokenMetadata:
        """Return the public metadata record for a token."""
        records = self.repo.find_metadata(canonical_address(token_address), network)
        if not records:
            raise NotFoundError("Token metadata not found")
        if len(records) > 1:
            raise MetadataValidationError(
                "Token address exists on several networks; specify the network",
            )
        return records[0]

    def search(
        self,
        *,
        tag: str | None = None,
        verified: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[TokenMetadata]:
        return self.repo.list_metadata(tag=tag, verified=verified, limit=limit, offset=offset)

    async def history(
        self,
        token_address: str,
        caller_address: str,
        network: str | None = None,
    ) -> list[TokenMetadataHistory]:
        """Return the audit trail, newest first; owner only."""
        token = resolve_token(self.repo, token_address, network)
        await self._require_owner(token, caller_address, "view metadata history")
        return self.repo.list_history(token.id)

    # Record mutations

    async def create(
        self,
        payload: MetadataCreate,
        caller_address: str | None,
    ) -> TokenMetadata | MetadataResponse:
        """Create metadata, or update it when the token already has a record.

        Without a token address nothing is persisted: the validated fields come
        back as a provisional record for pre-deployment staging. A ``None``
        caller is reserved for trusted internal callers and skips the
        ownership check.
        """
        values = payload.field_values()
        if payload.token_address is None:
            return MetadataResponse(
                **values,
                provisional=True,
                last_updated_by=canonical_address(caller_address) if caller_address else None,
                update_count=1 if caller_address else 0,
            )

        token = resolve_token(self.repo, payload.token_address, payload.network)
        if caller_address is not None:
            await self._require_owner(token, caller_address, "update metadata")
        return self._write(token, values, caller_address)

    async def update(
        self,
        token_address: str,
        payload: MetadataUpdate,
        caller_address: str,
    ) -> TokenMetadata:
        """Overwrite supplied fields of an existing record."""
        token = resolve_token(self.repo, token_address, payload.network)
        if not self.repo.find_metadata(token.canonical_address, token.network):
            raise NotFoundError("Token metadata not found")
        await self._require_owner(token, caller_address, "update metadata")
        return self._write(token, payload.field_values(), caller_address, require_existing=True)

    def verify(
        self,
        token_address: str,
        caller_address: str,
        network: str | None = None,
    ) -> TokenMetadata:
        """Flag a record as verified; admin allow-list only."""
        if canonical_address(caller_address) not in self.admin_addresses:
            raise ForbiddenError("Only metadata administrators can verify tokens")
        record = self.get(token_address, network)
        record.verified = True
        self._commit()
        self.db.refresh(record)
        logger.info("Metadata for %s on %s verified", record.token_address, record.network)
        return record

    async def upload_logo(
        self,
        data: bytes,
        content_type: str | None,
        caller_address: str,
        token_address: str | None = None,
        network: str | None = None,
    ) -> str:
        """Store a logo and, when a token is named, persist its URL on the record."""
        validate_logo(data, content_type, max_bytes=self.storage.config.max_bytes)

        token: Token | None = None
        if token_address:
            token = resolve_token(self.repo, token_address, network)
            await self._require_owner(token, caller_address, "upload a logo")

        suggested = f"token-logo-{token.canonical_address}" if token else "token-logo"
        stored = await self.storage.store(data, suggested, content_type)

        if token is not None:
            try:
                self._write(token, {"logo_url": stored.url}, caller_address)
            except PersistenceError as exc:
                raise PersistenceError(
                    f"Logo stored at {stored.url} but saving it to the token failed",
                ) from exc
        return stored.url

    # Draft sessions

    def upsert_session(self, payload: SessionUpsert, caller_address: str) -> TemporaryMetadata:
        """Create or refresh a draft; every call pushes expiry to now + TTL."""
        if payload.logo_data:
            validate_inline_logo(payload.logo_data, max_bytes=self.storage.config.max_bytes)

        creator = canonical_address(caller_address)
        now = self.clock()
        values = payload.field_values()
        if "logo_data" in payload.model_fields_set:
            values["logo_data"] = payload.logo_data or None

        draft = self.repo.get_session(payload.session_id)
        if draft is None:
            draft = TemporaryMetadata(
                session_id=payload.session_id,
                creator_address=creator,
                created_at=now,
                tags=[],
            )
            self.db.add(draft)
        elif draft.creator_address != creator:
            if as_utc(draft.expires_at) > now:
                raise ForbiddenError("Session belongs to another creator")
            # An abandoned draft id is free to be claimed again from scratch.
            self._reset_draft(draft, creator, now)
        elif as_utc(draft.expires_at) <= now:
            self._reset_draft(draft, creator, now)

        for key, value in values.items():
            setattr(draft, key, [] if key == "tags" and value is None else value)
        draft.expires_at = now + self.session_ttl

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Session was created concurrently; retry") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to save metadata session") from exc
        self.db.refresh(draft)
        return draft

    def get_session(self, session_id: str, caller_address: str) -> TemporaryMetadata:
        """Return the caller's live draft; expired drafts are invisible."""
        draft = self.repo.get_live_session(
            session_id.strip(), canonical_address(caller_address), self.clock()
        )
        if draft is None:
            raise NotFoundError("Metadata session not found")
        return draft

    async def link_session(self, payload: SessionLink, caller_address: str) -> TokenMetadata:
        """Bind a draft onto a deployed token and consume the draft."""
        token = resolve_token(self.repo, payload.token_address, payload.network)
        await self._require_owner(token, caller_address, "link metadata")

        draft = self.repo.get_live_session(
            payload.session_id.strip(), canonical_address(caller_address), self.clock()
        )
        if draft is None:
            raise NotFoundError("Metadata session not found")

        values: dict[str, Any] = {field: getattr(draft, field) for field in DESCRIPTIVE_FIELDS}
        values["tags"] = list(draft.tags or [])
        if draft.logo_data:
            try:
                stored = await self.storage.store_inline(
                    draft.logo_data, f"token-logo-{token.canonical_address}"
                )
                values["logo_url"] = stored.url
            except (MetadataValidationError, UpstreamUnavailableError) as exc:
                logger.warning(
                    "Linking session %s to %s without logo: %s",
                    draft.session_id,
                    token.canonical_address,
                    exc,
                )

        record = self._write(token, values, caller_address, consume=draft)
        logger.info("Linked session %s to %s on %s", payload.session_id, token.canonical_address, token.network)
        return record

    # Internals

    async def _require_owner(self, token: Token, caller_address: str, action: str) -> None:
        if not await is_token_owner(self.resolver, token, caller_address):
            raise ForbiddenError(f"Only the token owner can {action}")

    @staticmethod
    def _reset_draft(draft: TemporaryMetadata, creator: str, now: datetime) -> None:
        for field in DESCRIPTIVE_FIELDS:
            setattr(draft, field, None)
        draft.tags = []
        draft.logo_data = None
        draft.creator_address = creator
        draft.created_at = now

    def _write(
        self,
        token: Token,
        values: dict[str, Any],
        caller_address: str | None,
        *,
        require_existing: bool = False,
        consume: TemporaryMetadata | None = None,
        _retry: bool = True,
    ) -> TokenMetadata:
        """Insert or update a token's record in a single transaction."""
        editor = canonical_address(caller_address) if caller_address else None
        record = self.repo.get_metadata_for_update(token.id)

        if record is None:
            if require_existing:
                raise NotFoundError("Token metadata not found")
            record = TokenMetadata(
                token_id=token.id,
                network=token.network,
                token_address=token.canonical_address,
                tags=[],
                last_updated_by=editor,
                update_count=1 if editor else 0,
            )
            self.db.add(record)
        else:
            self.repo.add_history(
                TokenMetadataHistory(
                    token_id=token.id,
                    network=token.network,
                    token_address=token.canonical_address,
                    updated_by=editor or "system",
                    update_timestamp=self.clock(),
                    previous_data=record.snapshot(),
                )
            )
            record.update_count = (record.update_count or 0) + 1
            record.last_updated_by = editor

        for key, value in values.items():
            setattr(record, key, [] if key == "tags" and value is None else value)
        if consume is not None:
            self.db.delete(consume)

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if not _retry:
                raise PersistenceError("Failed to save token metadata") from exc
            # Lost an insert race; the row exists now, so update it instead.
            return self._write(
                token,
                values,
                caller_address,
                require_existing=require_existing,
                consume=consume,
                _retry=False,
            )
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to save token metadata") from exc

        self.db.refresh(record)
        return record

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to save token metadata") from exc
