"""Background purge of expired pre-deployment drafts.

Lookups already ignore expired drafts, so the sweep only reclaims space.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from token_studio.core.settings import settings
from token_studio.db.time import utcnow
from token_studio.repositories import MetadataRepository

logger = logging.getLogger(__name__)


def purge_expired_sessions(db: Session) -> int:
    """Delete expired drafts and commit; return how many were removed."""
    removed = MetadataRepository(db).delete_expired_sessions(utcnow())
    db.commit()
    return removed


class SessionSweepWorker:
    """Periodically deletes expired temporary metadata sessions."""

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        interval_seconds: float | None = None,
    ) -> None:
        if session_factory is None:
            from token_studio.db.session import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory
        self.interval_seconds = max(
            1.0,
            float(interval_seconds or settings.session_sweep_interval_seconds),
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def sweep_once(self) -> int:
        """Run a single sweep in the calling thread."""
        db = self._session_factory()
        try:
            return purge_expired_sessions(db)
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                removed = await asyncio.to_thread(self.sweep_once)
            except SQLAlchemyError as e:
                logger.warning("SessionSweepWorker failed to purge sessions: %s", e)
            else:
                if removed:
                    logger.info("Purged %d expired metadata sessions", removed)
                else:
                    logger.debug("No expired metadata sessions to purge")

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
