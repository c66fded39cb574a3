"""SQLite-backed feedback repository.

Keeps the whole-document contract: the collection is stored as one JSON
text blob in a single-row table at ``data/feedback.db``, replaced in a
single statement on every save.  Uses ``aiosqlite`` for async I/O.  Saves
run through a :class:`GuardedWriter`: a save that times out before its
``COMMIT`` is rolled back instead of landing later.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Sequence
from pathlib import Path

import aiosqlite
import structlog

from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository
from feedback_tracker.models.feedback import FeedbackRecord
from feedback_tracker.providers.feedback.document import decode_collection, encode_collection
from feedback_tracker.providers.feedback.write_guard import GuardedWriter, WriteTicket
from feedback_tracker.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/feedback.db")
_PROVIDER_NAME = "sqlite_feedback"

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS feedback_document (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    body        TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_UPSERT_SQL = """\
INSERT INTO feedback_document (id, body)
VALUES (1, ?)
ON CONFLICT(id)
DO UPDATE SET body       = excluded.body,
              updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_SQL = "SELECT body FROM feedback_document WHERE id = 1;"


class SQLiteFeedbackRepository(IFeedbackRepository):
    """Whole-document persistence in a single SQLite row."""

    def __init__(
        self,
        db_path: str | Path = _DEFAULT_DB_PATH,
        timeout: float = 5.0,
    ) -> None:
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._writer = GuardedWriter(timeout, _PROVIDER_NAME)

    async def initialize(self) -> None:
        """Create the document table if it doesn't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(
                message="Failed to prepare feedback storage",
                provider_name=_PROVIDER_NAME,
            ) from exc
        logger.info("feedback_db_initialized", path=str(self._db_path))

    async def load(self) -> list[FeedbackRecord]:
        """Read the stored document; no row yet means an empty collection."""
        await self._writer.settle()
        try:
            row = await asyncio.wait_for(self._fetch_body(), timeout=self._timeout)
        except (sqlite3.Error, asyncio.TimeoutError) as exc:
            logger.error("feedback_read_failed", path=str(self._db_path), error=repr(exc))
            raise PersistenceError(
                message="Failed to read feedback",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if row is None:
            return []
        return decode_collection(row[0], _PROVIDER_NAME)

    async def save(self, records: Sequence[FeedbackRecord]) -> None:
        """Replace the stored document with *records*."""
        body = encode_collection(records)
        try:
            await self._writer.run(lambda ticket: self._store_body(body, ticket))
        except sqlite3.Error as exc:
            logger.error("feedback_write_failed", path=str(self._db_path), error=repr(exc))
            raise PersistenceError(
                message="Failed to save feedback",
                provider_name=_PROVIDER_NAME,
            ) from exc

        logger.info("feedback_written", path=str(self._db_path), count=len(records))

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return _PROVIDER_NAME

    async def _fetch_body(self) -> tuple[str] | None:
        async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
            cursor = await db.execute(_SELECT_SQL)
            return await cursor.fetchone()

    async def _store_body(self, body: str, ticket: WriteTicket) -> None:
        async with aiosqlite.connect(str(self._db_path), timeout=self._timeout) as db:
            await db.execute(_UPSERT_SQL, (body,))
            if not ticket.begin_commit():
                await db.rollback()
                return
            await db.commit()
