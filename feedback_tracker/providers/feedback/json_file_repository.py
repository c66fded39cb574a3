"""JSON-file-backed feedback repository.

Persists the whole collection to one UTF-8 JSON file (``data/feedback.json``
by default).  Blocking file I/O runs via ``asyncio.to_thread`` under an
``asyncio.wait_for`` timeout so a stalled disk surfaces as a
:class:`PersistenceError` instead of hanging the request.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, which is atomic on POSIX and Windows: readers see
either the old document or the new one, never a truncated file.  Saves
run through a :class:`GuardedWriter`, so a save that times out before the
rename never lands afterwards.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

import structlog

from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository
from feedback_tracker.models.feedback import FeedbackRecord
from feedback_tracker.providers.feedback.document import decode_collection, encode_collection
from feedback_tracker.providers.feedback.write_guard import GuardedWriter, WriteTicket
from feedback_tracker.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DATA_FILE = Path("data/feedback.json")
_PROVIDER_NAME = "json_file"


class JsonFileFeedbackRepository(IFeedbackRepository):
    """Whole-document persistence in a single JSON file."""

    def __init__(
        self,
        data_file: str | Path = _DEFAULT_DATA_FILE,
        timeout: float = 5.0,
    ) -> None:
        self._data_file = Path(data_file)
        self._timeout = timeout
        self._writer = GuardedWriter(timeout, _PROVIDER_NAME)

    @property
    def data_file(self) -> Path:
        return self._data_file

    async def initialize(self) -> None:
        """Create the data directory if it doesn't exist."""
        try:
            await self._run(self._data_file.parent.mkdir, parents=True, exist_ok=True)
        except (OSError, asyncio.TimeoutError) as exc:
            raise PersistenceError(
                message="Failed to prepare feedback storage",
                provider_name=_PROVIDER_NAME,
            ) from exc
        logger.info("feedback_storage_initialized", path=str(self._data_file))

    async def load(self) -> list[FeedbackRecord]:
        """Read the collection; a missing file is an empty collection."""
        await self._writer.settle()
        try:
            text = await self._run(self._read_sync)
        except FileNotFoundError:
            logger.info("feedback_file_missing", path=str(self._data_file))
            return []
        except (OSError, UnicodeDecodeError, asyncio.TimeoutError) as exc:
            logger.error(
                "feedback_read_failed",
                path=str(self._data_file),
                error=repr(exc),
            )
            raise PersistenceError(
                message="Failed to read feedback",
                provider_name=_PROVIDER_NAME,
            ) from exc

        return decode_collection(text, _PROVIDER_NAME)

    async def save(self, records: Sequence[FeedbackRecord]) -> None:
        """Atomically replace the file with the serialized collection."""
        text = encode_collection(records)
        try:
            await self._writer.run(
                lambda ticket: asyncio.to_thread(self._write_sync, text, ticket)
            )
        except OSError as exc:
            logger.error(
                "feedback_write_failed",
                path=str(self._data_file),
                error=repr(exc),
            )
            raise PersistenceError(
                message="Failed to save feedback",
                provider_name=_PROVIDER_NAME,
            ) from exc

        logger.info("feedback_written", path=str(self._data_file), count=len(records))

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return _PROVIDER_NAME

    # -- Sync helpers (executed via asyncio.to_thread) -------------------------

    async def _run(self, func, *args, **kwargs):  # noqa: ANN001, ANN202
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, **kwargs),
            timeout=self._timeout,
        )

    def _read_sync(self) -> str:
        return self._data_file.read_text(encoding="utf-8")

    def _write_sync(self, text: str, ticket: WriteTicket) -> None:
        directory = self._data_file.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=directory,
            prefix=f".{self._data_file.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
                fh.flush()
                os.fsync(fh.fileno())
            if not ticket.begin_commit():
                os.unlink(tmp_name)
                return
            os.replace(tmp_name, self._data_file)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
