"""Timeout-safe whole-document writes.

A write that runs in a worker thread (``asyncio.to_thread``, or aiosqlite's
connection thread) cannot be cancelled by ``asyncio.wait_for``: the
awaiting coroutine stops, the thread does not.  Left alone, a timed-out
save would still land later and overwrite whatever was saved since.

:class:`GuardedWriter` closes that gap with a two-phase handshake:

  1. Every write receives a :class:`WriteTicket` and must call
     ``ticket.begin_commit()`` immediately before its final step (the
     ``os.replace`` or the ``COMMIT``).  When that returns False the write
     discards its work instead.
  2. On timeout the writer calls ``ticket.abandon()``.  If the commit has
     not started, the write is guaranteed never to land and the caller gets
     a :class:`PersistenceError`.  If it has started, the writer waits for
     it to finish and the save counts as applied.

A write that is still committing after a second timeout is kept as
pending; the next ``settle()`` (called before every load and save) waits
for it, so a late write can never overwrite a newer document.
"""

from __future__ import annotations

import asyncio
import functools
import threading
from collections.abc import Awaitable, Callable

import structlog

from feedback_tracker.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)


class WriteTicket:
    """Commit-or-abandon flag shared between the event loop and a writer thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._abandoned = False
        self._committing = False

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def begin_commit(self) -> bool:
        """Claim the right to commit; False once the caller has given up."""
        with self._lock:
            if self._abandoned:
                return False
            self._committing = True
            return True

    def abandon(self) -> bool:
        """Give up on the write; False if its commit has already started."""
        with self._lock:
            if self._committing:
                return False
            self._abandoned = True
            return True


class GuardedWriter:
    """Runs one repository's writes under a timeout without losing track of them."""

    def __init__(self, timeout: float, provider_name: str) -> None:
        self._timeout = timeout
        self._provider_name = provider_name
        self._pending: asyncio.Future | None = None

    async def settle(self) -> None:
        """Wait for a write that outlived its caller's timeout, if any."""
        pending = self._pending
        if pending is None:
            return
        done, _ = await asyncio.wait({pending}, timeout=self._timeout)
        if not done:
            raise PersistenceError(
                message="A previous write is still in progress",
                provider_name=self._provider_name,
            )
        self._pending = None

    async def run(self, start: Callable[[WriteTicket], Awaitable[None]]) -> None:
        """Run ``start(ticket)`` to completion or to a guaranteed no-op.

        Errors raised by the write itself propagate unchanged; a timeout
        becomes :class:`PersistenceError`.
        """
        await self.settle()

        ticket = WriteTicket()
        write = asyncio.ensure_future(start(ticket))
        try:
            await asyncio.wait_for(asyncio.shield(write), timeout=self._timeout)
            return
        except asyncio.TimeoutError as exc:
            write.add_done_callback(functools.partial(self._log_late_write, ticket))
            if ticket.abandon():
                logger.warning("feedback_write_abandoned", provider=self._provider_name)
                raise PersistenceError(
                    message="Failed to save feedback",
                    provider_name=self._provider_name,
                ) from exc

        # The commit had already started, so the write lands; wait for it.
        try:
            await asyncio.wait_for(asyncio.shield(write), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            self._pending = write
            logger.error("feedback_write_still_committing", provider=self._provider_name)
            raise PersistenceError(
                message="Failed to save feedback",
                provider_name=self._provider_name,
            ) from exc

    def _log_late_write(self, ticket: WriteTicket, write: asyncio.Future) -> None:
        if write.cancelled():
            return
        error = write.exception()
        if error is not None:
            logger.error(
                "feedback_late_write_failed",
                provider=self._provider_name,
                error=repr(error),
            )
            return
        logger.info(
            "feedback_late_write_finished",
            provider=self._provider_name,
            applied=not ticket.abandoned,
        )
