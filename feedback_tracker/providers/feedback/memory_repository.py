"""In-memory feedback repository.

Process-local and lost on restart.  Suitable for tests and throwaway runs
(``FEEDBACK_BACKEND=memory``); can be swapped for a durable backend via the
IFeedbackRepository interface.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository
from feedback_tracker.models.feedback import FeedbackRecord

logger = structlog.get_logger(logger_name=__name__)


class MemoryFeedbackRepository(IFeedbackRepository):
    """Holds the collection in a plain list.

    Parameters
    ----------
    records:
        Optional initial collection, newest first.
    """

    def __init__(self, records: Sequence[FeedbackRecord] | None = None) -> None:
        self._records: list[FeedbackRecord] = list(records or [])
        self.save_count = 0

    async def initialize(self) -> None:
        logger.debug("memory_feedback_initialized", count=len(self._records))

    async def load(self) -> list[FeedbackRecord]:
        # Records are frozen, so a shallow copy keeps callers from mutating
        # the stored order.
        return list(self._records)

    async def save(self, records: Sequence[FeedbackRecord]) -> None:
        self._records = list(records)
        self.save_count += 1

    def get_provider_name(self) -> str:
        return "memory"
