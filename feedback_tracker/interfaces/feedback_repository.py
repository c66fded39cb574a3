"""Abstract base class for feedback persistence backends.

Defines the contract for storing the feedback collection as one whole
document.  Implementations may use a JSON file, SQLite, or any other
storage backend; the adapter pattern lets the backend be swapped without
touching the store's validation or mutation logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from feedback_tracker.models.feedback import FeedbackRecord


class IFeedbackRepository(ABC):
    """Contract for whole-collection feedback persistence.

    There are no per-record reads or writes: every call moves the full,
    ordered collection.  All operations are async to support network-backed
    or thread-offloaded stores.
    """

    @abstractmethod
    async def load(self) -> list[FeedbackRecord]:
        """Return the persisted collection in stored order (newest first).

        Returns
        -------
        list[FeedbackRecord]
            The collection, or an empty list when nothing has ever been
            saved.

        Raises
        ------
        PersistenceError
            When the document exists but cannot be read, is corrupt, or the
            read times out.
        """

    @abstractmethod
    async def save(self, records: Sequence[FeedbackRecord]) -> None:
        """Replace the persisted collection with *records*.

        Implementations must never leave a partially written document
        behind: either the whole new collection is durable or the previous
        one is still intact.

        Raises
        ------
        PersistenceError
            When the write fails or times out.
        """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare storage (directories, tables).  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this backend."""
