"""Public interface definitions for swappable backends.

Business logic talks to storage only through the abstract base classes in
this package.  Concrete adapters live in ``feedback_tracker/providers/`` and
are chosen in ``feedback_tracker/main.py`` from settings:

    Interface              →  Concrete implementations
    ─────────────────────────────────────────────────────
    IFeedbackRepository    →  JsonFileFeedbackRepository,
                              SQLiteFeedbackRepository,
                              MemoryFeedbackRepository
"""

from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository

__all__ = ["IFeedbackRepository"]
