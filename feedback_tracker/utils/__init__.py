"""Utility modules for the feedback tracker.

- **errors** -- Domain exception hierarchy rooted at FeedbackTrackerError;
  the HTTP layer maps each subclass to a status code.
- **logging** -- structlog setup with coloured console output in
  development and structured JSON in production.
"""

from feedback_tracker.utils.errors import (
    ConfigurationError,
    FeedbackTrackerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    ValidationErrorKind,
)
from feedback_tracker.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "FeedbackTrackerError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "ValidationErrorKind",
    "configure_logging",
    "get_logger",
]
