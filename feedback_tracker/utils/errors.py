"""Custom exception hierarchy for the feedback tracker.

All application exceptions inherit from :class:`FeedbackTrackerError`, which
carries an optional ``provider_name`` so error handlers can tell which
persistence backend (e.g. "json_file", "sqlite") caused a failure.

    FeedbackTrackerError  (base -- catch-all for any feedback tracker error)
    +-- ValidationError    (caller-correctable input problem, HTTP 400)
    +-- NotFoundError      (no record with the requested id, HTTP 404)
    +-- PersistenceError   (storage read/write failed or timed out, HTTP 500)
    +-- ConfigurationError (startup / invalid settings)

The HTTP layer maps each class to a status code; the store and the
repositories only ever raise, they never decide on transport details.
"""

from __future__ import annotations

from enum import Enum


class FeedbackTrackerError(Exception):
    """Base exception for all feedback tracker errors.

    Every subclass carries a human-readable ``message`` suitable for direct
    display and an optional ``provider_name`` identifying the backend that
    triggered the error.  ``__str__`` prefixes the provider name in brackets
    for log output, e.g. ``[json_file] Failed to read feedback``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def kind(self) -> str:
        """Short machine-readable error kind, used in JSON error bodies."""
        return type(self).__name__

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------


class ValidationErrorKind(str, Enum):
    """Reasons a create or vote request can be rejected."""

    MISSING_FIELDS = "MissingFields"
    NAME_TOO_SHORT = "NameTooShort"
    MESSAGE_TOO_SHORT = "MessageTooShort"
    INVALID_EMAIL = "InvalidEmail"
    INVALID_ACTION = "InvalidAction"


_DEFAULT_VALIDATION_MESSAGES = {
    ValidationErrorKind.MISSING_FIELDS: "All fields (name, email, message) are required.",
    ValidationErrorKind.NAME_TOO_SHORT: "Name must be at least 2 characters long.",
    ValidationErrorKind.MESSAGE_TOO_SHORT: "Message must be at least 10 characters long.",
    ValidationErrorKind.INVALID_EMAIL: "Invalid email format.",
    ValidationErrorKind.INVALID_ACTION: 'Action must be "upvote" or "downvote"',
}


class ValidationError(FeedbackTrackerError):
    """Raised when submitted feedback or a vote action fails validation.

    Raised before any state is loaded or changed, so a rejected request
    never touches storage.
    """

    def __init__(
        self,
        kind: ValidationErrorKind,
        message: str | None = None,
    ) -> None:
        self._kind = kind
        super().__init__(message=message or _DEFAULT_VALIDATION_MESSAGES[kind])

    @property
    def kind(self) -> str:
        return self._kind.value

    @property
    def validation_kind(self) -> ValidationErrorKind:
        return self._kind


class NotFoundError(FeedbackTrackerError):
    """Raised when no feedback record carries the requested id."""

    def __init__(
        self,
        feedback_id: str,
        message: str = "Feedback not found",
    ) -> None:
        self._feedback_id = feedback_id
        super().__init__(message=message)

    @property
    def feedback_id(self) -> str:
        return self._feedback_id


# ---------------------------------------------------------------------------
# Storage / configuration errors
# ---------------------------------------------------------------------------


class PersistenceError(FeedbackTrackerError):
    """Raised when the underlying storage cannot be read or written.

    Distinct from an empty collection: a document that was never written
    loads as ``[]``, while an unreadable, corrupt or timed-out one raises
    this.  The underlying exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str = "Feedback storage is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(FeedbackTrackerError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
