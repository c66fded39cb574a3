"""Pydantic request/response schemas for the feedback HTTP API.

Request schemas end with "Request", response schemas with "Response".
Record and stats bodies reuse the domain models directly; FastAPI dumps
them by alias, so clients receive the camelCase keys (``createdAt``,
``totalFeedback``...) the browser client reads.

Request fields accept any JSON value: presence, type and length rules are
all enforced by the store, so a number where a name belongs is reported as
``NameTooShort`` and ``{"action": 1}`` as ``InvalidAction``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from feedback_tracker.models.feedback import FeedbackRecord


class CreateFeedbackRequest(BaseModel):
    """New feedback submitted by a client."""

    name: Any = Field(default=None, description="Author display name (min 2 chars).")
    email: Any = Field(default=None, description="Author email address.")
    message: Any = Field(default=None, description="Feedback text (min 10 chars).")


class VoteRequest(BaseModel):
    """Vote on an existing record."""

    action: Any = Field(default=None, description='Either "upvote" or "downvote".')


class DeleteFeedbackResponse(BaseModel):
    """Confirmation returned after a record is deleted."""

    message: str
    feedback: FeedbackRecord


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    timestamp: datetime
    uptime: float = Field(description="Seconds since the process started serving.")
    version: str


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    kind: str | None = None
