"""Feedback domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph - no imports from upper
# layers).
#
#   - ``FeedbackRecord`` is frozen.  The only mutation the store performs,
#     a vote, produces a new instance via ``model_copy(update={...})``.
#   - Python attributes are snake_case; the JSON document and the HTTP
#     bodies use the camelCase keys the browser client already reads
#     (``createdAt``, ``totalFeedback``...).  Always dump with
#     ``by_alias=True`` when writing to disk or the wire.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class VoteAction(str, Enum):
    """Direction of a vote on a feedback record."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"

    @property
    def delta(self) -> int:
        return 1 if self is VoteAction.UPVOTE else -1


class FeedbackRecord(BaseModel):
    """A single feedback submission with its running vote count."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Unique identifier assigned at creation.")
    name: str = Field(description="Trimmed display name of the author.")
    email: str = Field(description="Trimmed, lower-cased author email.")
    message: str = Field(description="Trimmed feedback text.")
    votes: int = Field(default=0, description="Net upvotes minus downvotes.")
    created_at: datetime = Field(
        alias="createdAt",
        description="UTC timestamp captured when the record was created.",
    )

    @field_serializer("created_at", when_used="json")
    def _serialize_created_at(self, value: datetime) -> str:
        # Millisecond precision with a Z suffix: 2026-03-14T09:26:53.120Z
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        stamp = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")

    def with_vote(self, action: VoteAction) -> FeedbackRecord:
        """Return a copy with the vote applied; no floor or ceiling."""
        return self.model_copy(update={"votes": self.votes + action.delta})

    def to_document(self) -> dict:
        """Serialize to the camelCase JSON shape used on disk."""
        return self.model_dump(mode="json", by_alias=True)


class StatsSummary(BaseModel):
    """Aggregate metrics derived from the collection on demand."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_feedback: int = Field(default=0, ge=0, alias="totalFeedback")
    total_votes: int = Field(default=0, alias="totalVotes")
    average_votes: float = Field(
        default=0.0,
        alias="averageVotes",
        description="totalVotes / totalFeedback rounded to one decimal place.",
    )
    positive_rate: int = Field(
        default=0,
        ge=0,
        le=100,
        alias="positiveRate",
        description="Whole-number percentage of records with votes > 0.",
    )
