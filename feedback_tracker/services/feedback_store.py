"""Feedback store: validation, mutation and persistence of the collection.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (business logic).
# Depends on: IFeedbackRepository.
#
# Every operation is a full read-modify-write cycle:
#
#   1. VALIDATE - input checks run first, before anything is loaded, so a
#      rejected request never touches storage.
#   2. LOAD     - the whole collection is re-read from the repository;
#      nothing is cached between calls.
#   3. MUTATE   - prepend (create), replace (vote) or remove (delete).
#   4. SAVE     - the whole collection is written back before returning.
#
# Concurrent callers are NOT serialized by default: two votes racing on
# the same record can lose an update.  ``serialize_writes=True`` routes
# every mutation through one asyncio.Lock, which closes that gap within a
# single process only.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import contextlib
import re
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import uuid4

import structlog

from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository
from feedback_tracker.models.feedback import FeedbackRecord, StatsSummary, VoteAction
from feedback_tracker.utils.errors import (
    FeedbackTrackerError,
    NotFoundError,
    ValidationError,
    ValidationErrorKind,
)

logger = structlog.get_logger(logger_name=__name__)

IdFactory = Callable[[], str]
Clock = Callable[[], datetime]

# ── Constants ─────────────────────────────────────────────────────────
_MIN_NAME_LENGTH = 2
_MIN_MESSAGE_LENGTH = 10
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_MAX_ID_ATTEMPTS = 5


def _default_id_factory() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    # Truncated to the millisecond precision records are stored with.
    now = datetime.now(tz=timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _round_half_up(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


class FeedbackStore:
    """Single authority for reading, validating, mutating and persisting feedback.

    All dependencies are constructor-injected.  Tests pass a deterministic
    ``id_factory`` and ``clock``; production uses UUID4 and UTC now.
    """

    def __init__(
        self,
        repository: IFeedbackRepository,
        id_factory: IdFactory | None = None,
        clock: Clock | None = None,
        serialize_writes: bool = False,
    ) -> None:
        self._repository = repository
        self._id_factory = id_factory or _default_id_factory
        self._clock = clock or _utc_now
        self._write_lock: asyncio.Lock | None = asyncio.Lock() if serialize_writes else None

    @property
    def repository(self) -> IFeedbackRepository:
        return self._repository

    # ── Public API ─────────────────────────────────────────────────────

    async def list(self) -> list[FeedbackRecord]:
        """Return the full collection, newest first."""
        records = await self._repository.load()
        logger.debug("feedback_listed", count=len(records))
        return records

    async def create(self, name: Any, email: Any, message: Any) -> FeedbackRecord:
        """Validate and prepend a new record, then persist the collection."""
        clean_name, clean_email, clean_message = self._validate_submission(name, email, message)

        async with self._writing():
            records = await self._repository.load()
            record = FeedbackRecord(
                id=self._new_id(records),
                name=clean_name,
                email=clean_email,
                message=clean_message,
                votes=0,
                created_at=self._clock(),
            )
            await self._repository.save([record, *records])

        logger.info("feedback_created", feedback_id=record.id, total=len(records) + 1)
        return record

    async def vote(self, feedback_id: str, action: Any) -> FeedbackRecord:
        """Apply an upvote (+1) or downvote (-1) and persist the collection."""
        vote_action = self._parse_action(action)

        async with self._writing():
            records = await self._repository.load()
            index = self._index_of(records, feedback_id)
            updated = records[index].with_vote(vote_action)
            records[index] = updated
            await self._repository.save(records)

        logger.info(
            "feedback_voted",
            feedback_id=feedback_id,
            action=vote_action.value,
            votes=updated.votes,
        )
        return updated

    async def delete(self, feedback_id: str) -> FeedbackRecord:
        """Remove one record, persist the rest, and return the removed record."""
        async with self._writing():
            records = await self._repository.load()
            index = self._index_of(records, feedback_id)
            removed = records.pop(index)
            await self._repository.save(records)

        logger.info("feedback_deleted", feedback_id=feedback_id, remaining=len(records))
        return removed

    async def stats(self) -> StatsSummary:
        """Compute aggregate metrics from a fresh read of the collection.

        Averages and percentages use exact decimal arithmetic with ties
        rounded half away from zero, so ``[3, -1, 0]`` gives an average of
        ``0.7`` and a positive rate of ``33``.
        """
        records = await self.list()
        total = len(records)
        if total == 0:
            return StatsSummary()

        total_votes = sum(r.votes for r in records)
        positive = sum(1 for r in records if r.votes > 0)

        average = _round_half_up(Decimal(total_votes) / Decimal(total), "0.1")
        rate = _round_half_up(Decimal(positive * 100) / Decimal(total), "1")

        return StatsSummary(
            total_feedback=total,
            total_votes=total_votes,
            average_votes=float(average),
            positive_rate=int(rate),
        )

    # ── Validation ─────────────────────────────────────────────────────

    @staticmethod
    def _validate_submission(name: Any, email: Any, message: Any) -> tuple[str, str, str]:
        """Check fields in a fixed order and return the normalized values.

        Empty strings fail the presence check; whitespace-only strings pass
        it and then fail the length checks.
        """
        if any(value is None or value == "" for value in (name, email, message)):
            raise ValidationError(ValidationErrorKind.MISSING_FIELDS)

        if not isinstance(name, str) or len(name.strip()) < _MIN_NAME_LENGTH:
            raise ValidationError(ValidationErrorKind.NAME_TOO_SHORT)

        if not isinstance(message, str) or len(message.strip()) < _MIN_MESSAGE_LENGTH:
            raise ValidationError(ValidationErrorKind.MESSAGE_TOO_SHORT)

        if not isinstance(email, str) or not _EMAIL_PATTERN.match(email.strip()):
            raise ValidationError(ValidationErrorKind.INVALID_EMAIL)

        return name.strip(), email.strip().lower(), message.strip()

    @staticmethod
    def _parse_action(action: Any) -> VoteAction:
        # Exact match only: "UPVOTE" or " upvote" are rejected.
        if isinstance(action, VoteAction):
            return action
        if isinstance(action, str):
            for candidate in VoteAction:
                if candidate.value == action:
                    return candidate
        raise ValidationError(ValidationErrorKind.INVALID_ACTION)

    # ── Helpers ────────────────────────────────────────────────────────

    @staticmethod
    def _index_of(records: list[FeedbackRecord], feedback_id: str) -> int:
        for index, record in enumerate(records):
            if record.id == feedback_id:
                return index
        logger.info("feedback_not_found", feedback_id=feedback_id)
        raise NotFoundError(feedback_id)

    def _new_id(self, records: list[FeedbackRecord]) -> str:
        existing = {r.id for r in records}
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in existing:
                return candidate
            logger.warning("feedback_id_collision", feedback_id=candidate)
        raise FeedbackTrackerError("Could not generate a unique feedback id")

    def _writing(self) -> contextlib.AbstractAsyncContextManager:
        if self._write_lock is None:
            return contextlib.nullcontext()
        return self._write_lock
