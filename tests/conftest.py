"""Shared pytest fixtures for the feedback tracker test suite."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from feedback_tracker.models.feedback import FeedbackRecord
from feedback_tracker.providers.feedback.json_file_repository import JsonFileFeedbackRepository
from feedback_tracker.providers.feedback.memory_repository import MemoryFeedbackRepository
from feedback_tracker.services.feedback_store import FeedbackStore

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Deterministic collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Return sequential ids: fb-0001, fb-0002, ..."""
    counter = itertools.count(1)
    return lambda: f"fb-{next(counter):04d}"


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Return a clock that advances one minute per call from FIXED_NOW."""
    ticks = itertools.count(0)
    return lambda: FIXED_NOW + timedelta(minutes=next(ticks))


# ---------------------------------------------------------------------------
# Repositories and stores
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_repository() -> MemoryFeedbackRepository:
    return MemoryFeedbackRepository()


@pytest.fixture
def store(memory_repository, id_factory, clock) -> FeedbackStore:
    """A FeedbackStore over an empty in-memory repository."""
    return FeedbackStore(memory_repository, id_factory=id_factory, clock=clock)


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Path for a JSON document that does not exist yet."""
    return tmp_path / "data" / "feedback.json"


@pytest.fixture
def json_repository(data_file: Path) -> JsonFileFeedbackRepository:
    return JsonFileFeedbackRepository(data_file=data_file, timeout=2.0)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_record(
    feedback_id: str = "fb-test",
    name: str = "Grace Hopper",
    email: str = "grace@example.com",
    message: str = "The new release notes page is very helpful.",
    votes: int = 0,
    created_at: datetime = FIXED_NOW,
) -> FeedbackRecord:
    return FeedbackRecord(
        id=feedback_id,
        name=name,
        email=email,
        message=message,
        votes=votes,
        created_at=created_at,
    )


@pytest.fixture
def record_factory() -> Callable[..., FeedbackRecord]:
    """Expose :func:`make_record` to test modules."""
    return make_record


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
