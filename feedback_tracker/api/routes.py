"""FastAPI routes for the feedback API.

Each handler is a thin mapping from an HTTP request to one FeedbackStore
operation.  The store is resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern; domain errors raised by the store propagate to
``ErrorHandlingMiddleware``, which picks the status code.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                 Method  Description
# ─────────────────────────────────────────────────────────────────────
# /feedback                GET     List all feedback, newest first
# /feedback                POST    Create feedback (201)
# /feedback/{id}/vote      PUT     Upvote or downvote
# /feedback/{id}           DELETE  Delete feedback
# /stats                   GET     Aggregate statistics
# /health                  GET     Liveness, uptime and version
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from feedback_tracker.api.schemas import (
    CreateFeedbackRequest,
    DeleteFeedbackResponse,
    ErrorResponse,
    HealthResponse,
    VoteRequest,
)
from feedback_tracker.models.feedback import FeedbackRecord, StatsSummary
from feedback_tracker.services.feedback_store import FeedbackStore

logger = structlog.get_logger(logger_name=__name__)

router = APIRouter(tags=["feedback"])

_PROCESS_STARTED = time.monotonic()
_DEFAULT_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_feedback_store(request: Request) -> FeedbackStore:
    """Retrieve the FeedbackStore from app state; raise 503 if unavailable."""
    store = getattr(request.app.state, "feedback_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Feedback store unavailable")
    return store


FeedbackStoreDep = Annotated[FeedbackStore, Depends(_get_feedback_store)]


# ---------------------------------------------------------------------------
# Feedback endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/feedback",
    response_model=list[FeedbackRecord],
    responses={500: {"model": ErrorResponse}},
    summary="List all feedback, newest first",
)
async def list_feedback(store: FeedbackStoreDep) -> list[FeedbackRecord]:
    return await store.list()


@router.post(
    "/feedback",
    response_model=FeedbackRecord,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Submit new feedback",
)
async def create_feedback(body: CreateFeedbackRequest, store: FeedbackStoreDep) -> FeedbackRecord:
    """Validate and store a new feedback message with zero votes."""
    return await store.create(name=body.name, email=body.email, message=body.message)


@router.put(
    "/feedback/{feedback_id}/vote",
    response_model=FeedbackRecord,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Upvote or downvote a feedback entry",
)
async def vote_feedback(
    feedback_id: str,
    body: VoteRequest,
    store: FeedbackStoreDep,
) -> FeedbackRecord:
    return await store.vote(feedback_id, body.action)


@router.delete(
    "/feedback/{feedback_id}",
    response_model=DeleteFeedbackResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Delete a feedback entry",
)
async def delete_feedback(feedback_id: str, store: FeedbackStoreDep) -> DeleteFeedbackResponse:
    """Remove the entry and echo it back."""
    removed = await store.delete(feedback_id)
    return DeleteFeedbackResponse(message="Feedback deleted successfully", feedback=removed)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/stats",
    response_model=StatsSummary,
    responses={500: {"model": ErrorResponse}},
    summary="Aggregate feedback statistics",
)
async def get_stats(store: FeedbackStoreDep) -> StatsSummary:
    return await store.stats()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return liveness, process uptime and the deployed version."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(tz=timezone.utc),
        uptime=round(time.monotonic() - _PROCESS_STARTED, 3),
        version=getattr(request.app.state, "version", _DEFAULT_VERSION),
    )
