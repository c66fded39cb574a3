"""Feedback tracker API layer - routes, schemas, and middleware."""

from feedback_tracker.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from feedback_tracker.api.routes import router
from feedback_tracker.api.schemas import (
    CreateFeedbackRequest,
    DeleteFeedbackResponse,
    ErrorResponse,
    HealthResponse,
    VoteRequest,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "register_exception_handlers",
    "router",
    "CreateFeedbackRequest",
    "DeleteFeedbackResponse",
    "ErrorResponse",
    "HealthResponse",
    "VoteRequest",
]
