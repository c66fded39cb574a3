"""Feedback tracker FastAPI application entry point.

Wires the persistence backend, the feedback store and the HTTP routes
together.  Loads configuration from ``.env`` and ``config/config.yaml``,
configures structured logging, and runs under uvicorn when executed
directly (``python -m feedback_tracker.main``).

``build_repository`` / ``build_feedback_store`` are shared with the CLI so
both front-ends talk to the same backend for the same settings.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from feedback_tracker.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from feedback_tracker.api.routes import router as api_router
from feedback_tracker.config.loader import load_config
from feedback_tracker.config.settings import Settings
from feedback_tracker.interfaces.feedback_repository import IFeedbackRepository
from feedback_tracker.providers.feedback.json_file_repository import JsonFileFeedbackRepository
from feedback_tracker.providers.feedback.memory_repository import MemoryFeedbackRepository
from feedback_tracker.providers.feedback.sqlite_repository import SQLiteFeedbackRepository
from feedback_tracker.services.feedback_store import FeedbackStore
from feedback_tracker.utils.errors import ConfigurationError
from feedback_tracker.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=settings.is_production(),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def build_repository(app_settings: Settings) -> IFeedbackRepository:
    """Select the persistence backend named by ``feedback_backend``."""
    backend = app_settings.feedback_backend.strip().lower()
    if backend == "json":
        return JsonFileFeedbackRepository(
            data_file=app_settings.feedback_data_file,
            timeout=app_settings.persistence_timeout,
        )
    if backend == "sqlite":
        return SQLiteFeedbackRepository(
            db_path=app_settings.feedback_db_path,
            timeout=app_settings.persistence_timeout,
        )
    if backend == "memory":
        return MemoryFeedbackRepository()
    raise ConfigurationError(
        f"Unknown FEEDBACK_BACKEND {app_settings.feedback_backend!r}; "
        "expected one of: json, sqlite, memory"
    )


def build_feedback_store(app_settings: Settings) -> FeedbackStore:
    """Construct the store with the configured backend."""
    return FeedbackStore(
        repository=build_repository(app_settings),
        serialize_writes=app_settings.serialize_writes,
    )


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every component for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    return {
        "feedback_store": build_feedback_store(app_settings),
        "version": app_settings.app_version,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build (or adopt injected) components on startup, log on shutdown."""
    components = getattr(application.state, "components", None) or _build_all(settings)
    for key, value in components.items():
        setattr(application.state, key, value)

    store: FeedbackStore = application.state.feedback_store
    await store.repository.initialize()

    _logger.info(
        "app_startup",
        version=getattr(application.state, "version", settings.app_version),
        environment=settings.app_env,
        backend=store.repository.get_provider_name(),
        url=f"http://localhost:{settings.app_port}",
        started_at=datetime.now(tz=timezone.utc).isoformat(),
    )

    yield

    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(components: dict[str, Any] | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Optional pre-built components (``feedback_store``, ``version``).
        Tests pass these to run against an in-memory store; when omitted
        the lifespan builds them from settings.
    """
    application = FastAPI(
        title=config.get("app", {}).get("title", "Feedback Tracker API"),
        version=settings.app_version,
        description=config.get("app", {}).get(
            "description",
            "Collect, browse, vote on and delete named feedback messages.",
        ),
        lifespan=_lifespan,
    )

    if components:
        application.state.components = components

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, config.get("cors"))
    register_exception_handlers(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "feedback_tracker.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
