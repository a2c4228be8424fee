"""FastAPI application factory.

API layer:
- Validates inputs, reads/writes DB
- Returns build and coverage payloads
- Schedules dependency enrichment without waiting for it
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Generator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from buildservice.commits.base import CommitHistoryBase
from buildservice.commits.github import GitHubCommitHistory
from buildservice.config import SERVICE_VERSION, Settings
from buildservice.db.repo import DbSession
from buildservice.db.session import get_session_factory, init_db
from buildservice.worker.enrichment import EnrichmentWorker

logger = logging.getLogger(__name__)


def get_db_session(request: Request) -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_enrichment_worker(request: Request) -> EnrichmentWorker:
    """Dependency to get the application's enrichment worker."""
    return request.app.state.enrichment_worker


async def _invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Invalid request {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Error decoding request"})


def create_app(
    settings: Settings | None = None,
    commit_history: CommitHistoryBase | None = None,
    create_tables: bool = False,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        settings: Runtime settings. Defaults to Settings.from_env().
        commit_history: Source of merge base dates. Defaults to GitHub.
        create_tables: Create missing tables before serving.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings.from_env()
    if commit_history is None:
        commit_history = GitHubCommitHistory(token=settings.github_token)

    if create_tables:
        init_db(settings.database_url)

    session_factory = get_session_factory(settings.database_url)
    enrichment_worker = EnrichmentWorker(
        commit_history=commit_history,
        session_factory=session_factory,
        max_workers=settings.enrichment_workers,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # In-flight enrichments are abandoned on shutdown
        enrichment_worker.shutdown(wait=False)

    app = FastAPI(
        title="Build Service",
        description="Build metadata, coverage history and dependency staleness",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.enrichment_worker = enrichment_worker

    # Dashboards on other hosts read the API directly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _invalid_request_handler)

    # Include routes
    from buildservice.api.routes import builds

    app.include_router(builds.router)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app
