"""Projects API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - The error Guard is the outermost user middleware (added last)
    - Settings are read once and passed into the Guard, the reporter and init_db
    - A failed startup is reported once (if API_BASE_URL is set) and then re-raised

Design Decisions:
    - create_app() factory: tests build isolated apps with their own Settings and
      reporter transport; the module-level `app` serves uvicorn
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Startup report is awaited (bounded by the report timeout) rather than detached:
      the process is about to exit and would cancel a detached task
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from projects_api.api.error_handlers import register_error_handlers
from projects_api.api.middleware import ErrorReportingMiddleware
from projects_api.api.routes import diagnostics, health, projects
from projects_api.config import Settings, get_settings
from projects_api.core.error_report import RequestSnapshot, build_error_report
from projects_api.infrastructure.database import close_db, init_db
from projects_api.infrastructure.error_reporter import ErrorReporter
from projects_api.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

SERVICE_TITLE = "Projects API"
SERVICE_VERSION = "1.0.0"
STARTUP_ERROR_PATH = "/api/Mentor/runtime-error"
STARTUP_SNAPSHOT_VALUE = "STARTUP"
STARTUP_USER_AGENT = "STARTUP_ERROR"


async def report_startup_failure(
    settings: Settings,
    exc: BaseException,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Send one report for a startup failure to <API_BASE_URL>/api/Mentor/runtime-error."""
    if not settings.api_base_url:
        return False
    url = f"{settings.api_base_url.rstrip('/')}{STARTUP_ERROR_PATH}"
    snapshot = RequestSnapshot(
        path=STARTUP_SNAPSHOT_VALUE,
        method=STARTUP_SNAPSHOT_VALUE,
        user_agent=STARTUP_USER_AGENT,
        board_id=settings.board_id,
    )
    reporter = ErrorReporter(
        url, settings.error_report_timeout_seconds, transport=transport,
    )
    try:
        report = build_error_report(snapshot, exc)
        return await reporter.send(report)
    except Exception as e:
        logger.error(f"Failed to report startup error: {e}", exc_info=True)
        return False


def create_app(
    settings: Settings | None = None,
    reporter: ErrorReporter | None = None,
) -> FastAPI:
    """Build the FastAPI application from explicit settings."""
    settings = settings or get_settings()
    reporter = reporter or ErrorReporter(
        settings.runtime_error_endpoint_url,
        settings.error_report_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        try:
            if settings.database_url:
                init_db(
                    settings.database_url,
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                )
            else:
                logger.warning("DATABASE_URL is not set - CRUD endpoints will fail")
        except Exception as exc:
            logger.error(
                f"[STARTUP ERROR] Application failed to start: {exc}",
                exc_info=True,
            )
            await report_startup_failure(settings, exc)
            raise
        logger.info(
            f"{SERVICE_TITLE} started",
            extra={"report_url": reporter.endpoint_url},
        )
        yield
        logger.info(f"{SERVICE_TITLE} shutting down")
        await reporter.drain()
        await close_db()

    app = FastAPI(
        title=SERVICE_TITLE, version=SERVICE_VERSION, lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.error_reporter = reporter

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last → outermost: sees every exception the inner stack lets through
    app.add_middleware(
        ErrorReportingMiddleware,
        reporter=reporter,
        default_board_id=settings.board_id,
    )

    @app.get("/")
    async def root():
        """Service banner."""
        return {
            "message": "Backend API is running",
            "status": "ok",
            "docs": "/docs",
            "api": settings.api_prefix,
        }

    app.include_router(health.router)
    app.include_router(diagnostics.router, prefix=settings.api_prefix)
    app.include_router(projects.router, prefix=settings.api_prefix)
    return app


app = create_app()
