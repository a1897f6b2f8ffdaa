from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grievance_tracker.api.v1.router import router as api_v1_router
from grievance_tracker.config.settings import settings
from grievance_tracker.core.logging import configure_logging, get_logger
from grievance_tracker.core.middleware import register_middlewares
from grievance_tracker.db.init_db import init_db
from grievance_tracker.services.background import EscalationScheduler
from grievance_tracker.utils.email import shutdown_email_transport

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if not settings.is_production:
        # For dev/demo only; production schemas come from migrations
        init_db()

    scheduler = None
    if settings.ESCALATION_SCHEDULER_MODE == "inline":
        scheduler = EscalationScheduler()
        scheduler.start()
    app.state.escalation_scheduler = scheduler
    logger.info(
        f"{settings.APP_NAME} started",
        extra={"scheduler_mode": settings.ESCALATION_SCHEDULER_MODE},
    )

    yield

    if scheduler is not None:
        scheduler.stop(wait=False)
    shutdown_email_transport(wait=False)


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/health", tags=["Health"])
    def health() -> dict:
        return {"status": "ok", "version": settings.APP_VERSION}

    return app


app = create_app()
