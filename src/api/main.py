"""
FastAPI application for the Vigilant wellbeing service.

Provides REST API for:
- Usage recording and daily totals
- Lockout state and override
- Fatigue advisories
- Emergency alerts to guardians
- Profile, guardian and routine management
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, get_settings
from src.core.engine import WellbeingEngine, build_engine
from src.core.scheduler import build_polling_scheduler
from src.db.database import check_connection, get_engine, get_session_factory, init_db


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        check_connection()
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


def create_app(
    settings: Settings | None = None,
    engine: WellbeingEngine | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Application settings (cached settings when omitted)
        engine: Prebuilt engine (built from the default database when omitted)
        start_scheduler: Override settings.scheduler_enabled
    """
    settings = settings or get_settings()
    run_scheduler = settings.scheduler_enabled if start_scheduler is None else start_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        logger.info("Starting Vigilant wellbeing service...")
        owns_engine = engine is None
        if owns_engine:
            init_db(get_engine())
            app.state.engine = build_engine(settings, get_session_factory())
        else:
            app.state.engine = engine

        stop = asyncio.Event()
        scheduler_task = None
        if run_scheduler:
            scheduler = build_polling_scheduler(app.state.engine, settings)
            scheduler_task = asyncio.create_task(scheduler.run_forever(stop))

        yield

        logger.info("Shutting down Vigilant wellbeing service...")
        stop.set()
        if scheduler_task is not None:
            scheduler_task.cancel()
            await asyncio.gather(scheduler_task, return_exceptions=True)
        if owns_engine:
            await app.state.engine.aclose()

    app = FastAPI(
        title="Vigilant",
        description="""
        Usage accounting and adaptive lockout for digital wellbeing.

        ## Features

        - **Usage**: Append-only usage log with a daily budget
        - **Lockout**: Automatic lock when the budget is exceeded, explicit override to clear
        - **Advisory**: AI fatigue score and recommendation (display only)
        - **Emergency**: One alert pass per incident to every guardian
        """,
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Health"])
    def root() -> dict[str, str]:
        """Root endpoint returning service info."""
        return {"service": "vigilant", "version": "1.0.0", "status": "ok"}

    @app.get("/health", tags=["Health"])
    def health_check() -> dict[str, Any]:
        """Health check with component status."""
        db_status, db_error = _check_database_health() if engine is None else ("ok", None)
        result: dict[str, Any] = {
            "status": "healthy" if db_status == "ok" else "unhealthy",
            "timestamp": datetime.utcnow().isoformat(),
            "components": {
                "database": db_status,
                "ai": "configured" if settings.has_ai_configured() else "not_configured",
                "notifications": "webhook" if settings.has_webhook_configured() else "log",
                "scheduler": "running" if run_scheduler else "disabled",
            },
        }
        if db_error:
            result["errors"] = {"database": db_error}
        return result

    from src.api.routers import (
        advisory_router,
        emergency_router,
        guardians_router,
        profile_router,
        routines_router,
        usage_router,
    )

    app.include_router(profile_router.router, prefix="/api/user", tags=["Profile"])
    app.include_router(guardians_router.router, prefix="/api/guardians", tags=["Guardians"])
    app.include_router(routines_router.router, prefix="/api/routines", tags=["Routines"])
    app.include_router(usage_router.router, prefix="/api", tags=["Usage"])
    app.include_router(advisory_router.router, prefix="/api/advisory", tags=["Advisory"])
    app.include_router(emergency_router.router, prefix="/api/emergency", tags=["Emergency"])

    return app


app = create_app()
