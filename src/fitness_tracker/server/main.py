"""
Fitness tracker FastAPI server main entrypoint.
Handles CORS, error handling, startup seeding and API routers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import psutil
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .. import __version__
from ..catalog import seed_catalog
from ..config import SETTINGS
from ..db import close_db, get_session, init_db
from ..logging_setup import setup_logging
from ..services.vision_service import VisionService
from .routes.nutrition import router as r_nutrition
from .routes.profile import router as r_profile
from .routes.progress import router as r_progress
from .routes.workout import router as r_workout


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    try:
        await init_db()
        logging.info("Database initialized")

        if SETTINGS.FF_SEED_CATALOG:
            await seed_catalog()

        logging.info("FastAPI server startup completed")
    except Exception as e:
        logging.exception("FastAPI startup failed: %s", e)
        raise

    yield

    # Shutdown
    try:
        await close_db()
        logging.info("FastAPI server shutdown completed")
    except Exception as e:
        logging.exception("FastAPI shutdown failed: %s", e)


app = FastAPI(
    title="Fitness Tracker API",
    description="Profiles, weekly workout plans, meal logging and progress",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exc_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler: log and return a generic error response.
    """
    logging.exception("Unhandled error in %s: %s", request.url, exc)
    return JSONResponse(
        {"ok": False, "error": "internal_error", "message": "Internal server error"},
        status_code=500,
    )


async def _database_ok() -> bool:
    try:
        sessmaker = get_session()
        async with sessmaker() as s:
            await s.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logging.warning("Database health check failed: %s", e)
        return False


@app.get("/healthz")
async def healthz() -> dict:
    """
    Health check endpoint with system and database status.
    """
    try:
        memory = psutil.virtual_memory()
        cpu_percent = psutil.cpu_percent(interval=0.1)
        db_ok = await _database_ok()

        is_healthy = (
            memory.percent < 90  # Memory usage under 90%
            and cpu_percent < 95  # CPU usage under 95%
            and db_ok
        )

        return {
            "ok": is_healthy,
            "status": "healthy" if is_healthy else "degraded",
            "timestamp": datetime.now(UTC).isoformat(),
            "system": {
                "memory_percent": round(memory.percent, 1),
                "memory_available_mb": round(memory.available / 1024 / 1024, 1),
                "cpu_percent": round(cpu_percent, 1),
            },
            "database": {"status": "up" if db_ok else "down"},
            "vision": {
                "enabled": SETTINGS.FF_MEAL_VISION,
                "configured": VisionService().is_available(),
            },
        }

    except Exception as e:
        logging.exception("Health check failed: %s", e)
        return {
            "ok": False,
            "status": "error",
            "timestamp": datetime.now(UTC).isoformat(),
            "error": str(e),
        }


@app.get("/")
async def root() -> dict:
    """
    Root endpoint with API information.
    """
    return {
        "ok": True,
        "name": "Fitness Tracker API",
        "version": __version__,
        "description": "Weekly workout plans, daily goals and meal tracking",
    }


# Routers for API endpoints
app.include_router(r_profile, prefix="/api/v1", tags=["profile"])
app.include_router(r_workout, prefix="/api/v1", tags=["workout"])
app.include_router(r_nutrition, prefix="/api/v1", tags=["nutrition"])
app.include_router(r_progress, prefix="/api/v1", tags=["progress"])
