"""FastAPI application for the progress-fit JSON API."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..db.engine import get_db_path, init_db
from ..db.repositories import (
    NutritionEntryRepository,
    PreferencesRepository,
    UserProfileRepository,
    WorkoutRepository,
)
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..services.nutrition_service import NutritionService
from ..services.workout_service import WorkoutService
from .routers import nutrition, workouts

logger = logging.getLogger(__name__)


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if db_path is None:
        db_path = get_db_path()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - runs on startup and shutdown."""
        await init_db(db_path)
        yield

    app = FastAPI(
        title="progress-fit",
        description="Workout and nutrition tracking API",
        version=__version__,
        lifespan=lifespan,
    )

    # Services keep per-aggregate locks, so one instance serves every request
    app.state.workout_service = WorkoutService(WorkoutRepository(db_path))
    app.state.nutrition_service = NutritionService(NutritionEntryRepository(db_path))
    app.state.profiles = UserProfileRepository(db_path)
    app.state.preferences = PreferencesRepository(db_path)

    app.include_router(workouts.router)
    app.include_router(nutrition.router)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
