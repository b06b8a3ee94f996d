from fastapi import FastAPI

from .administration import router as administration_router
from .notifications import realtime_router as notifications_realtime_router
from .notifications import router as notifications_router
from .preferences import router as preferences_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(administration_router)
    app.include_router(notifications_router)
    app.include_router(notifications_realtime_router)
    app.include_router(preferences_router)
