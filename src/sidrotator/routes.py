"""
Routes registration for the FastAPI application.

Centralizes all router registrations for clean application setup.
"""

from fastapi import FastAPI

from sidrotator.api.v1.device.router import router as device_router
from sidrotator.api.v1.health.router import router as health_router


def register_routes(app: FastAPI) -> None:
    """
    Register all application routers.

    Args:
        app: FastAPI application instance
    """
    # Health check endpoints (no prefix, public)
    app.include_router(health_router)

    # Security identifier rotation endpoints
    app.include_router(device_router)
