"""
Application setup utilities.

Adds the informational root endpoint to the application.
"""

from fastapi import FastAPI

from sidrotator import __version__
from sidrotator.api.v1 import SECURITY_IDENTIFIER_PREFIX
from sidrotator.config import get_settings


def add_root_endpoint(app: FastAPI) -> None:
    """
    Add root endpoint to the application.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    @app.get("/")
    async def root() -> dict[str, str | None]:
        """Root endpoint with API information."""
        return {
            "message": settings.project_name,
            "version": __version__,
            "rotate": f"{SECURITY_IDENTIFIER_PREFIX}/rotate",
            "docs": "/docs" if settings.enable_docs else None,
        }
