"""
Application lifecycle management.

Handles startup and shutdown events for the FastAPI application.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sidrotator.config import get_settings
from sidrotator.core.logging import logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()

    logger.info("Starting security identifier rotator...")
    logger.info(f"Application version: {app.version}")
    logger.info(f"Directory provider: {settings.infrastructure_provider}")
    if settings.debug_logging:
        logger.warning("Debug logging enabled: signatures and certificates are logged")

    yield

    logger.info("Shutting down security identifier rotator...")
