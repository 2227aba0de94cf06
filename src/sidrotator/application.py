"""
FastAPI application factory.

Creates and configures the FastAPI application with middleware,
routers, and exception handlers.
"""

from fastapi import FastAPI
from starlette.exceptions import HTTPException

from sidrotator import __version__
from sidrotator.config import get_settings
from sidrotator.core.logging import logger
from sidrotator.domain.errors import RotationError
from sidrotator.exception_handlers import (
    http_exception_handler,
    rotation_exception_handler,
)
from sidrotator.lifespan import lifespan
from sidrotator.middleware import TraceIDMiddleware
from sidrotator.openapi import configure_openapi
from sidrotator.routes import register_routes


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    # Must be set BEFORE creating FastAPI instance
    docs_url = "/docs" if settings.enable_docs else None
    redoc_url = "/redoc" if settings.enable_docs else None
    openapi_url = "/openapi.json" if settings.enable_docs else None

    app = FastAPI(
        title=settings.project_name,
        description=settings.project_description,
        version=__version__,
        lifespan=lifespan,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
    )

    app.add_exception_handler(RotationError, rotation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    app.add_middleware(TraceIDMiddleware)

    register_routes(app)

    configure_openapi(app)

    logger.info(f"FastAPI application created (v{__version__})")

    return app
