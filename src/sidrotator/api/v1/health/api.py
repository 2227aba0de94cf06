"""
Health check endpoints.

Provides health check endpoints for monitoring service status.
"""

from fastapi import APIRouter

from sidrotator import __version__
from sidrotator.api.v1.health.models import HealthResponse
from sidrotator.di import SettingsDep

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """
    Health check endpoint.

    Returns:
        Service status, version and directory provider
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        provider=settings.infrastructure_provider,
        message="Service is healthy",
    )


@router.get("/health/public", response_model=HealthResponse)
async def public_health_check(settings: SettingsDep) -> HealthResponse:
    """
    Public health check endpoint for load balancer probes.

    Returns:
        Service status and version
    """
    return HealthResponse(
        status="ok",
        version=__version__,
        provider=settings.infrastructure_provider,
        message="Public endpoint",
    )
