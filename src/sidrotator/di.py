"""
Dependency injection container for the rotation backend.

Provides centralized dependency injection using FastAPI's Depends
with typing.Annotated for clean type hints throughout the application.
"""

from typing import Annotated

from fastapi import Depends

from sidrotator.api.v1.device.services import SecurityIdentifierService
from sidrotator.config import Settings, get_settings
from sidrotator.infrastructure import InfrastructureFactory
from sidrotator.infrastructure.repositories import DirectoryClient

# ============================================================================
# Settings Dependencies
# ============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings)]
"""Injected Settings instance (cached via lru_cache)."""


# ============================================================================
# Infrastructure Dependencies
# ============================================================================


def get_infrastructure_factory(
    settings: SettingsDep,
) -> InfrastructureFactory:
    """
    Get infrastructure factory from settings.

    Args:
        settings: Application settings (injected)

    Returns:
        Configured infrastructure factory
    """
    return InfrastructureFactory.from_settings(settings)


InfrastructureFactoryDep = Annotated[
    InfrastructureFactory, Depends(get_infrastructure_factory)
]
"""Injected InfrastructureFactory instance."""


def get_directory_client(
    factory: InfrastructureFactoryDep,
) -> DirectoryClient:
    """
    Get directory client for the configured provider.

    Args:
        factory: Infrastructure factory (injected)

    Returns:
        Directory client

    Raises:
        ValueError: If the provider is unsupported or not configured
    """
    return factory.get_directory_client()


DirectoryClientDep = Annotated[DirectoryClient, Depends(get_directory_client)]
"""Injected DirectoryClient."""


# ============================================================================
# Rotation Service Dependencies
# ============================================================================


def get_security_identifier_service(
    directory: DirectoryClientDep,
    settings: SettingsDep,
) -> SecurityIdentifierService:
    """
    Get Security Identifier rotation service.

    Args:
        directory: Directory client (injected)
        settings: Application settings (injected)

    Returns:
        Rotation service bound to the configured rotation policy
    """
    return SecurityIdentifierService(directory, settings.get_rotation_policy())


SecurityIdentifierServiceDep = Annotated[
    SecurityIdentifierService, Depends(get_security_identifier_service)
]
"""Injected SecurityIdentifierService."""
