"""Abstract repository interfaces for infrastructure operations."""

from sidrotator.infrastructure.repositories.directory_repository import (
    AccessToken,
    DeviceRecord,
    DirectoryClient,
)

__all__ = [
    "AccessToken",
    "DeviceRecord",
    "DirectoryClient",
]
