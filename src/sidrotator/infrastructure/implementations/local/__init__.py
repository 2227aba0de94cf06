"""Local file-based directory implementation for development."""

from sidrotator.infrastructure.implementations.local.directory_client import (
    LocalDirectoryClient,
)

__all__ = ["LocalDirectoryClient"]
