"""Microsoft Graph directory implementation."""

from sidrotator.infrastructure.implementations.graph.directory_client import (
    GraphDirectoryClient,
)

__all__ = ["GraphDirectoryClient"]
