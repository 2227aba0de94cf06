"""
Infrastructure factory for directory provider selection.

Selects the directory client implementation based on configuration:
- local: JSON file for development and tests
- graph: Microsoft Graph with a managed identity token

Usage:
    from sidrotator.infrastructure import InfrastructureFactory
    from sidrotator.config import get_settings

    factory = InfrastructureFactory.from_settings(get_settings())
    directory = factory.get_directory_client()
"""

from typing import TYPE_CHECKING, Literal

from loguru import logger

from sidrotator.infrastructure.repositories import DirectoryClient

if TYPE_CHECKING:
    from sidrotator.config import Settings

InfrastructureProvider = Literal["local", "graph"]


class InfrastructureFactory:
    """
    Factory for creating directory client instances.

    Keeps the rotation service independent from any concrete transport.
    """

    def __init__(self, provider: InfrastructureProvider | None = None, **config):
        """
        Initialize infrastructure factory.

        Args:
            provider: Directory provider ("local", "graph").
                     If None, uses "local" as default.
            **config: Provider-specific configuration options

        Example:
            factory = InfrastructureFactory(
                provider="graph",
                identity_endpoint="http://127.0.0.1:41741/msi/token",
                identity_header="secret",
            )
        """
        if provider is None:
            provider = "local"

        self.provider = provider
        self.config = config

        logger.info(f"Initialized InfrastructureFactory with provider: {provider}")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "InfrastructureFactory":
        """
        Create factory from Settings object.

        Args:
            settings: Application settings from config.py

        Returns:
            InfrastructureFactory configured from settings
        """
        config = {
            "base_dir": settings.infrastructure_base_dir,
            "identity_endpoint": settings.identity_endpoint,
            "identity_header": settings.identity_header,
            "client_id": settings.managed_identity_client_id,
            "graph_base_url": settings.graph_base_url,
            "graph_api_version": settings.graph_api_version,
            "timeout": settings.directory_timeout_seconds,
        }

        return cls(provider=settings.infrastructure_provider, **config)

    def get_directory_client(self) -> DirectoryClient:
        """
        Get directory client for configured provider.

        Returns:
            DirectoryClient implementation

        Raises:
            ValueError: If provider is not supported or not configured
        """
        if self.provider == "local":
            from sidrotator.infrastructure.implementations.local import (
                LocalDirectoryClient,
            )

            base_dir = self.config.get("base_dir", "./.directory")
            return LocalDirectoryClient(base_dir=base_dir)

        elif self.provider == "graph":
            from sidrotator.infrastructure.implementations.graph import (
                GraphDirectoryClient,
            )

            identity_endpoint = self.config.get("identity_endpoint")
            identity_header = self.config.get("identity_header")
            if not identity_endpoint or not identity_header:
                raise ValueError("Managed identity endpoint not configured")

            return GraphDirectoryClient(
                identity_endpoint=identity_endpoint,
                identity_header=identity_header,
                graph_base_url=self.config.get(
                    "graph_base_url", "https://graph.microsoft.com"
                ),
                api_version=self.config.get("graph_api_version", "v1.0"),
                client_id=self.config.get("client_id") or None,
                timeout=self.config.get("timeout", 10.0),
            )

        else:
            raise ValueError(f"Unsupported provider: {self.provider}")
