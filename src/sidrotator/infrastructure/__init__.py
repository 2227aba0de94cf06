"""
Infrastructure abstraction layer for directory access.

Supports multiple providers via factory pattern:
- local: JSON file for development and tests
- graph: Microsoft Graph with a managed identity token
"""

from sidrotator.infrastructure.factory import InfrastructureFactory

__all__ = ["InfrastructureFactory"]
