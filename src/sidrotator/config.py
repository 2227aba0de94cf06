"""
Application configuration and environment variables.

This module unifies configuration using pydantic-settings.
Variables can come from:
1. .env file
2. System environment variables (have priority)
3. Default values

Naming convention:
- In Python code: snake_case (identity_endpoint)
- In .env or ENV vars: UPPER_CASE (IDENTITY_ENDPOINT)
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class RotationPolicy:
    """
    Rotation rules handed to the rotation service at construction time.

    Attributes:
        expected_operating_system: Platform tag a record must carry to rotate
        identifier_attribute: Extension attribute holding the Security Identifier
        expiration_attribute: Extension attribute holding its expiration date
        reveal_sensitive_values: Log signatures and certificates unredacted
    """

    expected_operating_system: str = "MacMDM"
    identifier_attribute: str = "extensionAttribute1"
    expiration_attribute: str = "extensionAttribute2"
    reveal_sensitive_values: bool = False


class Settings(BaseSettings):
    """
    Unified application configuration.

    All variables can be defined in:
    - .env file: VARIABLE_NAME=value
    - Environment variables: export VARIABLE_NAME=value

    Example:
        # In .env or as environment variable:
        INFRASTRUCTURE_PROVIDER=graph
        IDENTITY_ENDPOINT=http://127.0.0.1:41741/msi/token
        DEBUG_LOGGING=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================================
    # PROJECT SETTINGS
    # ============================================================================
    project_name: str = Field(
        default="Security Identifier Rotator", description="Project name"
    )
    project_description: str = Field(
        default="Rotates device security identifiers after certificate proof of possession",
        description="Project description",
    )

    # ============================================================================
    # SERVER SETTINGS
    # ============================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")
    enable_docs: bool = Field(
        default=False, description="Enable API documentation (Swagger/ReDoc)"
    )

    # ============================================================================
    # LOGGING SETTINGS
    # ============================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | trace_id={extra[trace_id]} | {name}:{function}:{line} - {message}",  # noqa: E501
        description="Log format",
    )
    logger_enqueue: bool = Field(
        default=False, description="Enqueue logs using multiprocessing"
    )
    debug_logging: bool = Field(
        default=False,
        description="Log signature and certificate values without redaction",
    )

    # ============================================================================
    # INFRASTRUCTURE SETTINGS (Directory access)
    # ============================================================================
    infrastructure_provider: str = Field(
        default="local",
        description="Directory provider (local, graph)",
    )
    infrastructure_base_dir: str = Field(
        default="./.directory",
        description="Base directory for the local device directory file",
    )

    # Managed identity (token exchange)
    identity_endpoint: str = Field(
        default="", description="Managed identity token endpoint"
    )
    identity_header: str = Field(
        default="", description="Managed identity secret sent as X-IDENTITY-HEADER"
    )
    managed_identity_client_id: str = Field(
        default="", description="Client ID of a user-assigned managed identity"
    )

    # Microsoft Graph
    graph_base_url: str = Field(
        default="https://graph.microsoft.com", description="Graph API base URL"
    )
    graph_api_version: str = Field(default="v1.0", description="Graph API version")
    directory_timeout_seconds: float = Field(
        default=10.0, description="Timeout for each directory HTTP call"
    )

    # ============================================================================
    # ROTATION POLICY SETTINGS
    # ============================================================================
    expected_operating_system: str = Field(
        default="MacMDM",
        description="Operating system tag of records eligible for rotation",
    )
    identifier_attribute: str = Field(
        default="extensionAttribute1",
        description="Extension attribute storing the security identifier",
    )
    expiration_attribute: str = Field(
        default="extensionAttribute2",
        description="Extension attribute storing the identifier expiration date",
    )

    # ============================================================================
    # HELPER METHODS
    # ============================================================================

    def get_rotation_policy(self) -> RotationPolicy:
        """
        Build the rotation policy from the current settings.

        Returns:
            RotationPolicy: Immutable policy for the rotation service.
        """
        return RotationPolicy(
            expected_operating_system=self.expected_operating_system,
            identifier_attribute=self.identifier_attribute,
            expiration_attribute=self.expiration_attribute,
            reveal_sensitive_values=self.debug_logging,
        )


# ============================================================================
# SINGLETON PATTERN - Global settings instance
# ============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings (LRU cached).

    This function is cached, so the .env file is only read once.
    To refresh the configuration, clear the cache:
        get_settings.cache_clear()

    Returns:
        Settings: Application configuration instance.
    """
    return Settings()


settings = get_settings()
