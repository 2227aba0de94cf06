"""
API v1 endpoints.

Route prefix constants for consistent API versioning.
"""

API_V1_PREFIX: str = ""

# Module-specific prefixes
DEVICE_PREFIX: str = f"{API_V1_PREFIX}/device"
SECURITY_IDENTIFIER_PREFIX: str = f"{DEVICE_PREFIX}/security-identifier"

__all__ = [
    "API_V1_PREFIX",
    "DEVICE_PREFIX",
    "SECURITY_IDENTIFIER_PREFIX",
]
