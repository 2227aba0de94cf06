"""
Abstract interface for the identity directory.

The rotation pipeline only needs three operations from the directory:
- Acquire a bearer token
- Look a device record up by its device identifier
- Write a single extension attribute on a record
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class AccessToken:
    """
    Bearer token for directory calls.

    Attributes:
        token: Raw bearer token
        expires_on: Expiration timestamp (UTC)
    """

    token: str
    expires_on: datetime

    @property
    def is_expired(self) -> bool:
        """Whether the token is past its expiration time."""
        return datetime.now(UTC) >= self.expires_on

    @property
    def authorization_header(self) -> str:
        """Value for the Authorization header."""
        return f"Bearer {self.token}"


@dataclass
class DeviceRecord:
    """
    Directory device record.

    Attributes:
        object_id: Directory object identifier (the record key for writes)
        device_id: Device identifier supplied by the device itself
        operating_system: Platform tag of the record
        account_enabled: Whether the record is enabled
        display_name: Human-readable device name
        extension_attributes: Free-form extension attributes by name
    """

    object_id: str
    device_id: str
    operating_system: str | None
    account_enabled: bool
    display_name: str | None = None
    extension_attributes: dict[str, Any] = field(default_factory=dict)

    def extension_attribute(self, name: str) -> str | None:
        """
        Get an extension attribute value, treating blank strings as absent.

        Args:
            name: Attribute name (e.g. extensionAttribute1)

        Returns:
            The value as stripped text, or None when unset
        """
        value = self.extension_attributes.get(name)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @classmethod
    def from_directory(cls, data: dict[str, Any]) -> "DeviceRecord":
        """
        Build a record from the directory's JSON representation.

        Args:
            data: Device object as returned by the directory

        Returns:
            DeviceRecord
        """
        return cls(
            object_id=data["id"],
            device_id=data.get("deviceId", ""),
            operating_system=data.get("operatingSystem"),
            account_enabled=bool(data.get("accountEnabled", False)),
            display_name=data.get("displayName"),
            extension_attributes=dict(data.get("extensionAttributes") or {}),
        )

    def to_directory(self) -> dict[str, Any]:
        """Convert to the directory's JSON representation."""
        return {
            "id": self.object_id,
            "deviceId": self.device_id,
            "displayName": self.display_name,
            "operatingSystem": self.operating_system,
            "accountEnabled": self.account_enabled,
            "extensionAttributes": dict(self.extension_attributes),
        }


class DirectoryClient(ABC):
    """
    Abstract interface for directory operations.

    Implementations raise DirectoryServiceError when the directory cannot be
    reached or answers with an error status.
    """

    @abstractmethod
    async def get_token(self) -> AccessToken:
        """
        Acquire a bearer token for the directory.

        Returns:
            AccessToken
        """
        pass

    @abstractmethod
    async def lookup_device(
        self, device_id: str, token: AccessToken
    ) -> DeviceRecord | None:
        """
        Find the record of a device.

        Args:
            device_id: Device identifier
            token: Bearer token from get_token()

        Returns:
            The matching record, or None when no record matches
        """
        pass

    @abstractmethod
    async def write_attribute(
        self, object_id: str, name: str, value: str, token: AccessToken
    ) -> None:
        """
        Overwrite one extension attribute of a record.

        Args:
            object_id: Directory object identifier of the record
            name: Extension attribute name
            value: New value
            token: Bearer token from get_token()
        """
        pass
