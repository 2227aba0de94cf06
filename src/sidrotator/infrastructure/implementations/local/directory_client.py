"""
Local file-based directory implementation.

Stores device records in a single JSON file using the directory's own
record shape:
    {base_dir}/
        devices.json   {"devices": [{"id": ..., "deviceId": ..., ...}]}
"""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from loguru import logger

from sidrotator.domain.errors import DirectoryServiceError
from sidrotator.infrastructure.repositories.directory_repository import (
    AccessToken,
    DeviceRecord,
    DirectoryClient,
)

LOCAL_TOKEN = "local-development-token"  # NOSONAR - not a real credential


class LocalDirectoryClient(DirectoryClient):
    """
    File-based device directory for local development.

    Not safe for concurrent writers; intended for a single developer process.
    """

    def __init__(self, base_dir: str = "./.directory"):
        """
        Initialize local directory.

        Args:
            base_dir: Directory holding devices.json
        """
        self.base_dir = Path(base_dir)
        self.devices_file = self.base_dir / "devices.json"

        self.base_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized LocalDirectoryClient at {self.devices_file}")

    def _load(self) -> list[dict[str, Any]]:
        """Read all device objects from disk."""
        if not self.devices_file.exists():
            return []
        try:
            data = json.loads(self.devices_file.read_text())
        except json.JSONDecodeError as e:
            raise DirectoryServiceError(
                f"Local directory file is not valid JSON: {e}"
            ) from e
        return list(data.get("devices", []))

    def _save(self, devices: list[dict[str, Any]]) -> None:
        """Write all device objects to disk."""
        self.devices_file.write_text(json.dumps({"devices": devices}, indent=2))

    def add_device(self, record: DeviceRecord) -> None:
        """
        Insert or replace a device record.

        Args:
            record: Record to store (matched on object_id)
        """
        devices = [d for d in self._load() if d.get("id") != record.object_id]
        devices.append(record.to_directory())
        self._save(devices)
        logger.debug(f"Stored local device record {record.object_id}")

    async def get_token(self) -> AccessToken:
        """Issue a local token valid for one hour."""
        return AccessToken(
            token=LOCAL_TOKEN,
            expires_on=datetime.now(UTC) + timedelta(hours=1),
        )

    async def lookup_device(
        self, device_id: str, token: AccessToken
    ) -> DeviceRecord | None:
        """Find a device by deviceId in devices.json."""
        for data in self._load():
            if data.get("deviceId") == device_id:
                return DeviceRecord.from_directory(data)

        logger.debug(f"No local device record for deviceId {device_id}")
        return None

    async def write_attribute(
        self, object_id: str, name: str, value: str, token: AccessToken
    ) -> None:
        """Overwrite an extension attribute in devices.json."""
        devices = self._load()
        for data in devices:
            if data.get("id") == object_id:
                attributes = data.get("extensionAttributes") or {}
                attributes[name] = value
                data["extensionAttributes"] = attributes
                self._save(devices)
                logger.debug(f"Updated {name} on local device record {object_id}")
                return

        raise DirectoryServiceError(f"Device object {object_id} does not exist")
