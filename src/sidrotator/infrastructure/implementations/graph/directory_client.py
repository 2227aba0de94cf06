"""
Microsoft Graph directory client.

Tokens come from the managed identity endpoint of the hosting environment;
device records are read from and written to the Graph ``devices`` collection.
"""

from datetime import UTC, datetime
from typing import Any

import httpx
from loguru import logger

from sidrotator.domain.errors import DirectoryServiceError
from sidrotator.infrastructure.repositories.directory_repository import (
    AccessToken,
    DeviceRecord,
    DirectoryClient,
)


class GraphDirectoryClient(DirectoryClient):
    """
    Directory client for Microsoft Graph.

    Implements:
    - Managed identity token exchange
    - Device lookup by deviceId
    - Extension attribute updates
    """

    IDENTITY_API_VERSION = "2019-08-01"
    DEVICE_FIELDS = [
        "id",
        "deviceId",
        "displayName",
        "operatingSystem",
        "accountEnabled",
        "extensionAttributes",
    ]

    def __init__(
        self,
        identity_endpoint: str,
        identity_header: str,
        graph_base_url: str = "https://graph.microsoft.com",
        api_version: str = "v1.0",
        client_id: str | None = None,
        timeout: float = 10.0,
    ):
        """
        Initialize Graph directory client.

        Args:
            identity_endpoint: Managed identity token endpoint
            identity_header: Managed identity secret (X-IDENTITY-HEADER)
            graph_base_url: Graph base URL, also used as token resource
            api_version: Graph API version segment
            client_id: Client ID of a user-assigned identity (optional)
            timeout: Timeout in seconds for each HTTP call
        """
        self.identity_endpoint = identity_endpoint
        self.identity_header = identity_header
        self.graph_base_url = graph_base_url.rstrip("/")
        self.api_version = api_version
        self.client_id = client_id
        self.timeout = timeout

    @property
    def devices_url(self) -> str:
        """Graph devices collection URL."""
        return f"{self.graph_base_url}/{self.api_version}/devices"

    @staticmethod
    def _odata_literal(value: str) -> str:
        """Quote a value as an OData string literal."""
        return "'" + value.replace("'", "''") + "'"

    async def get_token(self) -> AccessToken:
        """
        Exchange the managed identity secret for a Graph token.

        Returns:
            AccessToken

        Raises:
            DirectoryServiceError: If the endpoint fails or answers without a token
        """
        params = {
            "resource": self.graph_base_url,
            "api-version": self.IDENTITY_API_VERSION,
        }
        if self.client_id:
            params["client_id"] = self.client_id

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.identity_endpoint,
                    params=params,
                    headers={"X-IDENTITY-HEADER": self.identity_header},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DirectoryServiceError(f"Token acquisition failed: {e}") from e

        try:
            token = data["access_token"]
            expires_on = datetime.fromtimestamp(int(data["expires_on"]), tz=UTC)
        except (KeyError, TypeError, ValueError) as e:
            raise DirectoryServiceError(
                f"Token endpoint returned an unexpected payload: {e}"
            ) from e

        logger.debug(f"Acquired directory token expiring at {expires_on.isoformat()}")
        return AccessToken(token=token, expires_on=expires_on)

    async def lookup_device(
        self, device_id: str, token: AccessToken
    ) -> DeviceRecord | None:
        """
        Look a device up by deviceId.

        Args:
            device_id: Device identifier
            token: Bearer token

        Returns:
            First matching record, or None

        Raises:
            DirectoryServiceError: If the lookup fails
        """
        params = {
            "$filter": f"deviceId eq {self._odata_literal(device_id)}",
            "$select": ",".join(self.DEVICE_FIELDS),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.devices_url,
                    params=params,
                    headers={"Authorization": token.authorization_header},
                )
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DirectoryServiceError(f"Device lookup failed: {e}") from e

        devices = data.get("value", [])
        if not devices:
            return None
        if len(devices) > 1:
            logger.warning(
                f"{len(devices)} directory records share deviceId {device_id}, "
                "using the first one"
            )

        return DeviceRecord.from_directory(devices[0])

    async def write_attribute(
        self, object_id: str, name: str, value: str, token: AccessToken
    ) -> None:
        """
        Patch one extension attribute of a device object.

        Args:
            object_id: Directory object identifier
            name: Extension attribute name
            value: New value
            token: Bearer token

        Raises:
            DirectoryServiceError: If the update fails
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.patch(
                    f"{self.devices_url}/{object_id}",
                    json={"extensionAttributes": {name: value}},
                    headers={"Authorization": token.authorization_header},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise DirectoryServiceError(
                f"Writing {name} on {object_id} failed: {e}"
            ) from e

        logger.debug(f"Wrote {name} on directory object {object_id}")
