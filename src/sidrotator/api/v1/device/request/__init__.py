"""Security Identifier Rotation Request Models."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from sidrotator.domain.errors import ValidationError

SENSITIVE_FIELDS = frozenset({"Signature", "FullPem"})


class RotationRequest(BaseModel):
    """
    Request to rotate a device's Security Identifier.

    Every field is optional at parse time; presence is enforced by the
    rotation service so that missing values produce its own 400 response.

    Attributes:
        device_id: Device identifier (DeviceID)
        serial_number: Hardware serial number (SerialNumber)
        signature: Base64 signature over the directory object id (Signature)
        thumbprint: Hex SHA-1 thumbprint of the certificate (Thumbprint)
        expiration_date: New expiration date, yyyy-MM-dd (ExpirationDate)
        full_pem: Base64-encoded certificate (FullPem)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    device_id: str | None = Field(
        None, alias="DeviceID", description="Device identifier"
    )
    serial_number: str | None = Field(
        None, alias="SerialNumber", description="Hardware serial number"
    )
    signature: str | None = Field(
        None,
        alias="Signature",
        description="Base64 signature over the device's directory object id",
    )
    thumbprint: str | None = Field(
        None, alias="Thumbprint", description="Hex SHA-1 certificate thumbprint"
    )
    expiration_date: str | None = Field(
        None,
        alias="ExpirationDate",
        description="Expiration date of the new identifier (yyyy-MM-dd)",
    )
    full_pem: str | None = Field(
        None, alias="FullPem", description="Base64-encoded certificate"
    )

    @classmethod
    def from_sources(
        cls, body: Any, headers: Mapping[str, str] | None = None
    ) -> "RotationRequest":
        """
        Build a request from a JSON body, falling back to same-named headers.

        Args:
            body: Decoded JSON body (anything other than an object is ignored)
            headers: Request headers

        Returns:
            RotationRequest

        Raises:
            ValidationError: If a field has a non-string value
        """
        payload = body if isinstance(body, dict) else {}
        headers = headers or {}

        merged: dict[str, Any] = {}
        for field_info in cls.model_fields.values():
            alias = field_info.alias
            value = payload.get(alias)
            if value is None:
                value = headers.get(alias)
            merged[alias] = value

        try:
            return cls.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Malformed rotation request: {e.error_count()} invalid field(s)"
            ) from e

    def field_values(self) -> list[tuple[str, str | None]]:
        """
        Get (wire name, value) pairs in validation order.

        Returns:
            List of (alias, value) tuples
        """
        return [
            (field_info.alias, getattr(self, name))
            for name, field_info in type(self).model_fields.items()
        ]
