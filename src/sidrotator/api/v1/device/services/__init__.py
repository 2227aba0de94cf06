"""
Security Identifier rotation service.

Runs the rotation pipeline for one request:
- Validation: the six required request fields
- Lookup: the device record in the directory
- Gates: platform, stored expirations, certificate, signature, enabled flag
- Write: the new Security Identifier and its expiration date
"""

from sidrotator.api.v1.device.request import SENSITIVE_FIELDS, RotationRequest
from sidrotator.config import RotationPolicy
from sidrotator.core.logging import logger, redact
from sidrotator.domain.errors import NotFoundError, ValidationError
from sidrotator.domain.gates import (
    DATE_FORMAT,
    RotationContext,
    RotationInput,
    parse_date,
    run_gates,
)
from sidrotator.infrastructure.repositories import DirectoryClient
from sidrotator.services.certificate_validator import (
    build_security_identifier,
    encode_security_identifier,
)


class SecurityIdentifierService:
    """
    Service for rotating device Security Identifiers.

    The directory client and the rotation policy are supplied at
    construction time; the service holds no state between requests.
    """

    def __init__(self, directory: DirectoryClient, policy: RotationPolicy):
        """
        Initialize rotation service.

        Args:
            directory: Directory client used for token, lookup and writes
            policy: Rotation policy (platform tag, attribute names, log redaction)
        """
        self.directory = directory
        self.policy = policy

    def validate_request(self, request: RotationRequest) -> RotationInput:
        """
        Check that every required field is present.

        Each field's outcome is logged; Signature and FullPem are redacted
        unless the policy reveals sensitive values.

        Args:
            request: Parsed rotation request

        Returns:
            Validated input

        Raises:
            ValidationError: If a field is missing or ExpirationDate is malformed
        """
        missing: list[str] = []

        for name, value in request.field_values():
            shown = (
                redact(value, self.policy.reveal_sensitive_values)
                if name in SENSITIVE_FIELDS
                else value
            )
            if value:
                logger.info(f"{name} validation passed: {shown}")
            else:
                logger.warning(f"{name} validation failed: value is empty")
                missing.append(name)

        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        try:
            expiration_date = parse_date(request.expiration_date)
        except ValueError as e:
            raise ValidationError(
                f"ExpirationDate {request.expiration_date!r} is not yyyy-MM-dd"
            ) from e

        return RotationInput(
            device_id=request.device_id,
            serial_number=request.serial_number,
            signature=request.signature,
            thumbprint=request.thumbprint,
            expiration_date=expiration_date,
            full_pem=request.full_pem,
        )

    async def rotate(self, request: RotationRequest) -> str:
        """
        Rotate the Security Identifier of the requesting device.

        Args:
            request: Parsed rotation request

        Returns:
            The encoded Security Identifier that was written

        Raises:
            RotationError: From the first failing step
        """
        rotation_input = self.validate_request(request)
        device_id = rotation_input.device_id

        token = await self.directory.get_token()
        record = await self.directory.lookup_device(device_id, token)
        if record is None:
            raise NotFoundError(f"No directory record for device {device_id}")

        logger.info(
            f"Found directory record {record.object_id} for device {device_id} "
            f"(serial={rotation_input.serial_number})"
        )

        context = RotationContext(
            input=rotation_input, record=record, policy=self.policy
        )
        run_gates(
            context,
            on_pass=lambda gate: logger.debug(f"Gate {gate} passed for {device_id}"),
        )

        identifier = build_security_identifier(context.require_certificate())
        encoded = encode_security_identifier(identifier)
        logger.info(
            f"Computed security identifier for device {device_id}: "
            f"{redact(identifier, self.policy.reveal_sensitive_values)}"
        )

        # Two independent writes; a failure on the second leaves the first in place.
        await self.directory.write_attribute(
            record.object_id, self.policy.identifier_attribute, encoded, token
        )
        await self.directory.write_attribute(
            record.object_id,
            self.policy.expiration_attribute,
            rotation_input.expiration_date.strftime(DATE_FORMAT),
            token,
        )

        logger.info(
            f"Security identifier rotated for device {device_id} "
            f"(record={record.object_id}, thumbprint={context.thumbprint}, "
            f"expires={rotation_input.expiration_date.isoformat()})"
        )
        return encoded


__all__ = ["SecurityIdentifierService"]
