"""
Rotation gates.

Each gate inspects the rotation context and raises a RotationError when the
request must stop. ROTATION_GATES lists them in the order they run; the
first failure ends the request.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from cryptography import x509
from fastapi import status

from sidrotator.config import RotationPolicy
from sidrotator.domain.errors import (
    DISABLED_DEVICE_RECORD,
    EligibilityError,
)
from sidrotator.infrastructure.repositories import DeviceRecord
from sidrotator.services.certificate_validator import (
    decode_certificate,
    verify_signature,
    verify_thumbprint,
)

DATE_FORMAT = "%Y-%m-%d"
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_date(value: str) -> date:
    """
    Parse a ``yyyy-MM-dd`` date.

    Raises:
        ValueError: If the value is not a valid date in that format
    """
    value = value.strip()
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"{value!r} is not a yyyy-MM-dd date")
    return date.fromisoformat(value)


@dataclass(frozen=True)
class RotationInput:
    """
    Validated rotation request.

    Attributes:
        device_id: Device identifier used for the directory lookup
        serial_number: Hardware serial number reported by the device
        signature: Base64 signature over the record's directory object id
        thumbprint: SHA-1 thumbprint claimed for the certificate
        expiration_date: Expiration date of the new identifier
        full_pem: Base64-encoded certificate
    """

    device_id: str
    serial_number: str
    signature: str
    thumbprint: str
    expiration_date: date
    full_pem: str


@dataclass
class RotationContext:
    """State carried through the gates for one request."""

    input: RotationInput
    record: DeviceRecord
    policy: RotationPolicy
    certificate: x509.Certificate | None = None
    thumbprint: str | None = None

    @property
    def stored_identifier(self) -> str | None:
        return self.record.extension_attribute(self.policy.identifier_attribute)

    @property
    def stored_expiration(self) -> str | None:
        return self.record.extension_attribute(self.policy.expiration_attribute)

    def require_certificate(self) -> x509.Certificate:
        if self.certificate is None:
            raise RuntimeError("Certificate gates ran before decode_certificate")
        return self.certificate


def check_operating_system(context: RotationContext) -> None:
    """The record must belong to the managed platform."""
    expected = context.policy.expected_operating_system
    actual = context.record.operating_system
    if actual != expected:
        raise EligibilityError(
            f"Operating system {actual!r} is not {expected!r}"
        )


def _stored_expiration_date(context: RotationContext) -> date:
    stored = context.stored_expiration
    if stored is None:
        raise EligibilityError(
            f"{context.policy.expiration_attribute} is empty"
        )
    try:
        return parse_date(stored)
    except ValueError as e:
        raise EligibilityError(
            f"{context.policy.expiration_attribute} holds an invalid date {stored!r}"
        ) from e


def check_stored_identifier(context: RotationContext) -> None:
    """A populated identifier may only be replaced once it has expired."""
    if context.stored_identifier is None:
        return

    requested = context.input.expiration_date
    try:
        expires = _stored_expiration_date(context)
    except EligibilityError as e:
        raise EligibilityError(
            f"Security identifier in {context.policy.identifier_attribute} "
            f"is populated and its expiration is unusable: {e.reason}"
        ) from e

    if expires > requested:
        raise EligibilityError(
            f"Security identifier in {context.policy.identifier_attribute} "
            f"is populated and valid until {expires.isoformat()}"
        )


def check_stored_expiration(context: RotationContext) -> None:
    """A stored expiration must be on or before the requested one."""
    if context.stored_expiration is None:
        return

    requested = context.input.expiration_date
    expires = _stored_expiration_date(context)
    if expires > requested:
        raise EligibilityError(
            f"Stored expiration {expires.isoformat()} is not expired "
            f"relative to {requested.isoformat()}"
        )


def load_certificate(context: RotationContext) -> None:
    context.certificate = decode_certificate(context.input.full_pem)


def check_thumbprint(context: RotationContext) -> None:
    context.thumbprint = verify_thumbprint(
        context.require_certificate(), context.input.thumbprint
    )


def check_signature(context: RotationContext) -> None:
    verify_signature(
        context.require_certificate(),
        context.input.signature,
        context.record.object_id,
    )


def check_account_enabled(context: RotationContext) -> None:
    """Disabled records are never rotated."""
    if not context.record.account_enabled:
        raise EligibilityError(
            f"Directory record {context.record.object_id} is disabled",
            status_code=status.HTTP_403_FORBIDDEN,
            response_body=DISABLED_DEVICE_RECORD,
        )


Gate = Callable[[RotationContext], None]

ROTATION_GATES: tuple[tuple[str, Gate], ...] = (
    ("operating_system", check_operating_system),
    ("stored_identifier", check_stored_identifier),
    ("stored_expiration", check_stored_expiration),
    ("certificate_decode", load_certificate),
    ("thumbprint", check_thumbprint),
    ("signature", check_signature),
    ("account_enabled", check_account_enabled),
)


def run_gates(
    context: RotationContext,
    gates: tuple[tuple[str, Gate], ...] = ROTATION_GATES,
    on_pass: Callable[[str], None] | None = None,
) -> None:
    """
    Run gates in order, stopping at the first failure.

    Args:
        context: Rotation context
        gates: Ordered (name, gate) pairs
        on_pass: Called with the gate name after each gate passes

    Raises:
        RotationError: From the first failing gate
    """
    for name, gate in gates:
        gate(context)
        if on_pass is not None:
            on_pass(name)
