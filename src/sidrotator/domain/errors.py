"""
Domain errors raised by the rotation pipeline.

Every error is terminal for the request. Each one carries the HTTP status
code and the short text body returned to the device; ``reason`` is the
detailed explanation that only goes to the logs.
"""

from fastapi import status

HEADER_VALIDATION_FAILED = "Header validation failed"
INVALID_REQUEST = "Invalid Request"
UNTRUSTED_REQUEST = "Untrusted request"
DISABLED_DEVICE_RECORD = "Disabled device record"
DIRECTORY_REQUEST_FAILED = "Directory request failed"


class RotationError(Exception):
    """Base class for rotation failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    response_body: str = INVALID_REQUEST

    def __init__(
        self,
        reason: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(reason)
        self.reason = reason
        if status_code is not None:
            self.status_code = status_code
        if response_body is not None:
            self.response_body = response_body


class ValidationError(RotationError):
    """A required request field is missing or malformed."""

    response_body = HEADER_VALIDATION_FAILED


class DecodeError(ValidationError):
    """The supplied certificate could not be decoded."""

    response_body = INVALID_REQUEST


class NotFoundError(RotationError):
    """No directory record matches the device identifier."""

    status_code = status.HTTP_403_FORBIDDEN
    response_body = UNTRUSTED_REQUEST


class EligibilityError(RotationError):
    """The directory record is not eligible for rotation."""


class CryptoVerificationError(RotationError):
    """Thumbprint or signature verification failed."""


class DirectoryServiceError(RotationError):
    """The directory or token endpoint could not be reached or answered an error."""

    status_code = status.HTTP_502_BAD_GATEWAY
    response_body = DIRECTORY_REQUEST_FAILED


__all__ = [
    "RotationError",
    "ValidationError",
    "DecodeError",
    "NotFoundError",
    "EligibilityError",
    "CryptoVerificationError",
    "DirectoryServiceError",
    "HEADER_VALIDATION_FAILED",
    "INVALID_REQUEST",
    "UNTRUSTED_REQUEST",
    "DISABLED_DEVICE_RECORD",
    "DIRECTORY_REQUEST_FAILED",
]
