"""
Security Identifier API endpoints.

Devices prove possession of their certificate and receive a rotated
Security Identifier in their directory record.
"""

import json

from fastapi import APIRouter, Request, Response, status

from sidrotator.api.v1.device.request import RotationRequest
from sidrotator.core.logging import logger
from sidrotator.di import SecurityIdentifierServiceDep
from sidrotator.domain.errors import (
    DIRECTORY_REQUEST_FAILED,
    DISABLED_DEVICE_RECORD,
    HEADER_VALIDATION_FAILED,
    INVALID_REQUEST,
    UNTRUSTED_REQUEST,
)

router = APIRouter()


def _text_response(*bodies: str) -> dict:
    return {"content": {"text/plain": {"example": " | ".join(bodies)}}}


@router.post(
    "/rotate",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary="Rotate a device Security Identifier",
    description="""
    Rotate the Security Identifier stored on a device's directory record.

    **Flow**:
    1. Device sends DeviceID, SerialNumber, Signature, Thumbprint,
       ExpirationDate and FullPem (JSON body, or headers of the same name)
    2. Backend looks the device up in the directory
    3. Backend checks platform and stored expiration dates
    4. Backend checks the thumbprint and verifies the signature over the
       record's directory object id with the certificate's public key
    5. Backend writes the new identifier and its expiration date

    Responses carry a short text body and no body on success.
    """,
    responses={
        200: {"description": "Security Identifier rotated (empty body)"},
        400: _text_response(HEADER_VALIDATION_FAILED, INVALID_REQUEST),
        403: _text_response(UNTRUSTED_REQUEST, DISABLED_DEVICE_RECORD),
        502: _text_response(DIRECTORY_REQUEST_FAILED),
    },
)
async def rotate_security_identifier(
    request: Request,
    service: SecurityIdentifierServiceDep,
) -> Response:
    """
    Rotate a device Security Identifier.

    Args:
        request: Raw HTTP request (JSON body and headers)
        service: Rotation service (injected)

    Returns:
        Empty 200 response

    Raises:
        RotationError: Mapped to a text response by the exception handler
    """
    raw = await request.body()
    body = None
    if raw:
        try:
            body = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Rotation request body is not valid JSON, using headers")

    rotation_request = RotationRequest.from_sources(body, request.headers)
    await service.rotate(rotation_request)
    return Response(status_code=status.HTTP_200_OK)
