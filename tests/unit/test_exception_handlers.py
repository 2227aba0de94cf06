"""
Unit tests for exception handlers.

Tests error response formatting and status code mapping.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from starlette.exceptions import HTTPException

from sidrotator.domain.errors import (
    DIRECTORY_REQUEST_FAILED,
    HEADER_VALIDATION_FAILED,
    UNTRUSTED_REQUEST,
    DirectoryServiceError,
    NotFoundError,
    ValidationError,
)
from sidrotator.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    rotation_exception_handler,
)


@pytest.fixture
def request_mock():
    """Mock request for the rotation endpoint."""
    request = MagicMock(spec=Request)
    request.url.path = "/device/security-identifier/rotate"
    request.method = "POST"
    return request


# ===========================
# Rotation Error Handler Tests
# ===========================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("exc", "status_code", "body"),
    [
        (ValidationError("Missing required fields: DeviceID"), 400, HEADER_VALIDATION_FAILED),
        (NotFoundError("No directory record"), 403, UNTRUSTED_REQUEST),
        (DirectoryServiceError("Token acquisition failed"), 502, DIRECTORY_REQUEST_FAILED),
    ],
)
async def test_rotation_exception_handler(request_mock, exc, status_code, body):
    """Test rotation errors become short text responses."""
    response = await rotation_exception_handler(request_mock, exc)

    assert response.status_code == status_code
    assert response.body.decode() == body
    assert response.media_type == "text/plain"


@pytest.mark.asyncio
async def test_rotation_exception_handler_hides_reason(request_mock):
    """Test the detailed reason is not sent to the caller."""
    exc = ValidationError("Missing required fields: Signature")

    response = await rotation_exception_handler(request_mock, exc)

    assert b"Signature" not in response.body


# ===========================
# HTTP Exception Handler Tests
# ===========================


@pytest.mark.asyncio
async def test_http_exception_handler_404(request_mock):
    """Test HTTP exception handler with 404 not found."""
    exc = HTTPException(status_code=404, detail="Not Found")

    response = await http_exception_handler(request_mock, exc)

    assert response.status_code == 404
    body = json.loads(response.body)
    assert body["status"] == 404
    assert body["detail"] == "Not Found"
    assert body["type"].endswith("section-6.5.4")


@pytest.mark.asyncio
async def test_http_exception_handler_keeps_headers(request_mock):
    """Test headers on the exception are forwarded."""
    exc = HTTPException(status_code=405, detail="Method Not Allowed", headers={"Allow": "POST"})

    response = await http_exception_handler(request_mock, exc)

    assert response.headers["Allow"] == "POST"


# ===========================
# General Exception Handler Tests
# ===========================


@pytest.mark.asyncio
async def test_general_exception_handler(request_mock):
    """Test unexpected exceptions become 500 Problem Details."""
    response = await general_exception_handler(request_mock, RuntimeError("boom"))

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["title"] == "Internal Server Error"
    assert body["instance"] == "/device/security-identifier/rotate"
    assert "boom" not in response.body.decode()

