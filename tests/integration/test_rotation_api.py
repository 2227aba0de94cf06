"""Integration tests for the Security Identifier rotation endpoint."""

import base64
import hashlib
import json

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from sidrotator.application import create_app
from sidrotator.di import get_directory_client
from sidrotator.infrastructure.implementations.local import LocalDirectoryClient

ROTATE_URL = "/device/security-identifier/rotate"


@pytest.fixture
def directory(tmp_path, device_record):
    """Local directory seeded with the test device."""
    client = LocalDirectoryClient(base_dir=str(tmp_path))
    client.add_device(device_record)
    return client


@pytest.fixture
def client(directory):
    """Create test client backed by the local directory."""
    app = create_app()
    app.dependency_overrides[get_directory_client] = lambda: directory
    return TestClient(app)


def _stored_attributes(directory, device_record):
    data = json.loads(directory.devices_file.read_text())
    for device in data["devices"]:
        if device["id"] == device_record.object_id:
            return device["extensionAttributes"]
    raise AssertionError("device not stored")


# ===========================
# Success Tests
# ===========================


def test_rotate_success(
    client, directory, device_record, rotation_payload, expected_identifier
):
    """Test a valid request rotates the identifier and returns an empty 200."""
    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_200_OK
    assert response.content == b""

    attributes = _stored_attributes(directory, device_record)
    stored = base64.b64decode(attributes["extensionAttribute1"]).decode("utf-16-le")
    assert stored == expected_identifier
    assert attributes["extensionAttribute2"] == "2030-01-31"


def test_rotate_from_headers(client, directory, device_record, rotation_payload):
    """Test fields can be sent as request headers."""
    response = client.post(ROTATE_URL, headers=rotation_payload)

    assert response.status_code == status.HTTP_200_OK
    assert _stored_attributes(directory, device_record)["extensionAttribute2"] == (
        "2030-01-31"
    )


def test_rotate_invalid_json_falls_back_to_headers(client, rotation_payload):
    """Test an unparseable body does not hide header values."""
    response = client.post(
        ROTATE_URL,
        content=b"{not json",
        headers={**rotation_payload, "Content-Type": "application/json"},
    )

    assert response.status_code == status.HTTP_200_OK


def test_rotate_response_has_trace_id(client, rotation_payload):
    """Test responses carry the request trace id."""
    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.headers["X-Trace-ID"]


@pytest.mark.parametrize("stored_expiration", ["2029-12-31", "2030-01-31"])
def test_rotate_replaces_expired_identifier(
    client, directory, device_record, rotation_payload, stored_expiration
):
    """Test stored identifiers expiring on or before the new date are replaced."""
    device_record.extension_attributes = {
        "extensionAttribute1": "b2xk",
        "extensionAttribute2": stored_expiration,
    }
    directory.add_device(device_record)

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_200_OK
    assert _stored_attributes(directory, device_record)["extensionAttribute1"] != "b2xk"


# ===========================
# Validation Failures
# ===========================


@pytest.mark.parametrize(
    "field",
    ["DeviceID", "SerialNumber", "Signature", "Thumbprint", "ExpirationDate", "FullPem"],
)
def test_rotate_missing_field(client, rotation_payload, field):
    """Test each missing field is a 400 Header validation failed."""
    del rotation_payload[field]

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Header validation failed"


def test_rotate_empty_request(client):
    """Test a request without body or headers."""
    response = client.post(ROTATE_URL)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Header validation failed"


def test_rotate_malformed_certificate(client, rotation_payload):
    """Test an undecodable certificate is a 400 Invalid Request."""
    rotation_payload["FullPem"] = base64.b64encode(b"garbage").decode("ascii")

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"


def test_rotate_unknown_key_algorithm(
    client, directory, device_record, rotation_payload, unknown_key_der
):
    """Test a certificate whose key cannot be loaded is a 400 and nothing is written."""
    rotation_payload["FullPem"] = base64.b64encode(unknown_key_der).decode("ascii")
    rotation_payload["Thumbprint"] = hashlib.sha1(unknown_key_der).hexdigest().upper()  # noqa: S324

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"
    assert _stored_attributes(directory, device_record) == {}


# ===========================
# Directory and Gate Failures
# ===========================


def test_rotate_unknown_device(client, rotation_payload):
    """Test unknown devices are untrusted."""
    rotation_payload["DeviceID"] = "unknown-device"

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.text == "Untrusted request"


def test_rotate_wrong_platform(client, directory, device_record, rotation_payload):
    """Test records of other platforms are rejected."""
    device_record.operating_system = "Windows"
    directory.add_device(device_record)

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"


def test_rotate_identifier_still_valid(
    client, directory, device_record, rotation_payload
):
    """Test a still-valid identifier is not replaced."""
    device_record.extension_attributes = {
        "extensionAttribute1": "Y3VycmVudA==",
        "extensionAttribute2": "2030-02-01",
    }
    directory.add_device(device_record)

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"
    assert _stored_attributes(directory, device_record)["extensionAttribute1"] == (
        "Y3VycmVudA=="
    )


def test_rotate_stored_expiration_in_future(
    client, directory, device_record, rotation_payload
):
    """Test a future stored expiration blocks rotation without an identifier."""
    device_record.extension_attributes = {"extensionAttribute2": "2031-01-01"}
    directory.add_device(device_record)

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"


def test_rotate_thumbprint_mismatch(client, rotation_payload):
    """Test a thumbprint of another certificate is rejected."""
    rotation_payload["Thumbprint"] = "AB" * 20

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.text == "Invalid Request"


def test_rotate_bad_signature(client, directory, device_record, rotation_payload, signer):
    """Test a signature over other content is untrusted and nothing is written."""
    rotation_payload["Signature"] = signer(rotation_payload["DeviceID"])

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.text == "Untrusted request"
    assert _stored_attributes(directory, device_record) == {}


def test_rotate_disabled_record(client, directory, device_record, rotation_payload):
    """Test disabled records are rejected after proof of possession."""
    device_record.account_enabled = False
    directory.add_device(device_record)

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.text == "Disabled device record"


def test_rotate_numeric_stored_identifier(
    client, directory, device_record, rotation_payload, expected_identifier
):
    """Test a numeric stored identifier with an expired date is replaced."""
    data = device_record.to_directory()
    data["extensionAttributes"] = {
        "extensionAttribute1": 12345,
        "extensionAttribute2": "2029-12-31",
    }
    directory.devices_file.write_text(json.dumps({"devices": [data]}))

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_200_OK
    stored = _stored_attributes(directory, device_record)["extensionAttribute1"]
    assert base64.b64decode(stored).decode("utf-16-le") == expected_identifier


def test_rotate_directory_failure(client, directory, rotation_payload):
    """Test an unreadable directory is a 502."""
    directory.devices_file.write_text("{corrupt")

    response = client.post(ROTATE_URL, json=rotation_payload)

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.text == "Directory request failed"


def test_rotate_get_not_allowed(client):
    """Test only POST is routed."""
    response = client.get(ROTATE_URL)

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json()["status"] == 405
