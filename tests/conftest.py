"""Global pytest configuration and fixtures for all tests."""

import base64
import hashlib
import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from sidrotator.config import RotationPolicy
from sidrotator.infrastructure.repositories import DeviceRecord

OBJECT_ID = "3f2a9c1e-5b7d-4e8a-9f10-2c4b6d8e0a12"
DEVICE_ID = "6c1d2e3f-4a5b-4c6d-8e9f-0a1b2c3d4e5f"
EXPIRATION_DATE = "2030-01-31"

# DER encoding of the rsaEncryption algorithm OID (1.2.840.113549.1.1.1)
RSA_ENCRYPTION_OID = bytes.fromhex("06092a864886f70d010101")


@pytest.fixture(scope="session", autouse=True)
def set_test_env_vars():
    """
    Set environment variables for testing.

    These are NOT real credentials - just placeholders for testing.
    """
    original_env = {}

    test_env_vars = {
        "INFRASTRUCTURE_PROVIDER": "local",
        "IDENTITY_ENDPOINT": "http://127.0.0.1:41741/msi/token",
        "IDENTITY_HEADER": "test-identity-header",  # NOSONAR - Test fixture
        "ENABLE_DOCS": "false",
        "DEBUG_LOGGING": "false",
    }

    for key, value in test_env_vars.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture(scope="session")
def device_key() -> rsa.RSAPrivateKey:
    """Device RSA private key (2048 bits for faster tests)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def device_certificate(device_key: rsa.RSAPrivateKey) -> x509.Certificate:
    """Self-signed device certificate."""
    subject = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, DEVICE_ID),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Devices"),
        ]
    )
    now = datetime.now(UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(device_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .sign(device_key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def full_pem(device_certificate: x509.Certificate) -> str:
    """Base64-encoded DER certificate, as devices send it."""
    der = device_certificate.public_bytes(serialization.Encoding.DER)
    return base64.b64encode(der).decode("ascii")


@pytest.fixture(scope="session")
def unknown_key_der(device_certificate: x509.Certificate) -> bytes:
    """Device certificate DER with its key algorithm changed to 1.2.840.113549.1.1.99."""
    der = device_certificate.public_bytes(serialization.Encoding.DER)
    assert der.count(RSA_ENCRYPTION_OID) == 1
    return der.replace(RSA_ENCRYPTION_OID, RSA_ENCRYPTION_OID[:-1] + b"\x63")


@pytest.fixture(scope="session")
def thumbprint(device_certificate: x509.Certificate) -> str:
    """Upper-case SHA-1 thumbprint of the device certificate."""
    return device_certificate.fingerprint(hashes.SHA1()).hex().upper()


@pytest.fixture(scope="session")
def signer(device_key: rsa.RSAPrivateKey) -> Callable[[str], str]:
    """Sign text with the device key (PKCS#1 v1.5, SHA-256), base64 output."""

    def sign(content: str) -> str:
        signature = device_key.sign(
            content.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256()
        )
        return base64.b64encode(signature).decode("ascii")

    return sign


@pytest.fixture(scope="session")
def expected_identifier(device_key: rsa.RSAPrivateKey, thumbprint: str) -> str:
    """Security Identifier expected for the device certificate."""
    key_bytes = device_key.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.PKCS1
    )
    key_hash = base64.b64encode(hashlib.sha256(key_bytes).digest()).decode("ascii")
    return f"X509:<SHA1-TP-PUBKEY>{thumbprint}{key_hash}"


@pytest.fixture
def device_record() -> DeviceRecord:
    """Enabled macOS record without a stored identifier."""
    return DeviceRecord(
        object_id=OBJECT_ID,
        device_id=DEVICE_ID,
        operating_system="MacMDM",
        account_enabled=True,
        display_name="Test MacBook",
        extension_attributes={},
    )


@pytest.fixture
def rotation_policy() -> RotationPolicy:
    """Default rotation policy."""
    return RotationPolicy()


@pytest.fixture
def rotation_payload(full_pem, thumbprint, signer) -> dict[str, str]:
    """Fully valid rotation request body."""
    return {
        "DeviceID": DEVICE_ID,
        "SerialNumber": "C02XK1JHJG5H",
        "Signature": signer(OBJECT_ID),
        "Thumbprint": thumbprint,
        "ExpirationDate": EXPIRATION_DATE,
        "FullPem": full_pem,
    }
