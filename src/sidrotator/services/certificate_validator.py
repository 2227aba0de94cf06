"""
Certificate operations for proof of possession and identifier derivation.

Handles:
- Decoding the base64 certificate supplied by the device (DER or PEM)
- SHA-1 thumbprint computation and comparison
- Signature verification with the certificate's public key
- Security Identifier construction and storage encoding

Security notes:
- Thumbprints are compared in constant time
- Signatures are checked over the directory object id of the record, so a
  signature made for one device cannot be replayed for another
"""

import base64
import binascii
import hashlib
import hmac

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, padding, rsa
from fastapi import status
from loguru import logger

from sidrotator.domain.errors import (
    INVALID_REQUEST,
    UNTRUSTED_REQUEST,
    CryptoVerificationError,
    DecodeError,
)

SECURITY_IDENTIFIER_PREFIX = "X509:<SHA1-TP-PUBKEY>"
PEM_HEADER = b"-----BEGIN CERTIFICATE-----"


def decode_certificate(full_pem: str) -> x509.Certificate:
    """
    Decode the certificate blob sent by the device.

    The blob is base64; the decoded bytes may be a DER certificate or a PEM
    document. The public key is loaded here so that an unknown key
    algorithm is reported as a decode failure.

    Args:
        full_pem: Base64-encoded certificate

    Returns:
        Parsed X.509 certificate

    Raises:
        DecodeError: If the blob is not base64, not a certificate, or carries
            a public key of an unknown algorithm
    """
    try:
        raw = base64.b64decode("".join(full_pem.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Certificate is not valid base64: {e}") from e

    try:
        if raw.lstrip().startswith(PEM_HEADER):
            certificate = x509.load_pem_x509_certificate(raw)
        else:
            certificate = x509.load_der_x509_certificate(raw)
    except ValueError as e:
        raise DecodeError(f"Certificate could not be parsed: {e}") from e

    try:
        certificate.public_key()
    except (UnsupportedAlgorithm, ValueError) as e:
        raise DecodeError(f"Certificate public key could not be loaded: {e}") from e

    return certificate


def compute_thumbprint(certificate: x509.Certificate) -> str:
    """
    Compute the SHA-1 thumbprint of a certificate.

    Args:
        certificate: Parsed certificate

    Returns:
        Upper-case hex digest of the DER encoding
    """
    return certificate.fingerprint(hashes.SHA1()).hex().upper()  # noqa: S303


def normalize_thumbprint(thumbprint: str) -> str:
    """Drop separators and whitespace and upper-case a hex thumbprint."""
    return "".join(thumbprint.replace(":", "").split()).upper()


def verify_thumbprint(certificate: x509.Certificate, thumbprint: str) -> str:
    """
    Check the supplied thumbprint against the certificate.

    Args:
        certificate: Parsed certificate
        thumbprint: Thumbprint supplied by the device

    Returns:
        The computed thumbprint

    Raises:
        CryptoVerificationError: On mismatch (400)
    """
    computed = compute_thumbprint(certificate)
    supplied = normalize_thumbprint(thumbprint)

    if not hmac.compare_digest(computed.encode(), supplied.encode()):
        raise CryptoVerificationError(
            f"Thumbprint mismatch: certificate={computed}, supplied={supplied}",
            status_code=status.HTTP_400_BAD_REQUEST,
            response_body=INVALID_REQUEST,
        )
    return computed


def verify_signature(
    certificate: x509.Certificate, signature: str, content: str
) -> None:
    """
    Verify a signature made with the certificate's private key.

    RSA keys use PKCS#1 v1.5 with SHA-256, EC keys ECDSA with SHA-256,
    Edwards keys their native scheme.

    Args:
        certificate: Parsed certificate
        signature: Base64-encoded signature
        content: Signed text (UTF-8 encoded before verification)

    Raises:
        CryptoVerificationError: If the signature does not verify (403)
    """

    def untrusted(reason: str) -> CryptoVerificationError:
        return CryptoVerificationError(
            reason,
            status_code=status.HTTP_403_FORBIDDEN,
            response_body=UNTRUSTED_REQUEST,
        )

    try:
        signature_bytes = base64.b64decode("".join(signature.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise untrusted(f"Signature is not valid base64: {e}") from e

    data = content.encode("utf-8")
    public_key = certificate.public_key()

    try:
        if isinstance(public_key, rsa.RSAPublicKey):
            public_key.verify(
                signature_bytes, data, padding.PKCS1v15(), hashes.SHA256()
            )
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            public_key.verify(signature_bytes, data, ec.ECDSA(hashes.SHA256()))
        elif isinstance(
            public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)
        ):
            public_key.verify(signature_bytes, data)
        else:
            raise untrusted(
                f"Unsupported public key type: {type(public_key).__name__}"
            )
    except InvalidSignature as e:
        raise untrusted("Signature verification failed") from e

    logger.debug("Signature verified with certificate public key")


def public_key_bytes(certificate: x509.Certificate) -> bytes:
    """
    Get the subjectPublicKey bytes of a certificate.

    This is the content of the SubjectPublicKeyInfo bit string: the PKCS#1
    RSAPublicKey for RSA, the uncompressed point for EC, raw bytes for
    Edwards curves.

    Args:
        certificate: Parsed certificate

    Returns:
        Public key bytes

    Raises:
        CryptoVerificationError: For unsupported key types
    """
    public_key = certificate.public_key()

    if isinstance(public_key, rsa.RSAPublicKey):
        return public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1,
        )
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
    if isinstance(public_key, (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)):
        return public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    raise CryptoVerificationError(
        f"Unsupported public key type: {type(public_key).__name__}"
    )


def build_security_identifier(certificate: x509.Certificate) -> str:
    """
    Build the Security Identifier bound to a certificate.

    Format: ``X509:<SHA1-TP-PUBKEY>`` + thumbprint + base64(SHA-256(public key)).

    Args:
        certificate: Parsed certificate

    Returns:
        Security Identifier string
    """
    key_hash = hashlib.sha256(public_key_bytes(certificate)).digest()
    return (
        f"{SECURITY_IDENTIFIER_PREFIX}{compute_thumbprint(certificate)}"
        f"{base64.b64encode(key_hash).decode('ascii')}"
    )


def encode_security_identifier(identifier: str) -> str:
    """
    Encode a Security Identifier for storage.

    Args:
        identifier: Security Identifier string

    Returns:
        base64 of the UTF-16-LE encoded identifier
    """
    return base64.b64encode(identifier.encode("utf-16-le")).decode("ascii")


__all__ = [
    "decode_certificate",
    "compute_thumbprint",
    "normalize_thumbprint",
    "verify_thumbprint",
    "verify_signature",
    "public_key_bytes",
    "build_security_identifier",
    "encode_security_identifier",
    "SECURITY_IDENTIFIER_PREFIX",
]
