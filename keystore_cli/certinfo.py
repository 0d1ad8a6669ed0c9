"""Decoding of exported certificates."""

import datetime
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa

from keystore_cli.result import Failure, Result, Success


def deserialize_certificate(cert_data: bytes) -> Result[x509.Certificate, str]:
    """Deserialize a certificate from PEM (as printed by ``-exportcert -rfc``) or DER bytes."""
    try:
        if b"-----BEGIN" in cert_data:
            return Success(x509.load_pem_x509_certificate(cert_data))
        return Success(x509.load_der_x509_certificate(cert_data))
    except Exception as e:
        return Failure(f"Error deserializing certificate: {e!s}")


def fingerprint(cert: x509.Certificate) -> str:
    """SHA-256 fingerprint as bare upper-case hex, the form the list parser produces."""
    return cert.fingerprint(hashes.SHA256()).hex().upper()


def key_type(cert: x509.Certificate) -> str:
    """Name the public key algorithm of a certificate (RSA, EC, DSA, Ed25519, Ed448)."""
    public_key = cert.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        return "RSA"
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return "EC"
    if isinstance(public_key, dsa.DSAPublicKey):
        return "DSA"
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return "Ed25519"
    if isinstance(public_key, ed448.Ed448PublicKey):
        return "Ed448"
    return "Unknown"


def describe_certificate(cert_data: bytes) -> Result[dict[str, Any], str]:
    """Summarize a certificate as a dictionary.

    Args:
    ----
        cert_data: PEM or DER encoded certificate

    Returns:
    -------
        Result with subject, issuer, serial, validity and fingerprint, or error message

    """
    cert_result = deserialize_certificate(cert_data)
    if isinstance(cert_result, Failure):
        return cert_result
    cert = cert_result.unwrap()

    now = datetime.datetime.now(datetime.UTC)
    return Success(
        {
            "subject": cert.subject.rfc4514_string(),
            "issuer": cert.issuer.rfc4514_string(),
            "serial": format(cert.serial_number, "x"),
            "not_before": cert.not_valid_before_utc.isoformat(),
            "not_after": cert.not_valid_after_utc.isoformat(),
            "days_remaining": (cert.not_valid_after_utc - now).days,
            "self_signed": cert.subject == cert.issuer,
            "fingerprint": fingerprint(cert),
            "public_key": key_type(cert),
        }
    )
