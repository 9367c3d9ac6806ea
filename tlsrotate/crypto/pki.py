"""X.509 inspection helpers for issued certificates.

- load_certificate() / load_certificate_bytes(): PEM certificate from file or bytes
- load_private_key() / load_private_key_bytes(): PEM EC key from file or bytes
- get_common_name(): Extract CN from cert subject
- is_self_signed(): issuer == subject and the signature verifies with the cert's own key
- public_keys_match(): cert's subject key is the public half of a private key
- is_currently_valid(): check time falls inside the validity window
- verify_key_pair(): sign/verify round trip between a PEM key and PEM cert
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ..common.utils import now_utc
from .sign import sign_message, verify_signature


def load_certificate_bytes(data: bytes) -> x509.Certificate:
    """Parse a PEM certificate."""
    return x509.load_pem_x509_certificate(data)


def load_certificate(path: Union[str, Path]) -> x509.Certificate:
    """Load an X.509 certificate from a PEM file."""
    with open(path, "rb") as f:
        return load_certificate_bytes(f.read())


def load_private_key_bytes(data: bytes) -> ec.EllipticCurvePrivateKey:
    """Parse an unencrypted PEM EC private key. Raises TypeError for other key types."""
    key = serialization.load_pem_private_key(data, password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise TypeError(f"expected an EC private key, got {type(key).__name__}")
    return key


def load_private_key(path: Union[str, Path]) -> ec.EllipticCurvePrivateKey:
    """Load an EC private key from a PEM file."""
    with open(path, "rb") as f:
        return load_private_key_bytes(f.read())


def get_common_name(cert: x509.Certificate) -> str:
    """Extract Common Name from certificate subject."""
    return cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value


def is_self_signed(cert: x509.Certificate) -> bool:
    if cert.issuer != cert.subject:
        return False
    try:
        cert.verify_directly_issued_by(cert)
    except (InvalidSignature, ValueError, TypeError):
        return False
    return True


def public_keys_match(cert: x509.Certificate, private_key: ec.EllipticCurvePrivateKey) -> bool:
    spki = serialization.PublicFormat.SubjectPublicKeyInfo
    der = serialization.Encoding.DER
    return cert.public_key().public_bytes(der, spki) == private_key.public_key().public_bytes(der, spki)


def is_currently_valid(cert: x509.Certificate, check_time: Optional[datetime] = None) -> bool:
    """True if `check_time` (default: now) is inside [not_valid_before, not_valid_after]."""
    if check_time is None:
        check_time = now_utc()
    return cert.not_valid_before_utc <= check_time <= cert.not_valid_after_utc


def verify_key_pair(cert_pem: bytes, key_pem: bytes, probe: bytes = b"tlsrotate key check") -> bool:
    """Sign `probe` with the PEM key and verify it against the PEM cert's public key."""
    cert = load_certificate_bytes(cert_pem)
    key = load_private_key_bytes(key_pem)
    public_key = cert.public_key()
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        return False
    return verify_signature(public_key, probe, sign_message(key, probe))
