"""Self-signed server certificate issuance.

issue_certificate() runs these steps in order and raises on the first
failure, so callers never see partially built output:

1. serial number: 16 random bytes as an unsigned integer in [0, 2**128)
2. validity: [now - 1 hour, now + 2400 hours]
3. template: CN=<subject name> as both subject and issuer, key usage
   digitalSignature + keyEncipherment, extended key usage serverAuth
4. self-sign with ECDSA/SHA-256 using the identity's own key
5. serialize the private key in SEC1 (TraditionalOpenSSL) form
6. PEM-encode the certificate (CERTIFICATE) and the key (EC PRIVATE KEY)
"""

import logging
import os
from datetime import datetime, timedelta
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from ..common.errors import CertificateBuildError, EncodingError, SerialNumberError
from ..common.models import IssuedCertificate
from ..common.utils import RandomSource, now_utc, read_random

logger = logging.getLogger(__name__)

SERIAL_NUMBER_BYTES = 16  # 2**128 possible values
BACKDATE = timedelta(hours=1)  # clock skew tolerance
VALIDITY = timedelta(hours=2400)  # 100 days


def generate_serial_number(random_source: RandomSource = os.urandom) -> int:
    """Draw a uniform integer in [0, 2**128). Raises SerialNumberError."""
    try:
        raw = read_random(random_source, SERIAL_NUMBER_BYTES)
    except (OSError, NotImplementedError, ValueError) as e:
        raise SerialNumberError("failed to generate serial number") from e
    return int.from_bytes(raw, "big")


def validity_window(now: Optional[datetime] = None):
    """Return (not_before, not_after) anchored at `now` (default: current UTC time)."""
    if now is None:
        now = now_utc()
    return now - BACKDATE, now + VALIDITY


def build_certificate(
    subject_name: str,
    private_key: ec.EllipticCurvePrivateKey,
    serial_number: int,
    not_before: datetime,
    not_after: datetime,
) -> x509.Certificate:
    """Build and self-sign the server certificate. Raises CertificateBuildError."""
    try:
        subject = issuer = x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, subject_name),
        ])
        return (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(private_key.public_key())
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False
            )
            .sign(private_key, hashes.SHA256())
        )
    except Exception as e:
        raise CertificateBuildError("CreateCertificate failed") from e


def encode_certificate(cert: x509.Certificate) -> bytes:
    """Serialize `cert` as a PEM CERTIFICATE block."""
    try:
        return cert.public_bytes(serialization.Encoding.PEM)
    except Exception as e:
        raise EncodingError("cert PEM encoding failed") from e


def encode_private_key(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Serialize `private_key` as a SEC1 PEM EC PRIVATE KEY block."""
    try:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except Exception as e:
        raise EncodingError("private key PEM encoding failed") from e


def issue_certificate(
    subject_name: str,
    private_key: ec.EllipticCurvePrivateKey,
    random_source: RandomSource = os.urandom,
    now: Optional[datetime] = None,
) -> IssuedCertificate:
    """Issue a self-signed server certificate for `subject_name`.

    Args:
        subject_name: Common Name for both subject and issuer
        private_key: the identity's EC key; signs the certificate and is
            embedded (as its public half) as the subject public key
        random_source: callable returning n random bytes (default os.urandom)
        now: anchor for the validity window (default: current UTC time)

    Returns:
        IssuedCertificate with PEM cert and key plus the issued values

    Raises:
        SerialNumberError, CertificateBuildError, EncodingError
    """
    serial_number = generate_serial_number(random_source)
    not_before, not_after = validity_window(now)

    cert = build_certificate(subject_name, private_key, serial_number, not_before, not_after)
    key_pem = encode_private_key(private_key)
    cert_pem = encode_certificate(cert)

    logger.debug(
        "issued certificate CN=%s serial=%x valid %s to %s",
        subject_name, serial_number, not_before.isoformat(), not_after.isoformat(),
    )
    return IssuedCertificate(
        subject_name=subject_name,
        serial_number=serial_number,
        not_valid_before=not_before,
        not_valid_after=not_after,
        cert_pem=cert_pem,
        key_pem=key_pem,
    )
