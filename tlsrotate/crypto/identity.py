"""Random subject name and EC key pair generation.

The subject name is an opaque identifier: 8 bytes from the random source
rendered as 16 lowercase hex characters. It is used as the certificate's
Common Name and is not expected to resolve in DNS.
"""

import logging
import os

from cryptography.hazmat.primitives.asymmetric import ec

from ..common.errors import KeyGenerationError, RandomSourceError
from ..common.models import Identity
from ..common.utils import RandomSource, read_random

logger = logging.getLogger(__name__)

SUBJECT_NAME_BYTES = 8
CURVE = ec.SECP256R1


def generate_subject_name(random_source: RandomSource = os.urandom) -> str:
    """Return a 16 character lowercase hex name. Raises RandomSourceError."""
    try:
        raw = read_random(random_source, SUBJECT_NAME_BYTES)
    except (OSError, NotImplementedError, ValueError) as e:
        raise RandomSourceError("unable to get random bytes for new domain name") from e
    return raw.hex()


def generate_key_pair() -> ec.EllipticCurvePrivateKey:
    """Generate a P-256 private key. Raises KeyGenerationError."""
    try:
        return ec.generate_private_key(CURVE())
    except Exception as e:
        raise KeyGenerationError("EC key generation failed") from e


def generate_identity(random_source: RandomSource = os.urandom) -> Identity:
    """Generate a fresh subject name and key pair for one certificate."""
    subject_name = generate_subject_name(random_source)
    private_key = generate_key_pair()
    logger.debug("generated identity %s on curve %s", subject_name, private_key.curve.name)
    return Identity(subject_name=subject_name, private_key=private_key)
