"""ECDSA signing with SHA-256.

- sign_message(): Sign data with an EC private key
- verify_signature(): Verify a signature with an EC public key

Both accept str or bytes. Signatures are DER-encoded (r, s) pairs as
produced by the cryptography library.
"""

from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec


def sign_message(key: ec.EllipticCurvePrivateKey, message: Union[str, bytes]) -> bytes:
    """Sign a message using ECDSA with SHA-256.
    
    Args:
        key: EC private key for signing
        message: The message to sign (str or bytes)
    
    Returns:
        DER-encoded signature bytes
    """
    if isinstance(message, str):
        message = message.encode("utf-8")

    return key.sign(message, ec.ECDSA(hashes.SHA256()))


def verify_signature(
    key: ec.EllipticCurvePublicKey,
    message: Union[str, bytes],
    signature: bytes,
) -> bool:
    """Verify an ECDSA SHA-256 signature. Returns False instead of raising."""
    if isinstance(message, str):
        message = message.encode("utf-8")

    try:
        key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False
