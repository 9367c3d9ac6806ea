"""Pydantic models passed between the rotation stages.

- Identity: random subject name plus the EC private key generated for it
- IssuedCertificate: the armored certificate/key and the values baked into them
- SecretRecord: the secret store entry, with `data` possibly unset until written
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel
from pydantic.config import ConfigDict


TLS_CERT_KEY = "tls.crt"
TLS_PRIVATE_KEY_KEY = "tls.key"


class Model(BaseModel):
    """Base class for all models."""
    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',
        validate_default=True,
    )


class Identity(Model):
    """Subject name and key pair for one run. Never persisted as-is."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    subject_name: str
    private_key: ec.EllipticCurvePrivateKey

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.private_key.public_key()


class IssuedCertificate(Model):
    """PEM-armored certificate and private key."""
    model_config = ConfigDict(frozen=True)

    subject_name: str
    serial_number: int
    not_valid_before: datetime
    not_valid_after: datetime
    cert_pem: bytes
    key_pem: bytes

    def as_tuple(self) -> Tuple[bytes, bytes]:
        return self.cert_pem, self.key_pem


class SecretRecord(Model):
    """A named key/value entry in the secret store.

    `data` is None when the entry exists but has never held any values.
    Metadata fields are carried through so an update-by-name writes back
    the same object that was read.
    """

    name: str
    namespace: Optional[str] = None
    type: Optional[str] = None
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    resource_version: Optional[str] = None
    data: Optional[Dict[str, bytes]] = None

    def ensure_data(self) -> Dict[str, bytes]:
        if self.data is None:
            self.data = {}
        return self.data

    def set_tls(self, issued: IssuedCertificate) -> None:
        """Overwrite tls.crt / tls.key, leaving any other keys alone."""
        data = self.ensure_data()
        data[TLS_CERT_KEY] = issued.cert_pem
        data[TLS_PRIVATE_KEY_KEY] = issued.key_pem
