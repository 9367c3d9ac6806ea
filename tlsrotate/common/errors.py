"""Exception types raised by the rotation pipeline.

Every failure is fatal to a run. Each exception names the stage that
failed so the command line entry point can report it in one line:

- RandomSourceError: the random source could not supply the subject name bytes
- KeyGenerationError: EC key pair generation failed
- SerialNumberError: the random source could not supply the serial number
- CertificateBuildError: building or self-signing the certificate failed
- EncodingError: DER/PEM serialization failed
- SecretFetchError / SecretUpdateError: the secret store rejected a call
- ConfigurationError: settings or cluster credentials are unusable
"""


class RotationError(Exception):
    """Base class for all rotation failures."""

    stage = "rotation"

    def __str__(self) -> str:
        msg = super().__str__()
        cause = self.__cause__
        if cause is not None and str(cause) and str(cause) not in msg:
            return f"{msg}: {cause}"
        return msg


class RandomSourceError(RotationError):
    stage = "subject name"


class KeyGenerationError(RotationError):
    stage = "key generation"


class SerialNumberError(RotationError):
    stage = "serial number"


class CertificateBuildError(RotationError):
    stage = "certificate build"


class EncodingError(RotationError):
    stage = "encoding"


class SecretFetchError(RotationError):
    stage = "secret fetch"


class SecretUpdateError(RotationError):
    stage = "secret update"


class ConfigurationError(RotationError):
    stage = "configuration"


__all__ = [
    "RotationError",
    "RandomSourceError",
    "KeyGenerationError",
    "SerialNumberError",
    "CertificateBuildError",
    "EncodingError",
    "SecretFetchError",
    "SecretUpdateError",
    "ConfigurationError",
]
