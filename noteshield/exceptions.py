"""
NoteShield exception hierarchy.

All exceptions inherit from NoteShieldError for easy catching.
"""

from typing import Any


class NoteShieldError(Exception):
    """Base exception for all noteshield errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class CryptoError(NoteShieldError):
    """Cryptographic operation failed."""


class InvalidKeyFormatError(CryptoError):
    """The blob cannot be parsed as an OpenPGP key."""


class NotAPrivateKeyError(CryptoError):
    """A private key was required but a public key was given."""


class NotAPublicKeyError(CryptoError):
    """A public key was required but a private key was given."""


class WrongPassphraseError(CryptoError):
    """The private key passphrase is missing or incorrect."""


class CorruptCiphertextError(CryptoError):
    """The ciphertext cannot be parsed or was not encrypted to this key."""


class UnsupportedAlgorithmError(CryptoError):
    """Unknown key generation algorithm token."""

    def __init__(self, message: str, *, algorithm: str | None = None) -> None:
        super().__init__(message, algorithm=algorithm)
        self.algorithm = algorithm


class WeakParametersError(CryptoError):
    """Key generation parameters are disallowed by policy."""

    def __init__(self, message: str, *, algorithm: str | None = None) -> None:
        super().__init__(message, algorithm=algorithm)
        self.algorithm = algorithm


class EngineFailureError(CryptoError):
    """Internal error in the PGP engine."""


class DocumentError(NoteShieldError):
    """Encrypted document operation failed."""


class InvalidStateError(DocumentError):
    """Operation is not allowed in the document's current state."""

    def __init__(self, message: str, *, state: str, operation: str) -> None:
        super().__init__(message, state=state, operation=operation)
        self.state = state
        self.operation = operation


class DocumentAlreadyOpenError(DocumentError):
    """The document is already open in another view."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class StorageError(NoteShieldError):
    """Storage operation failed."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path
