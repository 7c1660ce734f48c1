"""
NoteShield.

Async library for PGP-encrypted notes: a key registry backed by a vault of
armored key files, and an encrypted document state machine that re-encrypts
every edit to the chosen recipient.

Example:
    ```python
    from noteshield import LocalStorage, NoteShieldClient

    async with NoteShieldClient(LocalStorage("vault")) as client:
        path = await client.create_document()
        document = await client.open_document(path)
        await document.choose_recipient(client.keys[0].public_armored_key)
        await document.edit("meeting notes")
        await document.lock()
    ```
"""

from noteshield.client import NoteShieldClient
from noteshield.config import NoteShieldConfig
from noteshield.exceptions import (
    CorruptCiphertextError,
    CryptoError,
    DocumentAlreadyOpenError,
    DocumentError,
    EngineFailureError,
    InvalidKeyFormatError,
    InvalidStateError,
    NoteShieldError,
    NotAPrivateKeyError,
    NotAPublicKeyError,
    StorageError,
    UnsupportedAlgorithmError,
    WeakParametersError,
    WrongPassphraseError,
)
from noteshield.models.document import DocumentAction, DocumentState
from noteshield.models.keys import GeneratedKeyPair, KeyAlgorithm, KeyExpiry, KeyRecord
from noteshield.services.encrypted_document import EncryptedDocument
from noteshield.storage.local import LocalStorage

__version__ = "0.1.0"

__all__ = [
    # Main client
    "NoteShieldClient",
    "NoteShieldConfig",
    "LocalStorage",
    # Models
    "EncryptedDocument",
    "DocumentState",
    "DocumentAction",
    "KeyRecord",
    "KeyAlgorithm",
    "KeyExpiry",
    "GeneratedKeyPair",
    # Exceptions
    "NoteShieldError",
    "CryptoError",
    "InvalidKeyFormatError",
    "NotAPrivateKeyError",
    "NotAPublicKeyError",
    "WrongPassphraseError",
    "CorruptCiphertextError",
    "UnsupportedAlgorithmError",
    "WeakParametersError",
    "EngineFailureError",
    "DocumentError",
    "InvalidStateError",
    "DocumentAlreadyOpenError",
    "StorageError",
]
