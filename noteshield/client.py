"""
NoteShield client facade.

This is the main entry point for users of the library. It wires storage, the
PGP engine, the key registry and the document service together.
"""

import asyncio
from typing import Self

import structlog

from noteshield.config import NoteShieldConfig
from noteshield.crypto.pgpy_engine import PgpyEngine
from noteshield.crypto.protocol import PGPEngine
from noteshield.models.keys import GeneratedKeyPair, KeyRecord
from noteshield.services.document_service import DocumentService
from noteshield.services.encrypted_document import EncryptedDocument, StateListener
from noteshield.services.key_registry import KeyRegistry
from noteshield.services.key_service import KeyService
from noteshield.storage.protocol import Storage

logger = structlog.get_logger(__name__)


class NoteShieldClient:
    """
    Async client for a vault of encrypted notes.

    Example:
        ```python
        async with NoteShieldClient(LocalStorage("~/vault")) as client:
            pair = await client.generate_key("ECC-ed25519", "Alice", "alice@example.com")

            path = await client.create_document()
            document = await client.open_document(path)
            await document.choose_recipient(pair.public_armored_key)
            await document.edit("secret notes")
            await client.close_document(path)
        ```
    """

    def __init__(
        self,
        storage: Storage,
        config: NoteShieldConfig | None = None,
        *,
        engine: PGPEngine | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            storage: Storage holding keys and documents.
            config: Client configuration. Uses defaults if not provided.
            engine: PGP engine. Defaults to a pgpy-backed engine.
        """
        self._config = config or NoteShieldConfig()
        self._storage = storage
        self._engine = engine or PgpyEngine(self._config)

        self._registry = KeyRegistry(self._engine)
        self._key_service = KeyService(self._storage, self._engine, self._registry, self._config)
        self._document_service = DocumentService(self._storage, self._engine, self._config)

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context."""
        await self._ensure_initialized()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        """Load the key registry once."""
        async with self._init_lock:
            if self._initialized:
                return

            loaded = await self._key_service.load()
            self._initialized = True
            logger.debug("Client initialized", keys=loaded)

    async def close(self) -> None:
        """Lock and release every open document."""
        async with self._init_lock:
            await self._document_service.close_all()
            logger.debug("Client closed")

    @property
    def config(self) -> NoteShieldConfig:
        return self._config

    @property
    def registry(self) -> KeyRegistry:
        return self._registry

    @property
    def keys(self) -> tuple[KeyRecord, ...]:
        """All known key records, in the order they were first seen."""
        return self._registry.records()

    def private_keys(self) -> list[KeyRecord]:
        """Key records usable to unlock a document."""
        return list(self._registry.private_keys())

    def find_key(self, key_id: str) -> KeyRecord | None:
        return self._registry.find_by_id(key_id)

    async def generate_key(
        self,
        algorithm: str,
        name: str,
        email: str,
        passphrase: str | None = None,
        expiry_seconds: int = 0,
        *,
        store_private: bool = False,
    ) -> GeneratedKeyPair:
        """
        Generate a key pair and store it in the vault.

        Args:
            algorithm: Algorithm token, e.g. ``"RSA-4096"`` or ``"ECC-ed25519"``.
            name: Name of the key owner.
            email: Email of the key owner.
            passphrase: Optional passphrase protecting the private key.
            expiry_seconds: Key lifetime, 0 for no expiry.
            store_private: Also store the private key in the vault.

        Returns:
            The generated key pair.

        Raises:
            UnsupportedAlgorithmError: If the algorithm token is unknown.
            WeakParametersError: If the algorithm is disallowed by policy.
        """
        await self._ensure_initialized()
        return await self._key_service.generate_key(
            algorithm,
            name,
            email,
            passphrase,
            expiry_seconds,
            store_private=store_private,
        )

    async def import_key(self, armored_key: str, *, expect_private: bool = False) -> KeyRecord:
        """
        Import an armored key into the vault.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
            NotAPrivateKeyError: If a private key was expected.
            NotAPublicKeyError: If a public key was expected.
        """
        await self._ensure_initialized()
        return await self._key_service.import_key(armored_key, expect_private=expect_private)

    async def candidate_from_armored(self, armored_key: str) -> KeyRecord:
        """Turn an ad-hoc armored key into an unlock candidate without storing it."""
        return await self._key_service.candidate_from_armored(armored_key)

    async def create_document(self, folder: str = "", name: str | None = None) -> str:
        """
        Create an empty encrypted document.

        Returns:
            Path of the new document.
        """
        return await self._document_service.create_document(folder, name)

    async def open_document(
        self, path: str, *, on_state_changed: StateListener | None = None
    ) -> EncryptedDocument:
        """
        Open an encrypted document.

        Raises:
            ValueError: If the path is not an encrypted document.
            DocumentAlreadyOpenError: If the document is already open.
        """
        await self._ensure_initialized()
        return await self._document_service.open_document(path, on_state_changed=on_state_changed)

    async def close_document(self, path: str) -> None:
        """Lock the document if needed and release it."""
        await self._document_service.close_document(path)
