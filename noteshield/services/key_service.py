"""
Key persistence and lifecycle service.

Keys are stored as individual armored files under the configured key
directory, named ``<fingerprint>_<private|public>.asc``.
"""

import asyncio

import structlog

from noteshield.config import NoteShieldConfig
from noteshield.crypto.protocol import PGPEngine
from noteshield.exceptions import InvalidKeyFormatError, NotAPrivateKeyError, NotAPublicKeyError
from noteshield.models.keys import GeneratedKeyPair, KeyRecord
from noteshield.services.key_registry import KeyRegistry
from noteshield.storage.protocol import Storage
from noteshield.utils import join_path, key_filename

logger = structlog.get_logger(__name__)


class KeyService:
    """
    Loads, imports, generates and persists keys.

    Storage is the source of truth; the registry is rebuilt from it on load
    and kept in sync on every save.
    """

    def __init__(
        self,
        storage: Storage,
        engine: PGPEngine,
        registry: KeyRegistry,
        config: NoteShieldConfig | None = None,
    ) -> None:
        """
        Args:
            storage: Storage holding the key directory.
            engine: PGP engine for key generation.
            registry: Registry updated with every loaded or saved key.
            config: Configuration (key directory, import limits).
        """
        self._storage = storage
        self._engine = engine
        self._registry = registry
        self._config = config or NoteShieldConfig()

    @property
    def registry(self) -> KeyRegistry:
        return self._registry

    async def load(self) -> int:
        """
        Read every key file from the key directory into the registry.

        Cached parse results are dropped first, so after a reload the cache
        only holds keys present in the key directory.

        Returns:
            Number of key files merged into the registry.
        """
        self._engine.clear_cache()
        key_directory = self._config.key_directory
        if not await self._storage.exists(key_directory):
            logger.debug("No key directory", directory=key_directory)
            return 0

        paths = sorted(await self._storage.list(key_directory))
        blobs = [(path, await self._storage.read(path)) for path in paths]
        return await self._registry.load(blobs)

    async def save_key(self, armored_key: str) -> KeyRecord:
        """
        Persist a single armored key and add it to the registry.

        Returns:
            The registry record after merging.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
        """
        record = await self._registry.parse_record(armored_key)

        await self._ensure_key_directory()
        filename = key_filename(record.key_id, is_private=record.is_private)
        await self._storage.write(join_path(self._config.key_directory, filename), armored_key)
        logger.info("Key saved", key_id=record.key_id, is_private=record.is_private)

        return self._registry.add(record)

    async def save_key_pair(
        self, public_armored_key: str, private_armored_key: str | None = None
    ) -> KeyRecord:
        """
        Persist a public key and, optionally, its private counterpart.

        Nothing is written if the private blob is invalid.

        Returns:
            The registry record after merging both halves.

        Raises:
            InvalidKeyFormatError: If a key cannot be parsed.
            NotAPrivateKeyError: If the private blob is not a private key.
        """
        if private_armored_key is not None:
            private_record = await self._registry.parse_record(private_armored_key)
            if not private_record.is_private:
                msg = "The provided key is not a private key"
                raise NotAPrivateKeyError(msg)

        record = await self.save_key(public_armored_key)
        if private_armored_key is None:
            return record
        return await self.save_key(private_armored_key)

    async def import_key(self, armored_key: str, *, expect_private: bool) -> KeyRecord:
        """
        Import a user-supplied key after checking its kind.

        Args:
            armored_key: ASCII-armored key pasted or uploaded by the user.
            expect_private: Whether a private key is expected.

        Raises:
            InvalidKeyFormatError: If the blob is too large or unparseable.
            NotAPrivateKeyError: If a private key was expected.
            NotAPublicKeyError: If a public key was expected.
        """
        if len(armored_key) > self._config.max_key_size:
            msg = f"Key is too large ({len(armored_key)} characters)"
            raise InvalidKeyFormatError(msg)

        record = await self._registry.parse_record(armored_key)
        if expect_private and not record.is_private:
            msg = "The key is not a private key"
            raise NotAPrivateKeyError(msg)
        if not expect_private and record.is_private:
            msg = "The key is not a public key"
            raise NotAPublicKeyError(msg)
        return await self.save_key(armored_key)

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
        Generate a key pair and persist it.

        The public key is always stored. The private key is stored only when
        ``store_private`` is set; otherwise the caller is responsible for
        handing it to the user.

        Returns:
            The generated key pair.
        """
        pair = await asyncio.to_thread(
            self._engine.generate, algorithm, name, email, passphrase, expiry_seconds
        )
        await self.save_key_pair(
            pair.public_armored_key,
            pair.private_armored_key if store_private else None,
        )
        return pair

    async def candidate_from_armored(self, armored_key: str) -> KeyRecord:
        """
        Build an unlock candidate from a key that is not stored in the registry.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
        """
        return await self._registry.parse_record(armored_key)

    async def _ensure_key_directory(self) -> None:
        if not await self._storage.exists(self._config.key_directory):
            await self._storage.create_folder(self._config.key_directory)
