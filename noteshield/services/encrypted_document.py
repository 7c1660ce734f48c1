"""
Encrypted document state machine.

A document is NEW until a recipient key is chosen, then toggles between
UNLOCKED (plaintext held, every edit re-encrypted and persisted) and LOCKED
(only the ciphertext is held).
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Self

import structlog

from noteshield.crypto.protocol import PGPEngine
from noteshield.exceptions import InvalidStateError, NotAPrivateKeyError
from noteshield.models.document import DocumentAction, DocumentState, available_actions
from noteshield.models.keys import KeyRecord

logger = structlog.get_logger(__name__)

StateListener = Callable[[DocumentState], None]
CiphertextListener = Callable[[str], Awaitable[None]]


class EncryptedDocument:
    """
    Controller for one open encrypted document.

    The host drives it through ``choose_recipient``, ``unlock``, ``edit`` and
    ``lock``, and is notified through ``on_state_changed`` and
    ``on_ciphertext_updated`` (which is expected to persist the ciphertext).

    Concurrency:
    - State checks and state changes happen without suspending in between.
    - Engine calls run in a worker thread.
    - Encrypt-and-persist cycles are serialised per document by an
      ``asyncio.Lock`` (FIFO), so the last persisted ciphertext always belongs
      to the last edit.

    Example:
        ```python
        document = EncryptedDocument.open(engine, "")
        await document.choose_recipient(record.public_armored_key)
        await document.edit("secret notes")
        await document.lock()
        ```
    """

    def __init__(
        self,
        engine: PGPEngine,
        ciphertext: str = "",
        *,
        path: str | None = None,
        on_state_changed: StateListener | None = None,
        on_ciphertext_updated: CiphertextListener | None = None,
    ) -> None:
        """
        Args:
            engine: PGP engine used for encryption and decryption.
            ciphertext: Persisted content, empty for a never-encrypted document.
            path: Backing storage path, for logging and host bookkeeping.
            on_state_changed: Called after every state transition.
            on_ciphertext_updated: Awaited with each new ciphertext to persist it.
        """
        self._engine = engine
        self._path = path
        self._on_state_changed = on_state_changed
        self._on_ciphertext_updated = on_ciphertext_updated

        self._ciphertext = ciphertext
        self._plaintext = ""
        self._recipient_public_key: str | None = None
        self._state = DocumentState.LOCKED if ciphertext.strip() else DocumentState.NEW
        self._write_lock = asyncio.Lock()

    @classmethod
    def open(
        cls,
        engine: PGPEngine,
        ciphertext: str,
        *,
        path: str | None = None,
        on_state_changed: StateListener | None = None,
        on_ciphertext_updated: CiphertextListener | None = None,
    ) -> Self:
        """
        Open a document from its persisted content.

        Empty content opens as NEW, anything else as LOCKED.
        """
        document = cls(
            engine,
            ciphertext,
            path=path,
            on_state_changed=on_state_changed,
            on_ciphertext_updated=on_ciphertext_updated,
        )
        logger.debug("Document opened", path=path, state=document.state.value)
        return document

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def path(self) -> str | None:
        return self._path

    @property
    def ciphertext(self) -> str:
        """Last ciphertext produced or loaded; empty for a NEW document."""
        return self._ciphertext

    @property
    def plaintext(self) -> str:
        """Decrypted working buffer; empty unless UNLOCKED."""
        if self._state is not DocumentState.UNLOCKED:
            return ""
        return self._plaintext

    @property
    def recipient_public_key(self) -> str | None:
        return self._recipient_public_key

    @property
    def available_actions(self) -> frozenset[DocumentAction]:
        return available_actions(self._state)

    @property
    def has_pending_writes(self) -> bool:
        """Whether an encrypt-and-persist cycle is in flight."""
        return self._write_lock.locked()

    async def choose_recipient(self, public_key: str) -> None:
        """
        Choose the recipient of a NEW document and unlock it with empty content.

        The empty plaintext is encrypted and persisted right away, so the
        backing file holds ciphertext from this point on.

        Args:
            public_key: ASCII-armored public key of the recipient.

        Raises:
            InvalidStateError: If the document is not NEW.
            NotAPublicKeyError: If a private key is given.
            CryptoError: If encryption fails; the document stays NEW.
            StorageError: If persisting fails; the document stays NEW.
        """
        self._require_state(DocumentState.NEW, "choose_recipient")
        async with self._write_lock:
            self._require_state(DocumentState.NEW, "choose_recipient")
            ciphertext = await asyncio.to_thread(self._engine.encrypt, "", public_key)
            await self._publish_ciphertext(ciphertext)

            self._ciphertext = ciphertext
            self._recipient_public_key = public_key
            self._plaintext = ""
            self._transition(DocumentState.UNLOCKED)

    async def unlock(self, candidate: KeyRecord, passphrase: str | None = None) -> None:
        """
        Decrypt a LOCKED document with one candidate key.

        Args:
            candidate: Key record holding the private key to try.
            passphrase: Passphrase, needed only if the key is protected.

        Raises:
            InvalidStateError: If the document is not LOCKED.
            NotAPrivateKeyError: If the candidate has no private key.
            WrongPassphraseError: If the passphrase is missing or wrong.
            CorruptCiphertextError: If the ciphertext does not match the key.
        """
        self._require_state(DocumentState.LOCKED, "unlock")
        if not candidate.is_private:
            msg = "The key is not a private key"
            raise NotAPrivateKeyError(msg)

        async with self._write_lock:
            self._require_state(DocumentState.LOCKED, "unlock")
            plaintext = await asyncio.to_thread(
                self._engine.decrypt,
                self._ciphertext,
                candidate.private_armored_key,
                passphrase,
            )
            self._plaintext = plaintext
            self._recipient_public_key = candidate.public_armored_key
            self._transition(DocumentState.UNLOCKED)
            logger.debug("Document unlocked", path=self._path, key_id=candidate.key_id)

    async def edit(self, new_plaintext: str) -> str:
        """
        Replace the plaintext, then encrypt and persist it.

        The text and recipient are captured when the edit is made; the
        encryption waits for earlier edits of this document to finish.

        Args:
            new_plaintext: Full new content of the document.

        Returns:
            The new ciphertext.

        Raises:
            InvalidStateError: If the document is not UNLOCKED.
            CryptoError: If encryption fails; the previous ciphertext is kept
                and the plaintext stays in memory.
            StorageError: If persisting fails; ``ciphertext`` still holds the
                last persisted value.
        """
        self._require_state(DocumentState.UNLOCKED, "edit")
        recipient = self._recipient_public_key
        self._plaintext = new_plaintext

        async with self._write_lock:
            try:
                ciphertext = await asyncio.to_thread(self._engine.encrypt, new_plaintext, recipient)
            except Exception as e:
                logger.warning("Encryption failed", path=self._path, error_type=type(e).__name__)
                raise
            await self._publish_ciphertext(ciphertext)
            self._ciphertext = ciphertext
            return ciphertext

    async def lock(self) -> None:
        """
        Drop the plaintext and return to LOCKED.

        Waits for in-flight edits so their ciphertext is persisted before
        returning. Nothing is re-encrypted.

        Raises:
            InvalidStateError: If the document is not UNLOCKED.
        """
        self._require_state(DocumentState.UNLOCKED, "lock")
        self._plaintext = ""
        self._transition(DocumentState.LOCKED)

        async with self._write_lock:
            pass

    def _require_state(self, expected: DocumentState, operation: str) -> None:
        if self._state is expected:
            return
        msg = f"Cannot {operation.replace('_', ' ')} a {self._state.value} document"
        raise InvalidStateError(msg, state=self._state.value, operation=operation)

    def _transition(self, state: DocumentState) -> None:
        previous = self._state
        self._state = state
        logger.debug(
            "Document state changed", path=self._path, previous=previous.value, state=state.value
        )
        if self._on_state_changed is not None:
            self._on_state_changed(state)

    async def _publish_ciphertext(self, ciphertext: str) -> None:
        if self._on_ciphertext_updated is not None:
            await self._on_ciphertext_updated(ciphertext)
