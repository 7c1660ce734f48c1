"""
Document service for creating, opening and closing encrypted documents.
"""

from collections.abc import Callable
from datetime import datetime

import structlog

from noteshield.config import NoteShieldConfig
from noteshield.crypto.protocol import PGPEngine
from noteshield.exceptions import DocumentAlreadyOpenError, StorageError
from noteshield.models.document import DocumentState
from noteshield.services.encrypted_document import (
    CiphertextListener,
    EncryptedDocument,
    StateListener,
)
from noteshield.storage.protocol import Storage
from noteshield.utils import default_document_name, join_path

logger = structlog.get_logger(__name__)


class DocumentService:
    """
    Opens encrypted documents from storage and persists their ciphertext.

    A document path can be open only once at a time. Every ciphertext produced
    by an open document is written back to its path.
    """

    def __init__(
        self,
        storage: Storage,
        engine: PGPEngine,
        config: NoteShieldConfig | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Args:
            storage: Storage holding the documents.
            engine: PGP engine handed to every opened document.
            config: Configuration (document extension).
            clock: Source of the current time for default document names.
        """
        self._storage = storage
        self._engine = engine
        self._config = config or NoteShieldConfig()
        self._clock = clock
        # None while the content is still being read
        self._open: dict[str, EncryptedDocument | None] = {}

    @property
    def open_paths(self) -> tuple[str, ...]:
        return tuple(path for path, document in self._open.items() if document is not None)

    def is_open(self, path: str) -> bool:
        return path in self._open

    def get_document(self, path: str) -> EncryptedDocument | None:
        """Get an open document by path."""
        return self._open.get(path)

    async def create_document(self, folder: str = "", name: str | None = None) -> str:
        """
        Create an empty document.

        Args:
            folder: Storage folder to create the document in.
            name: File name, with or without the document extension.
                Defaults to the current timestamp.

        Returns:
            Path of the new document.

        Raises:
            StorageError: If a file already exists at that path.
        """
        extension = self._config.document_extension
        if name is None:
            filename = default_document_name(self._clock(), extension)
        elif name.endswith(f".{extension}"):
            filename = name
        else:
            filename = f"{name}.{extension}"

        path = join_path(folder, filename)
        if await self._storage.exists(path):
            msg = "A file with this name already exists"
            raise StorageError(msg, path=path)

        await self._storage.write(path, "")
        logger.info("Document created", path=path)
        return path

    async def open_document(
        self,
        path: str,
        *,
        on_state_changed: StateListener | None = None,
    ) -> EncryptedDocument:
        """
        Open a document and bind its ciphertext updates to storage.

        Args:
            path: Path of the document.
            on_state_changed: Host callback for state transitions.

        Returns:
            The document, NEW if the file is empty, LOCKED otherwise.

        Raises:
            ValueError: If the path does not carry the document extension.
            DocumentAlreadyOpenError: If the path is already open.
            StorageError: If the file cannot be read.
        """
        if not path.endswith(f".{self._config.document_extension}"):
            msg = f"Not an encrypted document: {path}"
            raise ValueError(msg)
        if path in self._open:
            msg = "Multiple views of the same encrypted document are not supported"
            raise DocumentAlreadyOpenError(msg, path=path)

        self._open[path] = None
        try:
            ciphertext = await self._storage.read(path)
        except Exception:
            del self._open[path]
            raise

        document = EncryptedDocument.open(
            self._engine,
            ciphertext,
            path=path,
            on_state_changed=on_state_changed,
            on_ciphertext_updated=self._writer(path),
        )
        self._open[path] = document
        return document

    async def close_document(self, path: str) -> None:
        """
        Lock the document if needed and release its path.

        Waits for in-flight edits to be persisted. Closing a path that is not
        open does nothing.
        """
        document = self._open.get(path)
        if document is None:
            return

        if document.state is DocumentState.UNLOCKED:
            await document.lock()
        self._open.pop(path, None)
        logger.debug("Document closed", path=path)

    async def close_all(self) -> None:
        for path in self.open_paths:
            await self.close_document(path)

    def _writer(self, path: str) -> CiphertextListener:
        async def _write(ciphertext: str) -> None:
            await self._storage.write(path, ciphertext)

        return _write
