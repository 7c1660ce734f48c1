"""
Filesystem storage rooted at a vault directory.
"""

import asyncio
from pathlib import Path

import structlog

from noteshield.exceptions import StorageError

logger = structlog.get_logger(__name__)


class LocalStorage:
    """
    Storage backed by a local directory.

    Blocking filesystem calls run in a worker thread. Every path is resolved
    inside the root; paths escaping it are rejected.
    """

    def __init__(self, root: Path | str) -> None:
        """
        Args:
            root: Vault directory. Created on first write if missing.
        """
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)

    async def list(self, directory: str) -> list[str]:
        target = self._resolve(directory)

        def _list() -> list[str]:
            if not target.is_dir():
                msg = f"Not a folder: {directory}"
                raise StorageError(msg, path=directory)
            return sorted(
                child.relative_to(self._root).as_posix()
                for child in target.iterdir()
                if child.is_file()
            )

        return await asyncio.to_thread(_list)

    async def read(self, path: str) -> str:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_text, encoding="utf-8")
        except OSError as e:
            msg = f"Failed to read file: {e}"
            raise StorageError(msg, path=path) from e

    async def write(self, path: str, text: str) -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            msg = f"Failed to write file: {e}"
            raise StorageError(msg, path=path) from e
        logger.debug("File written", path=path)

    async def create_folder(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Failed to create folder: {e}"
            raise StorageError(msg, path=path) from e

    def _resolve(self, path: str) -> Path:
        target = (self._root / path.lstrip("/")).resolve()
        if target != self._root and self._root not in target.parents:
            msg = "Path escapes the storage root"
            raise StorageError(msg, path=path)
        return target
