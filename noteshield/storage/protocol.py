"""
Storage protocol definition.

Paths are POSIX-style and relative to the storage root (the vault).
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Async storage adapter holding key files and encrypted documents."""

    async def exists(self, path: str) -> bool:
        """Check whether a file or folder exists."""
        ...

    async def list(self, directory: str) -> list[str]:
        """
        List the files directly inside a folder.

        Returns:
            Paths of the files, relative to the storage root.
        """
        ...

    async def read(self, path: str) -> str:
        """Read a text file."""
        ...

    async def write(self, path: str, text: str) -> None:
        """Create or overwrite a text file."""
        ...

    async def create_folder(self, path: str) -> None:
        """Create a folder, including missing parents."""
        ...
