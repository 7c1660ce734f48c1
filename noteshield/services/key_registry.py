"""
In-memory catalogue of known key pairs.

Public and private halves of the same key are merged into one record by
fingerprint, filling only the slots that are still missing.
"""

import asyncio
from collections.abc import Iterable, Iterator

import structlog

from noteshield.crypto.protocol import PGPEngine
from noteshield.exceptions import InvalidKeyFormatError
from noteshield.models.keys import KeyRecord

logger = structlog.get_logger(__name__)


class KeyRegistry:
    """
    Registry of key records keyed by fingerprint.

    Insertion order is kept for display only. Every mutation builds the new
    mapping aside and publishes it in a single assignment, so readers never
    observe a partially merged record. Intended for use from one event loop.
    """

    def __init__(self, engine: PGPEngine) -> None:
        """
        Args:
            engine: PGP engine used to parse key blobs.
        """
        self._engine = engine
        self._records: dict[str, KeyRecord] = {}

    async def load(self, blobs: Iterable[tuple[str, str]]) -> int:
        """
        Parse key blobs and merge them into the registry.

        Malformed blobs are logged and skipped so that one bad key file does
        not abort startup.

        Args:
            blobs: Sequence of (path, armored key) pairs.

        Returns:
            Number of blobs that were parsed and merged.
        """
        parsed: list[KeyRecord] = []
        for path, armored_key in blobs:
            try:
                parsed.append(await self.parse_record(armored_key))
            except InvalidKeyFormatError as e:
                logger.warning("Skipping unreadable key file", path=path, error=str(e))

        self._publish(parsed)
        logger.debug("Key registry loaded", merged=len(parsed), keys=len(self._records))
        return len(parsed)

    def add(self, record: KeyRecord) -> KeyRecord:
        """
        Insert or merge a record.

        Returns:
            The stored record after merging.
        """
        self._publish([record])
        return self._records[record.key_id]

    def find_by_id(self, key_id: str) -> KeyRecord | None:
        """Get a record by exact fingerprint."""
        return self._records.get(key_id)

    def private_keys(self) -> Iterator[KeyRecord]:
        """Lazily iterate over records holding a private key."""
        return (record for record in self._records.values() if record.is_private)

    def records(self) -> tuple[KeyRecord, ...]:
        """Snapshot of all records in insertion order."""
        return tuple(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[KeyRecord]:
        return iter(self.records())

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._records

    async def parse_record(self, armored_key: str) -> KeyRecord:
        """
        Parse a blob into a record without storing it.

        Raises:
            InvalidKeyFormatError: If the blob cannot be parsed as a key.
        """
        metadata = await asyncio.to_thread(self._engine.parse, armored_key)
        is_decrypted = None
        if metadata.is_private:
            is_decrypted = await asyncio.to_thread(self._engine.is_decrypted, armored_key)
        return KeyRecord.from_metadata(metadata, armored_key, is_decrypted=is_decrypted)

    def _publish(self, incoming: Iterable[KeyRecord]) -> None:
        records = dict(self._records)
        for record in incoming:
            existing = records.get(record.key_id)
            records[record.key_id] = record if existing is None else existing.merge(record)
        self._records = records
