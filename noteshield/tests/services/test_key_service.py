from unittest.mock import Mock

import pytest

from noteshield.config import NoteShieldConfig
from noteshield.crypto.pgpy_engine import PgpyEngine
from noteshield.exceptions import (
    InvalidKeyFormatError,
    NotAPrivateKeyError,
    NotAPublicKeyError,
    UnsupportedAlgorithmError,
)
from noteshield.models.keys import GeneratedKeyPair
from noteshield.services.key_registry import KeyRegistry
from noteshield.services.key_service import KeyService
from noteshield.tests.utils.constants import NOT_A_KEY, PASSPHRASE
from noteshield.tests.utils.memory_storage import InMemoryStorage


def _service(engine: PgpyEngine, storage: InMemoryStorage, **config: object) -> KeyService:
    return KeyService(storage, engine, KeyRegistry(engine), NoteShieldConfig(**config))


@pytest.mark.asyncio
async def test_load_without_key_directory(engine: PgpyEngine, storage: InMemoryStorage) -> None:
    service = _service(engine, storage)

    assert await service.load() == 0
    assert len(service.registry) == 0


@pytest.mark.asyncio
async def test_load_drops_cached_key_metadata(storage: InMemoryStorage) -> None:
    engine = Mock()
    service = KeyService(storage, engine, KeyRegistry(engine))

    await service.load()

    engine.clear_cache.assert_called_once()


@pytest.mark.asyncio
async def test_load_reads_key_files(
    engine: PgpyEngine,
    key_pair: GeneratedKeyPair,
    protected_key_pair: GeneratedKeyPair,
) -> None:
    storage = InMemoryStorage(
        {
            f".pgp/{key_pair.key_id}_public.asc": key_pair.public_armored_key,
            f".pgp/{key_pair.key_id}_private.asc": key_pair.private_armored_key,
            f".pgp/{protected_key_pair.key_id}_public.asc": protected_key_pair.public_armored_key,
            ".pgp/broken.asc": NOT_A_KEY,
            "notes/a.pgp": "",
        }
    )
    service = _service(engine, storage)

    assert await service.load() == 3
    assert len(service.registry) == 2
    record = service.registry.find_by_id(key_pair.key_id)
    assert record.is_private
    assert record.is_decrypted is True
    assert record.public_armored_key == key_pair.public_armored_key


@pytest.mark.asyncio
async def test_save_key_writes_named_file(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    record = await service.save_key(key_pair.private_armored_key)

    assert record.is_private
    assert ".pgp" in storage.folders
    assert storage.files[f".pgp/{key_pair.key_id}_private.asc"] == key_pair.private_armored_key
    assert key_pair.key_id in service.registry


@pytest.mark.asyncio
async def test_save_key_uses_configured_directory(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage, key_directory="keys")

    await service.save_key(key_pair.public_armored_key)

    assert f"keys/{key_pair.key_id}_public.asc" in storage.files


@pytest.mark.asyncio
async def test_save_key_rejects_garbage(engine: PgpyEngine, storage: InMemoryStorage) -> None:
    service = _service(engine, storage)

    with pytest.raises(InvalidKeyFormatError):
        await service.save_key(NOT_A_KEY)

    assert storage.writes == []


@pytest.mark.asyncio
async def test_save_key_pair(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    record = await service.save_key_pair(
        key_pair.public_armored_key, key_pair.private_armored_key
    )

    assert record.public_armored_key == key_pair.public_armored_key
    assert record.private_armored_key == key_pair.private_armored_key
    assert [path for path, _ in storage.writes] == [
        f".pgp/{key_pair.key_id}_public.asc",
        f".pgp/{key_pair.key_id}_private.asc",
    ]


@pytest.mark.asyncio
async def test_save_key_pair_rejects_public_as_private(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    with pytest.raises(NotAPrivateKeyError):
        await service.save_key_pair(key_pair.public_armored_key, key_pair.public_armored_key)

    assert storage.writes == []


@pytest.mark.asyncio
async def test_import_public_key(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    record = await service.import_key(key_pair.public_armored_key, expect_private=False)

    assert not record.is_private
    assert f".pgp/{key_pair.key_id}_public.asc" in storage.files


@pytest.mark.asyncio
async def test_import_checks_key_kind(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    with pytest.raises(NotAPrivateKeyError):
        await service.import_key(key_pair.public_armored_key, expect_private=True)
    with pytest.raises(NotAPublicKeyError):
        await service.import_key(key_pair.private_armored_key, expect_private=False)

    assert storage.writes == []


@pytest.mark.asyncio
async def test_import_rejects_oversized_blob(
    engine: PgpyEngine, storage: InMemoryStorage, key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage, max_key_size=100)

    with pytest.raises(InvalidKeyFormatError, match="too large"):
        await service.import_key(key_pair.public_armored_key, expect_private=False)


@pytest.mark.asyncio
async def test_generate_key_stores_public_only_by_default(
    engine: PgpyEngine, storage: InMemoryStorage
) -> None:
    service = _service(engine, storage)

    pair = await service.generate_key("ECC-ed25519", "Dave", "dave@example.com")

    assert storage.files == {f".pgp/{pair.key_id}_public.asc": pair.public_armored_key}
    assert not service.registry.find_by_id(pair.key_id).is_private


@pytest.mark.asyncio
async def test_generate_key_can_store_private(engine: PgpyEngine, storage: InMemoryStorage) -> None:
    service = _service(engine, storage)

    pair = await service.generate_key(
        "ECC-ed25519", "Dave", "dave@example.com", PASSPHRASE, store_private=True
    )

    record = service.registry.find_by_id(pair.key_id)
    assert record.is_private
    assert record.is_decrypted is False
    assert f".pgp/{pair.key_id}_private.asc" in storage.files


@pytest.mark.asyncio
async def test_generate_key_propagates_engine_errors(storage: InMemoryStorage) -> None:
    engine = Mock()
    engine.generate.side_effect = UnsupportedAlgorithmError("Unsupported", algorithm="DSA-1024")
    service = KeyService(storage, engine, KeyRegistry(engine))

    with pytest.raises(UnsupportedAlgorithmError):
        await service.generate_key("DSA-1024", "Dave", "dave@example.com")

    assert storage.writes == []


@pytest.mark.asyncio
async def test_candidate_from_armored_is_not_stored(
    engine: PgpyEngine, storage: InMemoryStorage, other_key_pair: GeneratedKeyPair
) -> None:
    service = _service(engine, storage)

    candidate = await service.candidate_from_armored(other_key_pair.private_armored_key)

    assert candidate.is_private
    assert candidate.key_id not in service.registry
    assert storage.writes == []
