from collections.abc import Callable
from unittest.mock import Mock

import pytest

from noteshield.crypto.pgpy_engine import PgpyEngine
from noteshield.crypto.protocol import PGPEngine
from noteshield.models.keys import GeneratedKeyPair, KeyMetadata, KeyRecord
from noteshield.tests.utils.constants import FINGERPRINT, PASSPHRASE
from noteshield.tests.utils.memory_storage import InMemoryStorage


@pytest.fixture(scope="session")
def engine() -> PgpyEngine:
    return PgpyEngine()


@pytest.fixture(scope="session")
def key_pair(engine: PgpyEngine) -> GeneratedKeyPair:
    return engine.generate("ECC-p256", "Alice", "alice@example.com")


@pytest.fixture(scope="session")
def protected_key_pair(engine: PgpyEngine) -> GeneratedKeyPair:
    return engine.generate("ECC-p256", "Bob", "bob@example.com", passphrase=PASSPHRASE)


@pytest.fixture(scope="session")
def other_key_pair(engine: PgpyEngine) -> GeneratedKeyPair:
    return engine.generate("ECC-p256", "Carol", "carol@example.com")


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def mock_engine() -> Mock:
    engine = Mock(spec=PGPEngine)
    engine.encrypt.side_effect = lambda plaintext, key: f"encrypted[{plaintext}]"
    engine.decrypt.return_value = "decrypted text"
    return engine


@pytest.fixture
def make_record() -> Callable[..., KeyRecord]:
    def _make(
        key_id: str = FINGERPRINT,
        *,
        private: bool = False,
        user_id: str | None = "Alice <alice@example.com>",
        is_decrypted: bool | None = None,
    ) -> KeyRecord:
        metadata = KeyMetadata(
            key_id=key_id,
            user_id=user_id,
            is_private=private,
            public_armored_key=f"derived-public-{key_id}" if private else f"public-{key_id}",
        )
        armored = f"private-{key_id}" if private else f"public-{key_id}"
        if private and is_decrypted is None:
            is_decrypted = True
        return KeyRecord.from_metadata(metadata, armored, is_decrypted=is_decrypted)

    return _make
