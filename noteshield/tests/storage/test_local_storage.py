from pathlib import Path

import pytest

from noteshield.exceptions import StorageError
from noteshield.storage.local import LocalStorage
from noteshield.storage.protocol import Storage


def test_local_storage_satisfies_protocol(tmp_path: Path) -> None:
    assert isinstance(LocalStorage(tmp_path), Storage)


@pytest.mark.asyncio
async def test_write_then_read(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    await storage.write("notes/a.pgp", "ciphertext")

    assert await storage.read("notes/a.pgp") == "ciphertext"
    assert (tmp_path / "notes" / "a.pgp").read_text(encoding="utf-8") == "ciphertext"


@pytest.mark.asyncio
async def test_exists(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)
    (tmp_path / "a.pgp").write_text("", encoding="utf-8")

    assert await storage.exists("a.pgp")
    assert not await storage.exists("b.pgp")


@pytest.mark.asyncio
async def test_list_returns_sorted_files_only(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)
    keys = tmp_path / ".pgp"
    keys.mkdir()
    (keys / "B_public.asc").write_text("b", encoding="utf-8")
    (keys / "A_public.asc").write_text("a", encoding="utf-8")
    (keys / "nested").mkdir()

    assert await storage.list(".pgp") == [".pgp/A_public.asc", ".pgp/B_public.asc"]


@pytest.mark.asyncio
async def test_list_missing_folder_raises(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    with pytest.raises(StorageError, match="Not a folder"):
        await storage.list("missing")


@pytest.mark.asyncio
async def test_read_missing_file_raises(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    with pytest.raises(StorageError) as exc_info:
        await storage.read("missing.pgp")

    assert exc_info.value.path == "missing.pgp"


@pytest.mark.asyncio
async def test_create_folder(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    await storage.create_folder("a/b")

    assert (tmp_path / "a" / "b").is_dir()


@pytest.mark.asyncio
async def test_leading_slash_stays_inside_root(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    await storage.write("/a.pgp", "x")

    assert (tmp_path / "a.pgp").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["../outside.pgp", "notes/../../outside.pgp"])
async def test_paths_escaping_root_are_rejected(tmp_path: Path, path: str) -> None:
    storage = LocalStorage(tmp_path / "vault")

    with pytest.raises(StorageError, match="escapes"):
        await storage.write(path, "x")

    assert not (tmp_path / "outside.pgp").exists()
