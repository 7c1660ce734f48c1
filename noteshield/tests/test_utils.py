from datetime import datetime

from noteshield.utils import default_document_name, format_key_id, join_path, key_filename


def test_format_key_id_groups_by_four() -> None:
    assert format_key_id("a1b2c3d4e5f6") == "A1B2 C3D4 E5F6"


def test_format_key_id_ignores_existing_spaces() -> None:
    assert format_key_id("A1B2 C3D4") == "A1B2 C3D4"


def test_format_key_id_empty_is_invalid() -> None:
    assert format_key_id("") == "Invalid"


def test_key_filename() -> None:
    assert key_filename("ABCD", is_private=True) == "ABCD_private.asc"
    assert key_filename("ABCD", is_private=False) == "ABCD_public.asc"


def test_default_document_name_uses_timestamp() -> None:
    now = datetime(2024, 5, 1, 13, 45, 1)

    assert default_document_name(now, "pgp") == "2024-05-01 134501.pgp"


def test_join_path() -> None:
    assert join_path("", "a.pgp") == "a.pgp"
    assert join_path("/notes/", "a.pgp") == "notes/a.pgp"
    assert join_path("notes/work", "a.pgp") == "notes/work/a.pgp"
