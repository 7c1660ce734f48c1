"""Formatting and naming helpers."""

from datetime import datetime


def format_key_id(key_id: str) -> str:
    """
    Format a key ID for display: upper-case groups of four characters.

    Example:
        >>> format_key_id("a1b2c3d4e5f6")
        'A1B2 C3D4 E5F6'
    """
    compact = key_id.replace(" ", "")
    if not compact:
        return "Invalid"
    groups = [compact[i : i + 4] for i in range(0, len(compact), 4)]
    return " ".join(groups).upper()


def key_filename(key_id: str, *, is_private: bool) -> str:
    """Name of the file a key is persisted under: ``<fingerprint>_<private|public>.asc``."""
    kind = "private" if is_private else "public"
    return f"{key_id}_{kind}.asc"


def default_document_name(now: datetime, extension: str) -> str:
    """Timestamped name for a new document, e.g. ``2024-05-01 134501.pgp``."""
    return f"{now:%Y-%m-%d %H%M%S}.{extension}"


def join_path(folder: str, name: str) -> str:
    """Join a storage folder and a file name with POSIX separators."""
    folder = folder.strip("/")
    if not folder:
        return name
    return f"{folder}/{name}"
