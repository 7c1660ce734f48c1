"""
Domain models for NoteShield.

These are immutable (frozen) dataclasses and enums representing the core domain concepts.
"""

from noteshield.models.document import DocumentAction, DocumentState, available_actions
from noteshield.models.keys import (
    GeneratedKeyPair,
    KeyAlgorithm,
    KeyAlgorithmFamily,
    KeyExpiry,
    KeyMetadata,
    KeyRecord,
)

__all__ = [
    # Keys
    "KeyAlgorithm",
    "KeyAlgorithmFamily",
    "KeyExpiry",
    "KeyMetadata",
    "KeyRecord",
    "GeneratedKeyPair",
    # Documents
    "DocumentState",
    "DocumentAction",
    "available_actions",
]
