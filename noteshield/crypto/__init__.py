"""
Cryptographic operations for NoteShield.

This module provides:
- The PGPEngine protocol consumed by the registry and documents
- A pgpy-backed implementation (key parsing, generation, encryption, decryption)
"""

from noteshield.crypto.pgpy_engine import PgpyEngine
from noteshield.crypto.protocol import PGPEngine

__all__ = [
    "PGPEngine",
    "PgpyEngine",
]
