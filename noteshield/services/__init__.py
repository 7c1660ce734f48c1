"""
Business logic services for NoteShield.
"""

from noteshield.services.document_service import DocumentService
from noteshield.services.encrypted_document import EncryptedDocument
from noteshield.services.key_registry import KeyRegistry
from noteshield.services.key_service import KeyService

__all__ = [
    "DocumentService",
    "EncryptedDocument",
    "KeyRegistry",
    "KeyService",
]
