"""
Storage adapters for key files and encrypted documents.
"""

from noteshield.storage.local import LocalStorage
from noteshield.storage.protocol import Storage

__all__ = [
    "LocalStorage",
    "Storage",
]
