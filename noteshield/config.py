"""
NoteShield configuration.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class NoteShieldConfig:
    """
    Attributes:
        key_directory: Storage folder holding the key files.
        document_extension: File extension of encrypted documents.
        min_rsa_bits: Smallest RSA modulus accepted for key generation.
        disallowed_curves: Curve names rejected for key generation.
        max_key_size: Maximum number of characters accepted when importing a key.
        key_cache_max_size: Maximum number of parsed keys to cache.
        key_cache_ttl: Time-to-live for parsed key metadata in seconds.
    """

    key_directory: str = ".pgp"
    document_extension: str = "pgp"
    min_rsa_bits: int = 2048
    disallowed_curves: frozenset[str] = field(default_factory=frozenset)
    max_key_size: int = 10000
    key_cache_max_size: int = 256
    key_cache_ttl: float = 300.0

    def __post_init__(self) -> None:
        if not self.key_directory.strip("/"):
            msg = "key_directory must not be empty"
            raise ValueError(msg)
        if not self.document_extension or "." in self.document_extension:
            msg = "document_extension must be a bare extension without dots"
            raise ValueError(msg)
        if self.min_rsa_bits <= 0:
            msg = "min_rsa_bits must be positive"
            raise ValueError(msg)
        if self.max_key_size <= 0:
            msg = "max_key_size must be positive"
            raise ValueError(msg)
        if self.key_cache_max_size <= 0:
            msg = "key_cache_max_size must be positive"
            raise ValueError(msg)
        if self.key_cache_ttl <= 0:
            msg = "key_cache_ttl must be positive"
            raise ValueError(msg)
