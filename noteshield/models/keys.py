"""
Key domain models.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Self

from noteshield.exceptions import UnsupportedAlgorithmError
from noteshield.utils import format_key_id

_RSA_TOKEN = re.compile(r"^RSA-(\d+)$")


class KeyAlgorithmFamily(Enum):
    """Public key family used for a generated key pair."""

    RSA = "rsa"
    ECC = "ecc"


class KeyExpiry(IntEnum):
    """Key lifetime presets in seconds. ``NEVER`` disables expiration."""

    NEVER = 0
    ONE_DAY = 86400
    ONE_WEEK = 604800
    ONE_MONTH = 2628000
    THREE_MONTHS = 7884000
    SIX_MONTHS = 15768000
    ONE_YEAR = 31536000


_ALGORITHM_DESCRIPTIONS: dict[str, str] = {
    "RSA-2048": "RSA-2048 (Standard Security Level)",
    "RSA-3072": "RSA-3072 (High Security Level)",
    "RSA-4096": "RSA-4096 (Very High Security Level)",
    "ECC-ed25519": "ECC-ed25519 (High Security Level)",
    "ECC-Curve25519": "ECC-Curve25519 (High Security Level)",
    "ECC-p256": "ECC-p256 (Standard Security Level)",
    "ECC-p384": "ECC-p384 (High Security Level)",
    "ECC-p521": "ECC-p521 (Very High Security Level)",
    "ECC-secp256k1": "ECC-secp256k1 (High Security Level)",
    "ECC-brainpoolP256r1": "ECC-brainpoolP256r1 (High Security Level)",
    "ECC-brainpoolP384r1": "ECC-brainpoolP384r1 (High Security Level)",
    "ECC-brainpoolP512r1": "ECC-brainpoolP512r1 (Very High Security Level)",
}

# lower-cased token -> canonical curve name
_CURVES: dict[str, str] = {
    curve.lower(): curve
    for curve in (
        "ed25519",
        "curve25519",
        "p256",
        "p384",
        "p521",
        "secp256k1",
        "brainpoolP256r1",
        "brainpoolP384r1",
        "brainpoolP512r1",
    )
}


@dataclass(frozen=True, kw_only=True)
class KeyAlgorithm:
    """
    A parsed key generation algorithm token.

    Attributes:
        token: The token as given, e.g. ``"RSA-3072"`` or ``"ECC-p256"``.
        family: RSA or ECC.
        rsa_bits: Modulus size for RSA, None for ECC.
        curve: Curve name for ECC, None for RSA.
    """

    token: str
    family: KeyAlgorithmFamily
    rsa_bits: int | None = None
    curve: str | None = None

    @classmethod
    def parse(cls, token: str) -> Self:
        """
        Parse an algorithm token.

        Any ``RSA-<bits>`` token is parsed so that the size can be checked
        against policy; ECC tokens must name a known curve.

        Raises:
            UnsupportedAlgorithmError: If the token is not recognised.
        """
        if match := _RSA_TOKEN.match(token):
            return cls(token=token, family=KeyAlgorithmFamily.RSA, rsa_bits=int(match.group(1)))

        prefix, _, curve = token.partition("-")
        if prefix == "ECC" and curve.lower() in _CURVES:
            return cls(token=token, family=KeyAlgorithmFamily.ECC, curve=_CURVES[curve.lower()])

        msg = f"Unsupported algorithm: {token}"
        raise UnsupportedAlgorithmError(msg, algorithm=token)

    @property
    def description(self) -> str:
        return _ALGORITHM_DESCRIPTIONS.get(self.token, self.token)

    @staticmethod
    def choices() -> list[tuple[str, str]]:
        """List of (token, description) pairs offered for key generation."""
        return list(_ALGORITHM_DESCRIPTIONS.items())


@dataclass(frozen=True, kw_only=True)
class KeyMetadata:
    """
    Information extracted from an armored key by the engine.

    Attributes:
        key_id: Fingerprint, upper-case hex without spaces.
        user_id: First user id of the key, if any.
        is_private: Whether the blob holds a private key.
        public_armored_key: Armored public half of the key.
    """

    key_id: str
    user_id: str | None
    is_private: bool
    public_armored_key: str


@dataclass(frozen=True, kw_only=True)
class GeneratedKeyPair:
    """Armored halves of a freshly generated key."""

    key_id: str
    public_armored_key: str
    private_armored_key: str


@dataclass(frozen=True, kw_only=True)
class KeyRecord:
    """
    One identity known to the key registry.

    A record is public-only, private-only (public half derived from the
    private key) or both.
    """

    key_id: str
    public_armored_key: str
    user_id: str | None = None
    private_armored_key: str | None = None
    is_decrypted: bool | None = None
    public_key_derived: bool = False

    @classmethod
    def from_metadata(
        cls, metadata: KeyMetadata, armored_key: str, *, is_decrypted: bool | None = None
    ) -> Self:
        """Build a record from a single parsed key blob."""
        if metadata.is_private:
            return cls(
                key_id=metadata.key_id,
                user_id=metadata.user_id,
                public_armored_key=metadata.public_armored_key,
                private_armored_key=armored_key,
                is_decrypted=is_decrypted,
                public_key_derived=True,
            )
        return cls(
            key_id=metadata.key_id,
            user_id=metadata.user_id,
            public_armored_key=armored_key,
        )

    @property
    def is_private(self) -> bool:
        return bool(self.private_armored_key)

    @property
    def display_name(self) -> str:
        return f"{self.user_id or 'Unknown'} ({format_key_id(self.key_id)})"

    def merge(self, other: "KeyRecord") -> "KeyRecord":
        """
        Merge another record for the same key, filling only missing slots.

        A present private key is never replaced. A public key read from its
        own blob is preferred over one derived from the private key, so the
        outcome does not depend on which half was seen first.

        Raises:
            ValueError: If the records belong to different keys.
        """
        if other.key_id != self.key_id:
            msg = f"Cannot merge key {other.key_id} into {self.key_id}"
            raise ValueError(msg)

        merged = self
        if not merged.is_private and other.is_private:
            merged = replace(
                merged,
                private_armored_key=other.private_armored_key,
                is_decrypted=other.is_decrypted,
            )
        if merged.public_key_derived and not other.public_key_derived:
            merged = replace(
                merged,
                public_armored_key=other.public_armored_key,
                public_key_derived=False,
            )
        if merged.user_id is None and other.user_id is not None:
            merged = replace(merged, user_id=other.user_id)
        return merged
