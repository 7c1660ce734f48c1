"""
PGP engine backed by pgpy.

Keys and messages are exchanged as ASCII-armored text. Parsed key metadata is
memoised by content hash; plaintext and key material are never logged.
"""

import hashlib
import threading
from datetime import timedelta

import pgpy
import structlog
from pgpy.constants import (
    CompressionAlgorithm,
    EllipticCurveOID,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from noteshield.config import NoteShieldConfig
from noteshield.core.cache import ExpiringCache
from noteshield.exceptions import (
    CorruptCiphertextError,
    EngineFailureError,
    InvalidKeyFormatError,
    NoteShieldError,
    NotAPrivateKeyError,
    NotAPublicKeyError,
    UnsupportedAlgorithmError,
    WeakParametersError,
    WrongPassphraseError,
)
from noteshield.models.keys import (
    GeneratedKeyPair,
    KeyAlgorithm,
    KeyAlgorithmFamily,
    KeyMetadata,
)

logger = structlog.get_logger(__name__)

_MAX_RSA_BITS = 8192

_SIGNING_CURVES: dict[str, tuple[PubKeyAlgorithm, EllipticCurveOID]] = {
    "ed25519": (PubKeyAlgorithm.EdDSA, EllipticCurveOID.Ed25519),
    "curve25519": (PubKeyAlgorithm.EdDSA, EllipticCurveOID.Ed25519),
    "p256": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.NIST_P256),
    "p384": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.NIST_P384),
    "p521": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.NIST_P521),
    "secp256k1": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.SECP256K1),
    "brainpoolP256r1": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.Brainpool_P256),
    "brainpoolP384r1": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.Brainpool_P384),
    "brainpoolP512r1": (PubKeyAlgorithm.ECDSA, EllipticCurveOID.Brainpool_P512),
}

_ENCRYPTION_CURVES: dict[str, EllipticCurveOID] = {
    "ed25519": EllipticCurveOID.Curve25519,
    "curve25519": EllipticCurveOID.Curve25519,
    "p256": EllipticCurveOID.NIST_P256,
    "p384": EllipticCurveOID.NIST_P384,
    "p521": EllipticCurveOID.NIST_P521,
    "secp256k1": EllipticCurveOID.SECP256K1,
    "brainpoolP256r1": EllipticCurveOID.Brainpool_P256,
    "brainpoolP384r1": EllipticCurveOID.Brainpool_P384,
    "brainpoolP512r1": EllipticCurveOID.Brainpool_P512,
}


class PgpyEngine:
    """
    PGP engine implementation using pgpy.

    Parsed key metadata is cached by content hash, so repeatedly parsing the
    same armored blob (registry load, unlock candidates) stays cheap.

    Example:
        engine = PgpyEngine()
        pair = engine.generate("ECC-ed25519", "Alice", "alice@example.com")
        armored = engine.encrypt("hello", pair.public_armored_key)
        assert engine.decrypt(armored, pair.private_armored_key) == "hello"
    """

    def __init__(self, config: NoteShieldConfig | None = None) -> None:
        """
        Args:
            config: Configuration providing the key policy and cache sizing.
        """
        self._config = config or NoteShieldConfig()
        self._metadata_cache: ExpiringCache[KeyMetadata] = ExpiringCache(
            self._config.key_cache_max_size, default_ttl=self._config.key_cache_ttl
        )
        self._cache_lock = threading.Lock()

    def parse(self, armored_key: str) -> KeyMetadata:
        """
        Parse an ASCII-armored public or private key.

        Args:
            armored_key: ASCII-armored key.

        Returns:
            KeyMetadata with fingerprint, user id and public half.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
        """
        digest = hashlib.sha256(armored_key.encode("utf-8")).hexdigest()
        with self._cache_lock:
            cached = self._metadata_cache.get(digest)
            if cached is not None:
                # sliding expiry for keys in active use
                self._metadata_cache.update(digest, cached)
        if cached is not None:
            return cached

        key = self.load_key(armored_key)
        metadata = KeyMetadata(
            key_id=self._fingerprint(key),
            user_id=self._user_id(key),
            is_private=not key.is_public,
            public_armored_key=armored_key if key.is_public else str(key.pubkey),
        )

        with self._cache_lock:
            self._metadata_cache.put(digest, metadata)
        logger.debug("Parsed key", key_id=metadata.key_id, is_private=metadata.is_private)
        return metadata

    def clear_cache(self) -> None:
        """Drop all memoised key metadata."""
        with self._cache_lock:
            dropped = len(self._metadata_cache)
            self._metadata_cache.clear()
        logger.debug("Key metadata cache cleared", entries=dropped)

    def is_decrypted(self, armored_key: str) -> bool:
        """
        Check whether a private key is usable without a passphrase.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
            NotAPrivateKeyError: If the key is a public key.
        """
        key = self.load_key(armored_key)
        if key.is_public:
            msg = "Cannot check protection of a public key"
            raise NotAPrivateKeyError(msg)
        return not key.is_protected

    def generate(
        self,
        algorithm: str,
        name: str,
        email: str,
        passphrase: str | None = None,
        expiry_seconds: int = 0,
    ) -> GeneratedKeyPair:
        """
        Generate a primary signing key with an encryption subkey.

        Args:
            algorithm: Algorithm token, e.g. ``"RSA-3072"`` or ``"ECC-ed25519"``.
            name: User id name.
            email: User id email.
            passphrase: Optional passphrase protecting the private key.
            expiry_seconds: Key lifetime in seconds, 0 for no expiry.

        Returns:
            GeneratedKeyPair with both armored halves.

        Raises:
            UnsupportedAlgorithmError: If the algorithm token is not recognised.
            WeakParametersError: If the parameters are disallowed by policy.
            ValueError: If name or email is missing, or expiry is negative.
            EngineFailureError: If generation fails.
        """
        params = KeyAlgorithm.parse(algorithm)
        self._check_policy(params)
        if not name or not email:
            msg = "Name and email are required"
            raise ValueError(msg)
        if expiry_seconds < 0:
            msg = "expiry_seconds must be non-negative"
            raise ValueError(msg)

        try:
            primary = self._new_primary_key(params)
            uid = pgpy.PGPUID.new(name, email=email)
            primary.add_uid(uid, **self._uid_preferences(expiry_seconds))
            primary.add_subkey(
                self._new_encryption_subkey(params),
                usage={KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage},
            )
            public_armored_key = str(primary.pubkey)
            if passphrase:
                primary.protect(passphrase, SymmetricKeyAlgorithm.AES256, HashAlgorithm.SHA256)
            private_armored_key = str(primary)
        except NoteShieldError:
            raise
        except Exception as e:
            msg = f"Key generation failed: {e}"
            raise EngineFailureError(msg) from e

        key_id = self._fingerprint(primary)
        logger.debug("Generated key", key_id=key_id, algorithm=params.token)
        return GeneratedKeyPair(
            key_id=key_id,
            public_armored_key=public_armored_key,
            private_armored_key=private_armored_key,
        )

    def encrypt(self, plaintext: str, recipient_public_key: str) -> str:
        """
        Encrypt text to a recipient's public key.

        Args:
            plaintext: Text to encrypt.
            recipient_public_key: ASCII-armored public key.

        Returns:
            ASCII-armored PGP message.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
            NotAPublicKeyError: If a private key is given.
            EngineFailureError: If encryption fails.
        """
        key = self.load_key(recipient_public_key)
        if not key.is_public:
            msg = "Cannot use a private key to encrypt messages, use a public key instead"
            raise NotAPublicKeyError(msg)

        try:
            # binary literal data, decoded as UTF-8 on decrypt
            message = pgpy.PGPMessage.new(plaintext.encode("utf-8"))
            return str(key.encrypt(message))
        except Exception as e:
            msg = f"Encryption failed: {e}"
            raise EngineFailureError(msg) from e

    def decrypt(
        self, ciphertext: str, private_armored_key: str, passphrase: str | None = None
    ) -> str:
        """
        Decrypt an ASCII-armored PGP message.

        Args:
            ciphertext: ASCII-armored encrypted message.
            private_armored_key: ASCII-armored private key.
            passphrase: Key passphrase; ignored for unprotected keys.

        Returns:
            Decrypted text.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
            NotAPrivateKeyError: If a public key is given.
            WrongPassphraseError: If the passphrase is missing or incorrect.
            CorruptCiphertextError: If the message is unreadable or not for this key.
        """
        key = self.load_key(private_armored_key)
        if key.is_public:
            msg = "Cannot use a public key to decrypt messages, use a private key instead"
            raise NotAPrivateKeyError(msg)

        message = self._load_message(ciphertext)

        if not key.is_protected:
            return self._decrypt_with(key, message)

        self._verify_passphrase(key, passphrase)
        with key.unlock(passphrase):
            return self._decrypt_with(key, message)

    @staticmethod
    def load_key(armored_key: str) -> pgpy.PGPKey:
        """
        Load a key from ASCII-armored format.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
        """
        try:
            key, _ = pgpy.PGPKey.from_blob(armored_key)
            return key
        except Exception as e:
            msg = f"Failed to load key: {e}"
            raise InvalidKeyFormatError(msg) from e

    @staticmethod
    def _load_message(ciphertext: str) -> pgpy.PGPMessage:
        try:
            message = pgpy.PGPMessage.from_blob(ciphertext)
        except Exception as e:
            msg = f"Failed to read message: {e}"
            raise CorruptCiphertextError(msg) from e
        if not message.is_encrypted:
            msg = "Message is not encrypted"
            raise CorruptCiphertextError(msg)
        return message

    @staticmethod
    def _verify_passphrase(key: pgpy.PGPKey, passphrase: str | None) -> None:
        if not passphrase:
            msg = "Passphrase required to unlock private key"
            raise WrongPassphraseError(msg)
        try:
            with key.unlock(passphrase):
                pass
        except Exception as e:
            msg = f"Failed to unlock key: {e}"
            raise WrongPassphraseError(msg) from e

    def _decrypt_with(self, key: pgpy.PGPKey, message: pgpy.PGPMessage) -> str:
        try:
            decrypted = key.decrypt(message)
        except Exception as e:
            msg = f"Failed to decrypt message: {e}"
            raise CorruptCiphertextError(msg) from e
        return self._normalize_decrypted_content(decrypted.message)

    def _check_policy(self, params: KeyAlgorithm) -> None:
        if params.family is KeyAlgorithmFamily.RSA:
            if params.rsa_bits > _MAX_RSA_BITS:
                msg = f"RSA keys larger than {_MAX_RSA_BITS} bits are not supported"
                raise UnsupportedAlgorithmError(msg, algorithm=params.token)
            if params.rsa_bits < self._config.min_rsa_bits:
                msg = f"RSA keys must be at least {self._config.min_rsa_bits} bits"
                raise WeakParametersError(msg, algorithm=params.token)
            return

        if params.curve in self._config.disallowed_curves:
            msg = f"Curve {params.curve} is disallowed by policy"
            raise WeakParametersError(msg, algorithm=params.token)

    @staticmethod
    def _new_primary_key(params: KeyAlgorithm) -> pgpy.PGPKey:
        if params.family is KeyAlgorithmFamily.RSA:
            return pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, params.rsa_bits)
        algorithm, curve = _SIGNING_CURVES[params.curve]
        return pgpy.PGPKey.new(algorithm, curve)

    @staticmethod
    def _new_encryption_subkey(params: KeyAlgorithm) -> pgpy.PGPKey:
        if params.family is KeyAlgorithmFamily.RSA:
            return pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, params.rsa_bits)
        return pgpy.PGPKey.new(PubKeyAlgorithm.ECDH, _ENCRYPTION_CURVES[params.curve])

    @staticmethod
    def _uid_preferences(expiry_seconds: int) -> dict:
        preferences = {
            "usage": {KeyFlags.Sign, KeyFlags.Certify},
            "hashes": [HashAlgorithm.SHA512, HashAlgorithm.SHA256],
            "ciphers": [
                SymmetricKeyAlgorithm.AES256,
                SymmetricKeyAlgorithm.AES192,
                SymmetricKeyAlgorithm.AES128,
            ],
            "compression": [CompressionAlgorithm.ZLIB, CompressionAlgorithm.Uncompressed],
        }
        if expiry_seconds:
            preferences["key_expiration"] = timedelta(seconds=expiry_seconds)
        return preferences

    @staticmethod
    def _fingerprint(key: pgpy.PGPKey) -> str:
        return str(key.fingerprint).replace(" ", "").upper()

    @staticmethod
    def _user_id(key: pgpy.PGPKey) -> str | None:
        for uid in key.userids:
            parts = [uid.name] if uid.name else []
            if uid.comment:
                parts.append(f"({uid.comment})")
            if uid.email:
                parts.append(f"<{uid.email}>")
            if parts:
                return " ".join(parts)
        return None

    @staticmethod
    def _normalize_decrypted_content(content: bytes | str | bytearray) -> str:
        if isinstance(content, (bytes, bytearray)):
            try:
                return bytes(content).decode("utf-8")
            except UnicodeDecodeError as e:
                msg = "Decrypted content is not valid UTF-8 text"
                raise CorruptCiphertextError(msg) from e
        return content
