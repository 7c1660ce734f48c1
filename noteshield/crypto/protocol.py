"""
PGP engine protocol definition.

This defines the interface for OpenPGP operations, allowing different implementations
(pgpy, python-gnupg, etc.) to be swapped without changing the rest of the codebase.
Engines consume and produce ASCII-armored keys and messages.
"""

from typing import Protocol, runtime_checkable

from noteshield.models.keys import GeneratedKeyPair, KeyMetadata


@runtime_checkable
class PGPEngine(Protocol):
    """
    Abstract interface for OpenPGP operations.

    All methods are synchronous; async callers are expected to run them in a
    worker thread.
    """

    def parse(self, armored_key: str) -> KeyMetadata:
        """
        Parse an ASCII-armored public or private key.

        Raises:
            InvalidKeyFormatError: If the blob cannot be parsed as a key.
        """
        ...

    def clear_cache(self) -> None:
        """Forget any memoised parse results."""
        ...

    def is_decrypted(self, armored_key: str) -> bool:
        """
        Check whether a private key can be used without a passphrase.

        Raises:
            InvalidKeyFormatError: If the blob cannot be parsed as a key.
            NotAPrivateKeyError: If the key is a public key.
        """
        ...

    def generate(
        self,
        algorithm: str,
        name: str,
        email: str,
        passphrase: str | None = None,
        expiry_seconds: int = 0,
    ) -> GeneratedKeyPair:
        """
        Generate a new key pair.

        Args:
            algorithm: Algorithm token, e.g. ``"RSA-3072"`` or ``"ECC-ed25519"``.
            name: User id name.
            email: User id email.
            passphrase: Optional passphrase protecting the private key.
            expiry_seconds: Key lifetime in seconds, 0 for no expiry.

        Raises:
            UnsupportedAlgorithmError: If the algorithm token is not recognised.
            WeakParametersError: If the parameters are disallowed by policy.
            EngineFailureError: If generation fails.
        """
        ...

    def encrypt(self, plaintext: str, recipient_public_key: str) -> str:
        """
        Encrypt text to a recipient's public key.

        Returns:
            ASCII-armored PGP message.

        Raises:
            InvalidKeyFormatError: If the recipient key cannot be parsed.
            NotAPublicKeyError: If a private key is given.
            EngineFailureError: If encryption fails.
        """
        ...

    def decrypt(
        self, ciphertext: str, private_armored_key: str, passphrase: str | None = None
    ) -> str:
        """
        Decrypt an ASCII-armored PGP message.

        Raises:
            InvalidKeyFormatError: If the key cannot be parsed.
            NotAPrivateKeyError: If a public key is given.
            WrongPassphraseError: If the key is protected and the passphrase is
                missing or incorrect.
            CorruptCiphertextError: If the message cannot be parsed or was not
                encrypted to this key.
        """
        ...
