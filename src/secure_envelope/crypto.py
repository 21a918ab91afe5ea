"""
Cryptographic primitives for AES-256-GCM envelope encryption.

This module provides:
- SecureKey: Secure key wrapper with best-effort zeroization
- SealedData: Nonce, ciphertext and detached authentication tag
- AesGcmCipher: AES-256-GCM encryption/decryption operations
- generate_dek: Fresh 32-byte Data Encryption Key
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CryptoError
from .validation import validate_key_length

# Cryptographic constants
ALGORITHM: str = "AES-256-GCM"
AES_256_KEY_SIZE: int = 32  # 256 bits
NONCE_SIZE: int = 12  # 96 bits (standard for AES-GCM)
TAG_SIZE: int = 16  # 128 bits (authentication tag)


class SecureKey:
    """
    Secure key wrapper with automatic memory cleanup on deletion.

    Uses bytearray internally for mutable zeroing in __del__.
    Note: Python's garbage collector doesn't guarantee immediate cleanup,
    so this is best-effort zeroization.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: Union[bytes, bytearray]) -> None:
        """
        Create a SecureKey from raw bytes.

        Args:
            key_bytes: Raw key material (should be 32 bytes for AES-256)
        """
        if not isinstance(key_bytes, (bytes, bytearray)):
            raise CryptoError("Key must be bytes or bytearray")
        self._bytes = bytearray(key_bytes)

    @classmethod
    def generate(cls) -> SecureKey:
        """Generate a cryptographically secure random 32-byte key."""
        return cls(secrets.token_bytes(AES_256_KEY_SIZE))

    def as_bytes(self) -> bytes:
        """Return key as immutable bytes."""
        return bytes(self._bytes)

    def wipe(self) -> None:
        """Zero the key buffer now instead of waiting for garbage collection."""
        for i in range(len(self._bytes)):
            self._bytes[i] = 0

    def __len__(self) -> int:
        """Return key length in bytes."""
        return len(self._bytes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecureKey):
            return secrets.compare_digest(bytes(self._bytes), bytes(other._bytes))
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        """Redacted representation to prevent accidental key disclosure."""
        return "SecureKey([REDACTED])"

    def __del__(self) -> None:
        """Zero memory on deletion (best-effort)."""
        if hasattr(self, "_bytes"):
            self.wipe()


KeyLike = Union[SecureKey, bytes, bytearray]


def key_bytes(key: KeyLike) -> bytes:
    """Return the raw bytes of a key given as SecureKey, bytes or bytearray."""
    if isinstance(key, SecureKey):
        return key.as_bytes()
    if isinstance(key, (bytes, bytearray)):
        return bytes(key)
    raise CryptoError("Key must be SecureKey, bytes or bytearray")


@dataclass(frozen=True)
class SealedData:
    """
    AES-GCM output with the authentication tag kept separate.

    AESGCM appends the tag to the ciphertext; records store the two apart.
    """

    nonce: bytes  # 12 bytes
    ciphertext: bytes
    tag: bytes  # 16 bytes

    @classmethod
    def from_aesgcm_output(cls, nonce: bytes, output: bytes) -> SealedData:
        """Split ``ciphertext || tag`` as returned by AESGCM.encrypt."""
        return cls(nonce=nonce, ciphertext=output[:-TAG_SIZE], tag=output[-TAG_SIZE:])

    def hex_fields(self) -> Tuple[str, str, str]:
        """Return ``(nonce, ciphertext, tag)`` as lowercase hex strings."""
        return self.nonce.hex(), self.ciphertext.hex(), self.tag.hex()


class AesGcmCipher:
    """
    AES-256-GCM authenticated encryption.

    Provides static methods for encryption and decryption with optional
    Additional Authenticated Data (AAD). Records are sealed with empty AAD.
    """

    @staticmethod
    def encrypt(
        key: KeyLike,
        plaintext: bytes,
        aad: Optional[bytes] = None,
    ) -> SealedData:
        """
        Encrypt plaintext with AES-256-GCM under a fresh random nonce.

        Args:
            key: 32-byte encryption key
            plaintext: Data to encrypt
            aad: Optional Additional Authenticated Data for binding

        Returns:
            SealedData with nonce, ciphertext and detached tag

        Raises:
            KeyLengthError: If key size is invalid
        """
        raw_key = key_bytes(key)
        validate_key_length(raw_key, AES_256_KEY_SIZE, "key")

        nonce = secrets.token_bytes(NONCE_SIZE)
        output = AESGCM(raw_key).encrypt(nonce, plaintext, aad)
        return SealedData.from_aesgcm_output(nonce, output)

    @staticmethod
    def decrypt(
        key: KeyLike,
        sealed: SealedData,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt and authenticate with AES-256-GCM.

        Args:
            key: 32-byte decryption key
            sealed: SealedData with nonce, ciphertext and tag
            aad: Optional Additional Authenticated Data (must match encryption)

        Returns:
            Decrypted plaintext bytes

        Raises:
            KeyLengthError: If key size is invalid
            CryptoError: If nonce/tag size is invalid or authentication fails
        """
        raw_key = key_bytes(key)
        validate_key_length(raw_key, AES_256_KEY_SIZE, "key")

        if len(sealed.nonce) != NONCE_SIZE:
            raise CryptoError(
                f"Invalid nonce size: expected {NONCE_SIZE}, got {len(sealed.nonce)}"
            )
        if len(sealed.tag) != TAG_SIZE:
            raise CryptoError(
                f"Invalid tag size: expected {TAG_SIZE}, got {len(sealed.tag)}"
            )

        try:
            return AESGCM(raw_key).decrypt(sealed.nonce, sealed.ciphertext + sealed.tag, aad)
        except InvalidTag:
            # Generic error to prevent oracle attacks
            raise CryptoError("Decryption failed") from None


def generate_dek() -> SecureKey:
    """Generate a fresh 32-byte Data Encryption Key."""
    return SecureKey.generate()


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes of specified length
    """
    return secrets.token_bytes(length)
