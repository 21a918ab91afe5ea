"""Tests for AES-256-GCM primitives and SecureKey."""

import secrets

import pytest

from secure_envelope import (
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    CryptoError,
    KeyLengthError,
    SealedData,
    SecureKey,
    generate_dek,
)


class TestSecureKey:
    def test_generate_is_32_random_bytes(self):
        first = generate_dek()
        second = generate_dek()
        assert len(first) == 32
        assert first != second

    def test_repr_is_redacted(self):
        key = SecureKey(b"\x01" * 32)
        assert repr(key) == "SecureKey([REDACTED])"
        assert "01" not in repr(key)

    def test_wipe_zeroes_buffer(self):
        key = SecureKey(b"\xff" * 32)
        key.wipe()
        assert key.as_bytes() == b"\x00" * 32

    def test_rejects_non_bytes(self):
        with pytest.raises(CryptoError):
            SecureKey("not bytes")


class TestAesGcmCipher:
    def test_encrypt_decrypt(self):
        key = secrets.token_bytes(32)
        sealed = AesGcmCipher.encrypt(key, b"hello")

        assert len(sealed.nonce) == NONCE_SIZE
        assert len(sealed.tag) == TAG_SIZE
        assert len(sealed.ciphertext) == len(b"hello")
        assert AesGcmCipher.decrypt(key, sealed) == b"hello"

    def test_fresh_nonce_per_call(self):
        key = secrets.token_bytes(32)
        first = AesGcmCipher.encrypt(key, b"same")
        second = AesGcmCipher.encrypt(key, b"same")
        assert first.nonce != second.nonce
        assert first.ciphertext != second.ciphertext

    def test_wrong_key_fails_generically(self):
        sealed = AesGcmCipher.encrypt(secrets.token_bytes(32), b"data")
        with pytest.raises(CryptoError, match="^Decryption failed$"):
            AesGcmCipher.decrypt(secrets.token_bytes(32), sealed)

    def test_aad_must_match(self):
        key = secrets.token_bytes(32)
        sealed = AesGcmCipher.encrypt(key, b"data", b"context")
        with pytest.raises(CryptoError):
            AesGcmCipher.decrypt(key, sealed, b"other")

    def test_rejects_short_key(self):
        with pytest.raises(KeyLengthError):
            AesGcmCipher.encrypt(secrets.token_bytes(16), b"data")

    def test_rejects_bad_nonce_and_tag_sizes(self):
        key = secrets.token_bytes(32)
        sealed = AesGcmCipher.encrypt(key, b"data")
        with pytest.raises(CryptoError, match="nonce size"):
            AesGcmCipher.decrypt(key, SealedData(sealed.nonce[:8], sealed.ciphertext, sealed.tag))
        with pytest.raises(CryptoError, match="tag size"):
            AesGcmCipher.decrypt(key, SealedData(sealed.nonce, sealed.ciphertext, sealed.tag[:12]))
