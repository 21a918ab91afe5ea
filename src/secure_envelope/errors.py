"""
Exception classes for secure envelope operations.

Format errors are always raised before any key material is used. Integrity
errors carry generic messages and never name the field that failed.
"""

from __future__ import annotations


class EnvelopeError(Exception):
    """Base exception for all envelope encryption operations."""

    pass


class ConfigError(EnvelopeError):
    """Configuration error (missing or malformed master key)."""

    pass


class KeyLengthError(ConfigError):
    """A key buffer does not have the required length."""

    pass


class FormatError(EnvelopeError):
    """A hex-encoded record field is malformed or has the wrong length."""

    pass


class CryptoError(EnvelopeError):
    """Cryptographic operation failed."""

    pass


class IntegrityError(CryptoError):
    """Authentication tag verification failed."""

    pass


class PayloadIntegrityError(IntegrityError):
    """Payload could not be decrypted under the given DEK."""

    pass


class PayloadDeserializationError(PayloadIntegrityError):
    """Decrypted payload bytes are not valid JSON."""

    pass


class DekUnwrapError(IntegrityError):
    """Wrapped DEK could not be decrypted under the given master key."""

    pass


class SerializationError(EnvelopeError):
    """Serialization or deserialization error."""

    pass


class StorageError(EnvelopeError):
    """Record storage error."""

    pass


class RecordNotFoundError(StorageError):
    """Record not found in storage."""

    pass


class DuplicateRecordError(StorageError):
    """A record with the same id is already stored."""

    pass
