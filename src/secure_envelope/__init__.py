"""
Secure Envelope

Envelope encryption for JSON payloads: every record gets its own one-time
Data Encryption Key (DEK), and the DEK is wrapped by a long-lived master key.

Overview
--------
- **DEKs** are generated per record and encrypt the payload with AES-256-GCM
- **Master key** wraps each DEK with AES-256-GCM under an independent nonce
- **Records** carry only hex-encoded nonces, ciphertexts and tags

Quick Start
-----------
```python
import secrets
from secure_envelope import encrypt_envelope, unwrap_dek, decrypt_payload

master_key = secrets.token_bytes(32)

record = encrypt_envelope("user_123", {"amount": 100, "currency": "USD"}, master_key)

dek = unwrap_dek(record, master_key)
payload = decrypt_payload(record, dek)
```

Modules
-------
- `crypto`: AES-256-GCM primitives and key wrapper
- `envelope`: Payload encryption, DEK wrapping and envelope assembly
- `record`: SecureRecord and its field groups
- `validation`: Hex field and key length checks
- `errors`: Error types and exception classes
- `storage`: Record store interface and in-memory implementation
- `config`: Environment configuration
- `api`: FastAPI application
"""

__version__ = "0.1.0"

# ============================================================================
# Crypto Exports
# ============================================================================

from .crypto import (
    AES_256_KEY_SIZE,
    ALGORITHM,
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    SealedData,
    SecureKey,
    generate_dek,
    generate_random_bytes,
)

# ============================================================================
# Error Exports
# ============================================================================

from .errors import (
    ConfigError,
    CryptoError,
    DekUnwrapError,
    DuplicateRecordError,
    EnvelopeError,
    FormatError,
    IntegrityError,
    KeyLengthError,
    PayloadDeserializationError,
    PayloadIntegrityError,
    RecordNotFoundError,
    SerializationError,
    StorageError,
)

# ============================================================================
# Envelope Exports
# ============================================================================

from .envelope import (
    decrypt_payload,
    encrypt_envelope,
    encrypt_payload,
    open_envelope,
    unwrap_dek,
    wrap_dek,
)

from .record import (
    MASTER_KEY_VERSION,
    PayloadFields,
    SecureRecord,
    WrappedDek,
)

from .validation import (
    validate_hex_field,
    validate_key_length,
)

# ============================================================================
# Storage Exports
# ============================================================================

from .storage import (
    InMemoryRecordStore,
    RecordStore,
)

# ============================================================================
# Public API
# ============================================================================

__all__ = [
    # Version
    "__version__",
    # Crypto
    "AES_256_KEY_SIZE",
    "ALGORITHM",
    "NONCE_SIZE",
    "TAG_SIZE",
    "AesGcmCipher",
    "SealedData",
    "SecureKey",
    "generate_dek",
    "generate_random_bytes",
    # Errors
    "EnvelopeError",
    "ConfigError",
    "KeyLengthError",
    "FormatError",
    "CryptoError",
    "IntegrityError",
    "PayloadIntegrityError",
    "PayloadDeserializationError",
    "DekUnwrapError",
    "SerializationError",
    "StorageError",
    "RecordNotFoundError",
    "DuplicateRecordError",
    # Envelope
    "encrypt_payload",
    "decrypt_payload",
    "wrap_dek",
    "unwrap_dek",
    "encrypt_envelope",
    "open_envelope",
    "MASTER_KEY_VERSION",
    "PayloadFields",
    "WrappedDek",
    "SecureRecord",
    "validate_hex_field",
    "validate_key_length",
    # Storage
    "RecordStore",
    "InMemoryRecordStore",
]
