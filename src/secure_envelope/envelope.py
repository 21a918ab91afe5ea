"""
Envelope encryption of JSON payloads.

Architecture:
- Each record gets its own one-time DEK (AES-256-GCM) that encrypts the payload
- The DEK is wrapped by the master key with the same cipher under its own nonce
- Only the wrapped DEK is stored; the plaintext DEK lives in memory briefly

Hierarchy: MasterKey -> wrapped DEK -> encrypted payload

All functions are synchronous and keep no state between calls, so they can be
used from any number of threads or tasks at once.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import uuid4

from .crypto import (
    AES_256_KEY_SIZE,
    ALGORITHM,
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    KeyLike,
    SealedData,
    SecureKey,
    generate_dek,
    key_bytes,
)
from .errors import (
    CryptoError,
    DekUnwrapError,
    FormatError,
    PayloadDeserializationError,
    PayloadIntegrityError,
    SerializationError,
)
from .record import MASTER_KEY_VERSION, PayloadFields, SecureRecord, WrappedDek
from .validation import validate_hex_field, validate_key_length

logger = logging.getLogger(__name__)

PAYLOAD_DECRYPT_FAILED = "Failed to decrypt payload: potential tampering or invalid DEK"
DEK_UNWRAP_FAILED = "Failed to unwrap DEK: potential tampering or invalid Master Key"

FieldSource = Union[SecureRecord, PayloadFields, WrappedDek, Mapping[str, Any]]


def _get_field(source: FieldSource, name: str) -> Any:
    if isinstance(source, Mapping):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    if value is None:
        raise FormatError(f"Missing field {name}")
    return value


def _master_key_bytes(master_key: KeyLike) -> bytes:
    raw = key_bytes(master_key)
    validate_key_length(raw, AES_256_KEY_SIZE, "Master Key")
    return raw


def _dek_bytes(dek: KeyLike) -> bytes:
    raw = key_bytes(dek)
    validate_key_length(raw, AES_256_KEY_SIZE, "DEK")
    return raw


def encrypt_payload(payload: Any, dek: KeyLike) -> PayloadFields:
    """
    Encrypt a JSON-serializable value under a DEK.

    The value is serialized to compact UTF-8 JSON; those bytes are what is
    encrypted and authenticated.

    Raises:
        KeyLengthError: If the DEK is not 32 bytes
        SerializationError: If the payload cannot be represented as JSON
    """
    raw_dek = _dek_bytes(dek)
    try:
        plaintext = json.dumps(
            payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Payload is not JSON serializable: {e}") from None

    nonce, ciphertext, tag = AesGcmCipher.encrypt(raw_dek, plaintext).hex_fields()
    return PayloadFields(payload_nonce=nonce, payload_ct=ciphertext, payload_tag=tag)


def decrypt_payload(
    fields: FieldSource,
    dek: KeyLike,
    max_ciphertext_bytes: Optional[int] = None,
) -> Any:
    """
    Decrypt a payload and parse it back into its JSON value.

    Args:
        fields: Record, PayloadFields or mapping with payload_nonce,
            payload_ct and payload_tag
        dek: 32-byte Data Encryption Key
        max_ciphertext_bytes: Optional upper bound on the decoded ciphertext

    Raises:
        KeyLengthError: If the DEK is not 32 bytes
        FormatError: If a field is not hex or has the wrong length
        PayloadIntegrityError: If authentication fails or the plaintext is not JSON
    """
    raw_dek = _dek_bytes(dek)

    nonce = validate_hex_field(_get_field(fields, "payload_nonce"), "payload_nonce", NONCE_SIZE)
    tag = validate_hex_field(_get_field(fields, "payload_tag"), "payload_tag", TAG_SIZE)
    ciphertext = validate_hex_field(
        _get_field(fields, "payload_ct"), "payload_ct", max_size=max_ciphertext_bytes
    )

    try:
        plaintext = AesGcmCipher.decrypt(
            raw_dek, SealedData(nonce=nonce, ciphertext=ciphertext, tag=tag)
        )
    except CryptoError:
        raise PayloadIntegrityError(PAYLOAD_DECRYPT_FAILED) from None

    try:
        return json.loads(plaintext.decode("utf-8"))
    except ValueError:
        raise PayloadDeserializationError(PAYLOAD_DECRYPT_FAILED) from None


def wrap_dek(dek: KeyLike, master_key: KeyLike) -> WrappedDek:
    """
    Wrap (encrypt) a DEK under the master key.

    Raises:
        KeyLengthError: If the master key or DEK is not 32 bytes
    """
    raw_master_key = _master_key_bytes(master_key)
    raw_dek = _dek_bytes(dek)

    nonce, wrapped, tag = AesGcmCipher.encrypt(raw_master_key, raw_dek).hex_fields()
    return WrappedDek(dek_wrap_nonce=nonce, dek_wrapped=wrapped, dek_wrap_tag=tag)


def unwrap_dek(fields: FieldSource, master_key: KeyLike) -> SecureKey:
    """
    Unwrap (decrypt) a DEK with the master key.

    Args:
        fields: Record, WrappedDek or mapping with dek_wrap_nonce,
            dek_wrapped and dek_wrap_tag
        master_key: 32-byte master key

    Returns:
        The 32-byte DEK

    Raises:
        KeyLengthError: If the master key is not 32 bytes
        FormatError: If a field is not hex or has the wrong length
        DekUnwrapError: If authentication fails
    """
    raw_master_key = _master_key_bytes(master_key)

    nonce = validate_hex_field(_get_field(fields, "dek_wrap_nonce"), "dek_wrap_nonce", NONCE_SIZE)
    tag = validate_hex_field(_get_field(fields, "dek_wrap_tag"), "dek_wrap_tag", TAG_SIZE)
    wrapped = validate_hex_field(_get_field(fields, "dek_wrapped"), "dek_wrapped")

    try:
        raw_dek = AesGcmCipher.decrypt(
            raw_master_key, SealedData(nonce=nonce, ciphertext=wrapped, tag=tag)
        )
    except CryptoError:
        raise DekUnwrapError(DEK_UNWRAP_FAILED) from None

    if len(raw_dek) != AES_256_KEY_SIZE:
        raise DekUnwrapError(DEK_UNWRAP_FAILED)

    return SecureKey(raw_dek)


def encrypt_envelope(party_id: str, payload: Any, master_key: KeyLike) -> SecureRecord:
    """
    Encrypt a payload for a party and return the complete record.

    The master key is validated before any key material is generated. A new
    DEK is drawn for every record and discarded once it has been wrapped.

    Args:
        party_id: Owning party, stored verbatim
        payload: JSON-serializable value
        master_key: 32-byte master key

    Returns:
        SecureRecord ready to be stored under ``record.id``

    Raises:
        KeyLengthError: If the master key is not 32 bytes
        SerializationError: If the payload cannot be represented as JSON
    """
    raw_master_key = _master_key_bytes(master_key)

    record_id = str(uuid4())
    created_at = (
        datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )

    dek = generate_dek()
    try:
        payload_fields = encrypt_payload(payload, dek)
        wrapped = wrap_dek(dek, raw_master_key)
    finally:
        dek.wipe()

    logger.debug("Sealed record %s for party %s", record_id, party_id)

    return SecureRecord(
        id=record_id,
        party_id=party_id,
        created_at=created_at,
        payload_nonce=payload_fields.payload_nonce,
        payload_ct=payload_fields.payload_ct,
        payload_tag=payload_fields.payload_tag,
        dek_wrap_nonce=wrapped.dek_wrap_nonce,
        dek_wrapped=wrapped.dek_wrapped,
        dek_wrap_tag=wrapped.dek_wrap_tag,
        alg=ALGORITHM,
        mk_version=MASTER_KEY_VERSION,
    )


def open_envelope(
    record: FieldSource,
    master_key: KeyLike,
    max_ciphertext_bytes: Optional[int] = None,
) -> Any:
    """
    Unwrap the record's DEK and decrypt its payload.

    Raises:
        KeyLengthError, FormatError, DekUnwrapError, PayloadIntegrityError
    """
    dek = unwrap_dek(record, master_key)
    try:
        return decrypt_payload(record, dek, max_ciphertext_bytes=max_ciphertext_bytes)
    finally:
        dek.wipe()
