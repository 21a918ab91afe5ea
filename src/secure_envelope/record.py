"""
Record types produced by envelope encryption.

This module provides:
- PayloadFields: Hex-encoded output of payload encryption
- WrappedDek: Hex-encoded output of DEK wrapping
- SecureRecord: The complete, immutable stored/transmitted unit

Wire names follow the JSON shape served by the HTTP API
(``partyId``, ``createdAt``, ``payload_ct``, ``mk_version``...).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .errors import SerializationError

MASTER_KEY_VERSION: int = 1


@dataclass(frozen=True)
class PayloadFields:
    """Encrypted payload: nonce, ciphertext and tag as hex."""

    payload_nonce: str
    payload_ct: str
    payload_tag: str


@dataclass(frozen=True)
class WrappedDek:
    """DEK encrypted under the master key: nonce, ciphertext and tag as hex."""

    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str


@dataclass(frozen=True)
class SecureRecord:
    """
    Envelope-encrypted record.

    Created once by ``encrypt_envelope`` and never mutated. Holds no
    plaintext key material: the DEK is only present in wrapped form.
    """

    id: str
    party_id: str
    created_at: str
    payload_nonce: str
    payload_ct: str
    payload_tag: str
    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str
    alg: str
    mk_version: int = MASTER_KEY_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON wire shape."""
        return {
            "id": self.id,
            "partyId": self.party_id,
            "createdAt": self.created_at,
            "payload_nonce": self.payload_nonce,
            "payload_ct": self.payload_ct,
            "payload_tag": self.payload_tag,
            "dek_wrap_nonce": self.dek_wrap_nonce,
            "dek_wrapped": self.dek_wrapped,
            "dek_wrap_tag": self.dek_wrap_tag,
            "alg": self.alg,
            "mk_version": self.mk_version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SecureRecord:
        """
        Rebuild a record from its JSON wire shape.

        Only presence and types are checked here; hex contents are validated
        when the record is decrypted.

        Raises:
            SerializationError: If a field is missing or has the wrong type
        """
        try:
            values = {attr: data[wire] for attr, wire in _WIRE_NAMES.items()}
        except KeyError as e:
            raise SerializationError(f"Missing record field: {e.args[0]}") from None
        except TypeError:
            raise SerializationError("Record must be a mapping") from None

        for attr, value in values.items():
            expected = int if attr == "mk_version" else str
            if not isinstance(value, expected) or isinstance(value, bool):
                raise SerializationError(
                    f"Invalid type for record field {_WIRE_NAMES[attr]}"
                )

        return cls(**values)


_WIRE_NAMES: Dict[str, str] = {
    "id": "id",
    "party_id": "partyId",
    "created_at": "createdAt",
    "payload_nonce": "payload_nonce",
    "payload_ct": "payload_ct",
    "payload_tag": "payload_tag",
    "dek_wrap_nonce": "dek_wrap_nonce",
    "dek_wrapped": "dek_wrapped",
    "dek_wrap_tag": "dek_wrap_tag",
    "alg": "alg",
    "mk_version": "mk_version",
}
