"""Tests for SecureRecord serialization and field validation helpers."""

import dataclasses
import json

import pytest

from secure_envelope import (
    FormatError,
    KeyLengthError,
    SecureRecord,
    SerializationError,
    validate_hex_field,
    validate_key_length,
)


class TestSecureRecord:
    def test_wire_names(self, record):
        wire = record.to_dict()
        assert set(wire) == {
            "id",
            "partyId",
            "createdAt",
            "payload_nonce",
            "payload_ct",
            "payload_tag",
            "dek_wrap_nonce",
            "dek_wrapped",
            "dek_wrap_tag",
            "alg",
            "mk_version",
        }
        assert wire["partyId"] == "user_123"
        assert wire["createdAt"].endswith("Z")

    def test_dict_round_trip(self, record):
        restored = SecureRecord.from_dict(json.loads(json.dumps(record.to_dict())))
        assert restored == record

    def test_is_immutable(self, record):
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.payload_ct = "00"

    def test_from_dict_missing_field(self, record):
        wire = record.to_dict()
        del wire["dek_wrapped"]
        with pytest.raises(SerializationError, match="dek_wrapped"):
            SecureRecord.from_dict(wire)

    def test_from_dict_wrong_type(self, record):
        wire = record.to_dict()
        wire["mk_version"] = "1"
        with pytest.raises(SerializationError, match="mk_version"):
            SecureRecord.from_dict(wire)

    def test_from_dict_not_a_mapping(self):
        with pytest.raises(SerializationError):
            SecureRecord.from_dict(["not", "a", "mapping"])


class TestValidateHexField:
    def test_decodes_valid_hex(self):
        assert validate_hex_field("00ffAA", "field") == b"\x00\xff\xaa"

    def test_exact_size(self):
        assert len(validate_hex_field("ab" * 12, "nonce", 12)) == 12

    @pytest.mark.parametrize("value", ["", "gg", "0x00", "ab cd", None, 1234])
    def test_rejects_non_hex(self, value):
        with pytest.raises(FormatError, match="Invalid hex string for field"):
            validate_hex_field(value, "field")

    def test_rejects_odd_length(self):
        with pytest.raises(FormatError):
            validate_hex_field("abc", "field")

    def test_rejects_wrong_size(self):
        with pytest.raises(FormatError, match="expected 16 bytes, got 15"):
            validate_hex_field("ab" * 15, "tag", 16)

    @pytest.mark.parametrize("value", ["abc\n", "abcd\n", "ab\ncd", "\nabcd"])
    def test_rejects_embedded_newline(self, value):
        with pytest.raises(FormatError, match="Invalid hex string for field"):
            validate_hex_field(value, "field")

    def test_max_size_checked_first(self):
        with pytest.raises(FormatError, match="exceeds 4 bytes"):
            validate_hex_field("zz" * 10, "field", max_size=4)
        assert validate_hex_field("ab" * 4, "field", max_size=4) == b"\xab" * 4


def test_validate_key_length():
    validate_key_length(b"\x00" * 32, 32, "Master Key")
    with pytest.raises(KeyLengthError, match="expected 32 bytes, got 16"):
        validate_key_length(b"\x00" * 16, 32, "Master Key")
