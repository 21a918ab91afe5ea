"""
Input validation for record fields and key buffers.

Every hex field on the unwrap/decrypt path is checked here before it is
decoded, so malformed input never reaches the cipher.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import FormatError, KeyLengthError

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


def validate_hex_field(
    value: object,
    field_name: str,
    expected_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> bytes:
    """
    Validate a hex-encoded field and return its decoded bytes.

    Args:
        value: Field value taken from a record
        field_name: Name used in the error message
        expected_size: Exact decoded size in bytes, or None for variable length
        max_size: Upper bound on the decoded size, checked before scanning

    Returns:
        Decoded bytes

    Raises:
        FormatError: If the value is not hex or has the wrong length
    """
    if not isinstance(value, str):
        raise FormatError(f"Invalid hex string for {field_name}")

    if max_size is not None and len(value) // 2 > max_size:
        raise FormatError(f"Invalid length for {field_name}: exceeds {max_size} bytes")

    if not _HEX_RE.fullmatch(value):
        raise FormatError(f"Invalid hex string for {field_name}")

    if expected_size is not None and len(value) != expected_size * 2:
        raise FormatError(
            f"Invalid length for {field_name}: expected {expected_size} bytes, "
            f"got {len(value) / 2:g}"
        )

    if len(value) % 2:
        raise FormatError(f"Invalid hex string for {field_name}")

    return bytes.fromhex(value)


def validate_key_length(key: bytes, expected_size: int, key_name: str) -> None:
    """Raise KeyLengthError unless ``key`` is exactly ``expected_size`` bytes."""
    if len(key) != expected_size:
        raise KeyLengthError(
            f"Invalid {key_name} length: expected {expected_size} bytes, got {len(key)}"
        )
