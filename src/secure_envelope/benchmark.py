"""
Secure Envelope Benchmark CLI.

Usage:
    secure-envelope-benchmark

Or run directly:
    python -m secure_envelope.benchmark

Uses MASTER_KEY from the environment or .env file when set, otherwise a
random master key for the run.
"""

from __future__ import annotations

import asyncio
import os
import sys
import time
from dataclasses import replace
from typing import Callable, List, Tuple

from dotenv import load_dotenv

from secure_envelope.config import parse_master_key
from secure_envelope.crypto import generate_random_bytes
from secure_envelope.envelope import decrypt_payload, encrypt_envelope, open_envelope, unwrap_dek
from secure_envelope.errors import ConfigError, EnvelopeError, FormatError, IntegrityError
from secure_envelope.record import SecureRecord
from secure_envelope.storage import InMemoryRecordStore


def _flip_last_byte(hex_value: str) -> str:
    return hex_value[:-2] + ("11" if hex_value.endswith("00") else "00")


def verification_checks(record: SecureRecord, master_key: bytes) -> List[Tuple[str, Callable[[], object], type]]:
    """Scenarios that must each raise the paired exception type."""
    dek = unwrap_dek(record, master_key)
    return [
        ("Tampered payload tag", lambda: decrypt_payload(replace(record, payload_tag=_flip_last_byte(record.payload_tag)), dek), IntegrityError),
        ("Tampered ciphertext", lambda: decrypt_payload(replace(record, payload_ct=_flip_last_byte(record.payload_ct)), dek), IntegrityError),
        ("Tampered wrap tag", lambda: unwrap_dek(replace(record, dek_wrap_tag=_flip_last_byte(record.dek_wrap_tag)), master_key), IntegrityError),
        ("Wrong nonce length", lambda: decrypt_payload(replace(record, payload_nonce=record.payload_nonce + "ff"), dek), FormatError),
        ("Invalid hex in nonce", lambda: decrypt_payload(replace(record, payload_nonce="G" * 24), dek), FormatError),
        ("Invalid hex in ciphertext", lambda: decrypt_payload(replace(record, payload_ct="G" * len(record.payload_ct)), dek), FormatError),
        ("Wrong master key", lambda: unwrap_dek(record, generate_random_bytes(32)), IntegrityError),
        ("Undersized master key", lambda: encrypt_envelope("user_123", {}, generate_random_bytes(16)), ConfigError),
    ]


async def run_benchmark() -> None:
    """Run the secure envelope benchmark."""
    print("=== Secure Envelope Benchmark ===\n")

    load_dotenv()

    if os.environ.get("MASTER_KEY"):
        try:
            master_key = parse_master_key(os.environ["MASTER_KEY"])
        except ConfigError as e:
            print(f"ERROR: {e}")
            sys.exit(1)
        print("[STARTUP] Using MASTER_KEY from environment")
    else:
        master_key = generate_random_bytes(32)
        print("[STARTUP] MASTER_KEY not set, using a random master key")

    try:
        user_input = input("Enter number of records to test (default: 1000): ").strip()
        test_quantity = int(user_input) if user_input else 1000
    except (ValueError, EOFError):
        test_quantity = 1000
    if test_quantity < 1:
        test_quantity = 1
    print(f"Testing with {test_quantity} records\n")

    store = InMemoryRecordStore()
    payload = {"amount": 100, "currency": "USD", "note": "Secret transaction"}

    print("=" * 70)
    print("                    BENCHMARK START")
    print("=" * 70 + "\n")

    # ========================================================================
    # Demo 1: Encrypt and store records
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print(f"|  Demo 1: Encrypt {test_quantity} Envelopes" + " " * (39 - len(str(test_quantity))) + "|")
    print("+" + "-" * 68 + "+")

    record_ids = []
    demo1_start = time.perf_counter()
    for i in range(test_quantity):
        record = encrypt_envelope(f"user_{i}", payload, master_key)
        await store.put(record)
        record_ids.append(record.id)
    demo1_duration = time.perf_counter() - demo1_start

    print(f"[OK] Encrypted and stored {test_quantity} records")
    print(f"[PERF] Time: {demo1_duration * 1000:.3f}ms | Rate: {test_quantity / demo1_duration:.2f} ops/sec\n")

    # ========================================================================
    # Demo 2: Unwrap and decrypt records
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 2: Unwrap + Decrypt                                         |")
    print("+" + "-" * 68 + "+")

    mismatches = 0
    demo2_start = time.perf_counter()
    for record_id in record_ids:
        record = await store.require(record_id)
        if open_envelope(record, master_key) != payload:
            mismatches += 1
    demo2_duration = time.perf_counter() - demo2_start

    if mismatches:
        print(f"[ERROR] {mismatches} records did not round-trip")
    else:
        print(f"[OK] All {test_quantity} records decrypted to the original payload")
    print(f"[PERF] Time: {demo2_duration * 1000:.3f}ms | Rate: {test_quantity / demo2_duration:.2f} ops/sec\n")

    # ========================================================================
    # Demo 3: Tamper and validation checks
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 3: Tamper Detection and Validation                          |")
    print("+" + "-" * 68 + "+")

    sample = await store.require(record_ids[0])
    failures = 0
    for name, attempt, expected in verification_checks(sample, master_key):
        try:
            attempt()
        except expected as e:
            print(f"  [OK] {name}: {type(e).__name__}: {e}")
        except EnvelopeError as e:
            failures += 1
            print(f"  [ERROR] {name}: expected {expected.__name__}, got {type(e).__name__}")
        else:
            failures += 1
            print(f"  [ERROR] {name}: no error raised")
    print()

    # ========================================================================
    # Summary
    # ========================================================================
    print("=" * 70)
    print("                    BENCHMARK SUMMARY")
    print("=" * 70 + "\n")

    enc_rate = f"{test_quantity / demo1_duration:.2f}"
    dec_rate = f"{test_quantity / demo2_duration:.2f}"
    print("+- Performance Summary ---------------------------------------------+")
    print("|                                                                    |")
    print(f"|  Envelope Encryption: {enc_rate} ops/sec" + " " * (31 - len(enc_rate)) + "|")
    print(f"|  Envelope Decryption: {dec_rate} ops/sec" + " " * (31 - len(dec_rate)) + "|")
    print("|                                                                    |")
    print("+--------------------------------------------------------------------+")

    print("\nTest Configuration:")
    print(f"  - Total records tested: {test_quantity}")
    print("  - Crypto: AES-256-GCM, one DEK per record, DEK wrapped by master key")
    print(f"  - Verification failures: {failures}")

    print("\n" + "=" * 70)
    print("                    BENCHMARK COMPLETE")
    print("=" * 70 + "\n")

    if mismatches or failures:
        sys.exit(1)


def main() -> None:
    """CLI entry point for secure-envelope-benchmark command."""
    asyncio.run(run_benchmark())


if __name__ == "__main__":
    main()
