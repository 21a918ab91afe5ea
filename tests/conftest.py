"""
Pytest configuration and fixtures for secure envelope tests.
"""

from __future__ import annotations

import secrets
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from secure_envelope import InMemoryRecordStore, SecureRecord, encrypt_envelope
from secure_envelope.api import create_app
from secure_envelope.config import Settings


@pytest.fixture
def master_key() -> bytes:
    """Fresh random 32-byte master key."""
    return secrets.token_bytes(32)


@pytest.fixture
def payload() -> dict:
    return {"amount": 100, "currency": "USD", "note": "Secret transaction"}


@pytest.fixture
def record(master_key: bytes, payload: dict) -> SecureRecord:
    return encrypt_envelope("user_123", payload, master_key)


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Create an in-memory record store for testing."""
    return InMemoryRecordStore()


@pytest.fixture
def settings(master_key: bytes) -> Settings:
    return Settings(master_key_hex=master_key.hex())


@pytest.fixture
def client(memory_store: InMemoryRecordStore, settings: Settings) -> Iterator[TestClient]:
    """API client backed by an isolated in-memory store."""
    app = create_app(store=memory_store, settings=settings)
    with TestClient(app) as test_client:
        yield test_client
