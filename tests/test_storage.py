"""Tests for the in-memory record store."""

import asyncio
from dataclasses import replace

import pytest

from secure_envelope import (
    DuplicateRecordError,
    InMemoryRecordStore,
    RecordNotFoundError,
    encrypt_envelope,
    open_envelope,
)


async def test_put_and_get(memory_store, record):
    await memory_store.put(record)
    assert await memory_store.get(record.id) == record
    assert await memory_store.list_ids() == [record.id]


async def test_get_missing_returns_none(memory_store):
    assert await memory_store.get("does-not-exist") is None


async def test_require_missing_raises(memory_store):
    with pytest.raises(RecordNotFoundError):
        await memory_store.require("does-not-exist")


async def test_duplicate_id_rejected(memory_store, record):
    await memory_store.put(record)
    with pytest.raises(DuplicateRecordError):
        await memory_store.put(replace(record, party_id="someone_else"))
    assert (await memory_store.get(record.id)).party_id == "user_123"


async def test_delete(memory_store, record):
    await memory_store.put(record)
    await memory_store.delete(record.id)
    await memory_store.delete(record.id)
    assert await memory_store.get(record.id) is None
    assert len(memory_store) == 0


async def test_concurrent_puts(master_key, payload):
    store = InMemoryRecordStore()
    records = [encrypt_envelope(f"user_{i}", payload, master_key) for i in range(50)]

    await asyncio.gather(*(store.put(r) for r in records))

    assert len(store) == 50
    stored = await store.require(records[17].id)
    assert open_envelope(stored, master_key) == payload


async def test_stores_are_isolated(record):
    first = InMemoryRecordStore()
    second = InMemoryRecordStore()
    await first.put(record)
    assert await second.get(record.id) is None
