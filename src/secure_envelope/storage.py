"""
Storage abstractions for secure records.

This module provides:
- RecordStore: Abstract interface for record storage backends
- InMemoryRecordStore: asyncio-safe in-memory implementation

The encryption engine never touches storage; callers put the records it
produces and fetch them back by id.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import DuplicateRecordError, RecordNotFoundError
from .record import SecureRecord


class RecordStore(ABC):
    """
    Abstract storage interface for secure records.

    All methods are async so that database backends can be plugged in.
    """

    @abstractmethod
    async def put(self, record: SecureRecord) -> None:
        """Store a record. Raises DuplicateRecordError if the id is taken."""
        ...

    @abstractmethod
    async def get(self, record_id: str) -> Optional[SecureRecord]:
        """Get a record by id."""
        ...

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """Delete a record."""
        ...

    @abstractmethod
    async def list_ids(self) -> List[str]:
        """List all record ids."""
        ...

    async def require(self, record_id: str) -> SecureRecord:
        """
        Get a record by id or raise.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        record = await self.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record {record_id}")
        return record


class InMemoryRecordStore(RecordStore):
    """
    In-memory record store.

    Uses asyncio.Lock for safe concurrent access. Contents are lost when the
    process exits.
    """

    def __init__(self) -> None:
        self._records: Dict[str, SecureRecord] = {}
        self._lock = asyncio.Lock()

    async def put(self, record: SecureRecord) -> None:
        """Store a record."""
        async with self._lock:
            if record.id in self._records:
                raise DuplicateRecordError(f"Record {record.id} already exists")
            self._records[record.id] = record

    async def get(self, record_id: str) -> Optional[SecureRecord]:
        """Get a record by id."""
        async with self._lock:
            return self._records.get(record_id)

    async def delete(self, record_id: str) -> None:
        """Delete a record."""
        async with self._lock:
            self._records.pop(record_id, None)

    async def list_ids(self) -> List[str]:
        """List all record ids."""
        async with self._lock:
            return list(self._records.keys())

    def __len__(self) -> int:
        return len(self._records)
