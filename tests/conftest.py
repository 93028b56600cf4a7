"""Shared fixtures: in-memory doubles for the table and the local key-value store."""

import threading
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from clipsync.api.main import create_app
from clipsync.api.units import UnitRegistry
from clipsync.database.local_store import LocalStoreAdapter
from clipsync.database.redis_manager import LocalItemCache


class MemoryTable:
    """Stands in for the MySQL table; rows keyed by (customer_id, id)."""

    def __init__(self) -> None:
        self.rows: Dict[Tuple[str, int], str] = {}
        self.calls: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def upsert(self, item_id: int, customer_id: str, clipboard_data: str) -> int:
        with self._lock:
            self.calls.append(("upsert", item_id))
            self.rows[(customer_id, item_id)] = clipboard_data
        return item_id

    def list(self, customer_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            self.calls.append(("list", customer_id))
            rows = [
                {"id": item_id, "clipboard_data": data}
                for (owner, item_id), data in self.rows.items()
                if owner == customer_id
            ]
        return sorted(rows, key=lambda row: row["id"], reverse=True)

    def delete(self, item_id: int, customer_id: str) -> None:
        with self._lock:
            self.calls.append(("delete", item_id))
            self.rows.pop((customer_id, item_id), None)


class BrokenTable(MemoryTable):

    def upsert(self, item_id: int, customer_id: str, clipboard_data: str) -> int:
        raise RuntimeError("table unavailable")

    def list(self, customer_id: str) -> List[Dict[str, Any]]:
        raise RuntimeError("table unavailable")

    def delete(self, item_id: int, customer_id: str) -> None:
        raise RuntimeError("table unavailable")


class MemoryKeyValueStore:

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(initial or {})
        self.writes = 0

    async def get(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    async def put(self, key: str, value: Any) -> None:
        self.writes += 1
        self.data[key] = value


@pytest.fixture
def table() -> MemoryTable:
    return MemoryTable()


@pytest.fixture
def cache() -> LocalItemCache:
    return LocalItemCache()


@pytest.fixture
def registry(table, cache):
    registry = UnitRegistry(table, cache)
    yield registry
    registry.close()


@pytest.fixture
def client(registry) -> TestClient:
    return TestClient(create_app(registry))


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def local_store(kv) -> LocalStoreAdapter:
    return LocalStoreAdapter(kv)
