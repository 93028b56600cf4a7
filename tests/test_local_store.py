"""Tests for the SQLite key-value store and the per-user local collection."""

import pytest

from clipsync.database.local_store import LocalStoreAdapter, SQLiteKeyValueStore
from clipsync.models import ClipboardItem


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteKeyValueStore(tmp_path / "nested" / "local.db")
    yield store
    store.close()


@pytest.mark.asyncio
async def test_missing_key_reads_as_none(sqlite_store) -> None:
    assert await sqlite_store.get("nobody") is None


@pytest.mark.asyncio
async def test_put_overwrites_whole_value(sqlite_store) -> None:
    await sqlite_store.put("alice", [{"id": 1, "value": "a"}])
    await sqlite_store.put("alice", [{"id": 2, "value": "b"}])

    assert await sqlite_store.get("alice") == [{"id": 2, "value": "b"}]


@pytest.mark.asyncio
async def test_values_survive_reopening(tmp_path) -> None:
    path = tmp_path / "local.db"
    first = SQLiteKeyValueStore(path)
    await first.put("alice", [{"id": 1, "value": "a"}])
    first.close()

    second = SQLiteKeyValueStore(path)
    try:
        assert await second.get("alice") == [{"id": 1, "value": "a"}]
    finally:
        second.close()


@pytest.mark.asyncio
async def test_adapter_round_trip_keeps_order(sqlite_store) -> None:
    adapter = LocalStoreAdapter(sqlite_store)
    items = [ClipboardItem(3, "c"), ClipboardItem(1, "a"), ClipboardItem(2, "data:image/png;base64,AAAA")]

    await adapter.write("alice", items)

    assert await adapter.read("alice") == items


@pytest.mark.asyncio
async def test_adapter_reads_empty_for_unknown_user(local_store) -> None:
    assert await local_store.read("nobody") == []


@pytest.mark.asyncio
async def test_adapter_wraps_single_record(kv, local_store) -> None:
    kv.data["alice"] = {"id": 1, "value": "a"}

    assert await local_store.read("alice") == [ClipboardItem(1, "a")]


@pytest.mark.asyncio
async def test_users_are_kept_apart(local_store) -> None:
    await local_store.write("alice", [ClipboardItem(1, "a")])
    await local_store.write("bob", [ClipboardItem(2, "b")])

    assert await local_store.read("alice") == [ClipboardItem(1, "a")]
    assert await local_store.read("bob") == [ClipboardItem(2, "b")]
