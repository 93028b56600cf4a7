"""
On-device storage for clipsync.

The key-value store keeps one JSON record per key in a single SQLite table.
``LocalStoreAdapter`` stores a user's whole clipboard collection under the
user identifier and overwrites it on every write.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Protocol, Sequence

from clipsync.models import ClipboardItem

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...

    async def put(self, key: str, value: Any) -> None: ...


class SQLiteKeyValueStore:
    """
    Async key-value store backed by SQLite.

    The connection is opened lazily on first use and then reused. Calls run
    in a worker thread so the event loop is never blocked on disk I/O.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.execute(
                "CREATE TABLE IF NOT EXISTS data (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            conn.commit()
            self._conn = conn
        return self._conn

    def _get(self, key: str) -> Optional[Any]:
        with self._lock:
            row = self._connect().execute(
                "SELECT value FROM data WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def _put(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._lock:
            conn = self._connect()
            conn.execute(
                "INSERT OR REPLACE INTO data (key, value) VALUES (?, ?)", (key, encoded)
            )
            conn.commit()

    async def get(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._get, key)

    async def put(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._put, key, value)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


class LocalStoreAdapter:

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    async def read(self, user_id: str) -> List[ClipboardItem]:
        data = await self.store.get(user_id)
        if not data:
            return []
        # Older records may hold a single item instead of a list.
        records = data if isinstance(data, list) else [data]
        return [ClipboardItem.from_dict(record) for record in records]

    async def write(self, user_id: str, items: Sequence[ClipboardItem]) -> None:
        await self.store.put(user_id, [item.to_dict() for item in items])
        logger.debug(f"Persisted {len(items)} local items for {user_id}")
