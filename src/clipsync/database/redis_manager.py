"""
Redis cache for the clipsync backend.

Each customer's unit keeps a fast-access copy of its rows in one Redis hash:

- clipboard:<customerId> -> {<itemId>: {"customer_id": ..., "clipboard_data": ...}}

The durable table stays authoritative; ``list`` rewrites the hash from it.
"""

import json
import logging
import threading
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

import redis

from clipsync.config import RedisConfig

logger = logging.getLogger(__name__)


class ItemCache(Protocol):
    def put(self, customer_id: str, item_id: int, clipboard_data: str) -> None: ...

    def remove(self, customer_id: str, item_id: int) -> None: ...

    def replace_all(self, customer_id: str, rows: Iterable[Mapping[str, Any]]) -> None: ...

    def get_all(self, customer_id: str) -> Dict[int, str]: ...

    def close(self) -> None: ...


def _cache_key(customer_id: str) -> str:
    return f"clipboard:{customer_id}"


class RedisItemCache:

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, decode_responses: bool = True,
                 client: Optional[redis.Redis] = None):
        self.client = client or redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=decode_responses
        )
        self._test_connection()

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisItemCache":
        return cls(
            host=config.host,
            port=config.port,
            db=config.db,
            password=config.password,
            decode_responses=config.decode_responses,
        )

    def _test_connection(self):
        try:
            self.client.ping()
        except redis.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def put(self, customer_id: str, item_id: int, clipboard_data: str) -> None:
        entry = json.dumps({"customer_id": customer_id, "clipboard_data": clipboard_data})
        self.client.hset(_cache_key(customer_id), str(item_id), entry)

    def remove(self, customer_id: str, item_id: int) -> None:
        self.client.hdel(_cache_key(customer_id), str(item_id))

    def replace_all(self, customer_id: str, rows: Iterable[Mapping[str, Any]]) -> None:
        mapping = {
            str(row["id"]): json.dumps(
                {"customer_id": customer_id, "clipboard_data": row["clipboard_data"]})
            for row in rows
        }
        key = _cache_key(customer_id)
        pipe = self.client.pipeline()
        pipe.delete(key)
        if mapping:
            pipe.hset(key, mapping=mapping)
        pipe.execute()

    def get_all(self, customer_id: str) -> Dict[int, str]:
        raw: Dict[Union[str, bytes], Union[str, bytes]] = self.client.hgetall(_cache_key(customer_id))
        return {int(field): json.loads(value)["clipboard_data"] for field, value in raw.items()}

    def close(self) -> None:
        self.client.close()


class LocalItemCache:
    """In-process cache used when the server runs without Redis."""

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[int, str]] = {}
        self._lock = threading.Lock()

    def put(self, customer_id: str, item_id: int, clipboard_data: str) -> None:
        with self._lock:
            self._entries.setdefault(customer_id, {})[item_id] = clipboard_data

    def remove(self, customer_id: str, item_id: int) -> None:
        with self._lock:
            self._entries.get(customer_id, {}).pop(item_id, None)

    def replace_all(self, customer_id: str, rows: Iterable[Mapping[str, Any]]) -> None:
        with self._lock:
            self._entries[customer_id] = {int(row["id"]): row["clipboard_data"] for row in rows}

    def get_all(self, customer_id: str) -> Dict[int, str]:
        with self._lock:
            return dict(self._entries.get(customer_id, {}))

    def close(self) -> None:
        pass
