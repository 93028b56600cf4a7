"""
Per-customer execution units.

Every customer id maps to exactly one ``ClipboardUnit``. A unit runs its work
on a single worker thread, so requests for one customer are applied to the
table and cache strictly one after another, while different customers'
units proceed in parallel.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Protocol, TypeVar, Union

from clipsync.database.redis_manager import ItemCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = Dict[str, Union[int, str]]


class ClipboardTable(Protocol):
    def upsert(self, item_id: int, customer_id: str, clipboard_data: str) -> int: ...

    def list(self, customer_id: str) -> List[Row]: ...

    def delete(self, item_id: int, customer_id: str) -> None: ...


class ClipboardUnit:

    def __init__(self, customer_id: str, table: ClipboardTable, cache: ItemCache) -> None:
        self.customer_id = customer_id
        self.table = table
        self.cache = cache
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"unit-{customer_id}")

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        return await asyncio.wrap_future(self._executor.submit(fn, *args))

    def _handle_sync(self, item_id: int, clipboard_data: str) -> int:
        stored_id = self.table.upsert(item_id, self.customer_id, clipboard_data)
        self.cache.put(self.customer_id, stored_id, clipboard_data)
        return stored_id

    def _handle_get(self) -> List[Row]:
        rows = self.table.list(self.customer_id)
        self.cache.replace_all(self.customer_id, rows)
        return rows

    def _handle_delete(self, item_id: int) -> None:
        self.cache.remove(self.customer_id, item_id)
        self.table.delete(item_id, self.customer_id)

    async def upsert(self, item_id: int, clipboard_data: str) -> int:
        return await self._run(self._handle_sync, item_id, clipboard_data)

    async def list(self) -> List[Row]:
        return await self._run(self._handle_get)

    async def delete(self, item_id: int) -> None:
        await self._run(self._handle_delete, item_id)

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class UnitRegistry:

    def __init__(self, table: ClipboardTable, cache: ItemCache) -> None:
        self.table = table
        self.cache = cache
        self._units: Dict[str, ClipboardUnit] = {}
        self._lock = threading.Lock()

    def unit_for(self, customer_id: str) -> ClipboardUnit:
        with self._lock:
            unit = self._units.get(customer_id)
            if unit is None:
                unit = ClipboardUnit(customer_id, self.table, self.cache)
                self._units[customer_id] = unit
                logger.debug(f"Created unit for customer {customer_id}")
            return unit

    def __len__(self) -> int:
        return len(self._units)

    def close(self) -> None:
        with self._lock:
            units = list(self._units.values())
            self._units.clear()
        for unit in units:
            unit.close()
        self.cache.close()
