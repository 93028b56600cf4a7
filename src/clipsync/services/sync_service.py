"""
Reconciliation between the local store and the remote store.

The remote store is authoritative: whenever both sides hold an item under the
same id, the remote copy is kept and the local one is dropped from the merged
view. Items only ever get created or deleted, never edited, so ids collide
only when the same item is seen on both sides.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence

from clipsync.database.local_store import LocalStoreAdapter
from clipsync.errors import EmptyValueError
from clipsync.models import ClipboardItem
from clipsync.services.remote_client import RemoteResult, RemoteStoreClient

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    SYNCED = "synced"
    FAILED = "failed"


@dataclass(frozen=True)
class PushOutcome:
    item_id: int
    status: SyncStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SyncStatus.SYNCED

    @classmethod
    def from_result(cls, item_id: int, result: RemoteResult) -> "PushOutcome":
        if result.ok:
            return cls(item_id=item_id, status=SyncStatus.SYNCED)
        return cls(item_id=item_id, status=SyncStatus.FAILED, reason=result.reason)


@dataclass(frozen=True)
class SaveResult:
    local: List[ClipboardItem]
    item: ClipboardItem
    outcome: PushOutcome


@dataclass(frozen=True)
class PullResult:
    remote: List[ClipboardItem]
    local: List[ClipboardItem]


@dataclass(frozen=True)
class DeleteResult:
    local: List[ClipboardItem]
    remote: List[ClipboardItem]
    outcome: PushOutcome


@dataclass(frozen=True)
class LoadResult:
    local: List[ClipboardItem]
    remote: List[ClipboardItem]

    @property
    def merged(self) -> List[ClipboardItem]:
        return merge(self.local, self.remote)


@dataclass(frozen=True)
class SyncReport:
    pull: PullResult
    pushed: List[PushOutcome]

    @property
    def failed(self) -> List[PushOutcome]:
        return [outcome for outcome in self.pushed if not outcome.ok]


def merge(local: Sequence[ClipboardItem], remote: Sequence[ClipboardItem]) -> List[ClipboardItem]:
    """
    Merge two collections into the user-facing view.

    Remote items come first in remote order, followed by local items whose id
    the remote does not hold, in local order. Remote wins for shared ids.
    """
    remote_ids = {item.id for item in remote}
    return [*remote, *(item for item in local if item.id not in remote_ids)]


def fresh_id(existing: Sequence[ClipboardItem], clock: Callable[[], float] = time.time) -> int:
    # Millisecond timestamp, bumped past the newest local id on collision.
    candidate = int(clock() * 1000)
    if existing:
        candidate = max(candidate, max(item.id for item in existing) + 1)
    return candidate


class SyncService:

    def __init__(
        self,
        local: LocalStoreAdapter,
        remote: RemoteStoreClient,
        *,
        serialize: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.local = local
        self.remote = remote
        self.serialize = serialize
        self._clock = clock
        # One lock per user seen, kept for the life of the service.
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def _guard(self, user_id: str) -> AsyncIterator[None]:
        if not self.serialize:
            yield
            return
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            yield

    async def load(self, user_id: str) -> LoadResult:
        local = await self.local.read(user_id)
        remote = await self.remote.list(user_id)
        return LoadResult(local=local, remote=remote)

    async def save(
        self,
        user_id: str,
        existing_local: Sequence[ClipboardItem],
        value: str,
    ) -> SaveResult:
        if not value.strip():
            raise EmptyValueError("Cannot save an empty clipboard value")

        async with self._guard(user_id):
            item = ClipboardItem(id=fresh_id(existing_local, self._clock), value=value)
            updated = [*existing_local, item]
            # Local first so the item survives a missing connection.
            await self.local.write(user_id, updated)
            [outcome] = await self._push(user_id, [item])

        return SaveResult(local=updated, item=item, outcome=outcome)

    async def push_to_remote(
        self, user_id: str, items: Sequence[ClipboardItem]
    ) -> List[PushOutcome]:
        async with self._guard(user_id):
            return await self._push(user_id, items)

    async def _push(self, user_id: str, items: Sequence[ClipboardItem]) -> List[PushOutcome]:
        outcomes: List[PushOutcome] = []
        for item in items:
            result = await self.remote.upsert(user_id, item)
            outcome = PushOutcome.from_result(item.id, result)
            if outcome.ok:
                logger.info(f"Synced item {item.id} successfully")
            else:
                logger.error(f"Failed to sync item {item.id}: {outcome.reason}")
            outcomes.append(outcome)
        return outcomes

    async def pull_from_remote(
        self, user_id: str, current_local: Sequence[ClipboardItem]
    ) -> PullResult:
        async with self._guard(user_id):
            return await self._pull(user_id, current_local)

    async def _pull(self, user_id: str, current_local: Sequence[ClipboardItem]) -> PullResult:
        remote_items = await self.remote.fetch(user_id)
        merged = merge(current_local, remote_items)
        await self.local.write(user_id, merged)
        logger.info(
            f"Merged {len(remote_items)} remote items into local for {user_id} ({len(merged)} total)")
        return PullResult(remote=remote_items, local=merged)

    async def delete_item(
        self,
        user_id: str,
        item_id: int,
        current_local: Sequence[ClipboardItem],
        current_remote: Sequence[ClipboardItem],
    ) -> DeleteResult:
        async with self._guard(user_id):
            updated_local = [item for item in current_local if item.id != item_id]
            updated_remote = [item for item in current_remote if item.id != item_id]
            await self.local.write(user_id, updated_local)

            # The remote view stays optimistic even if this fails.
            result = await self.remote.delete(user_id, item_id)
            outcome = PushOutcome.from_result(item_id, result)
            if outcome.ok:
                logger.info(f"Deleted item {item_id}")
            else:
                logger.error(f"Failed to delete item {item_id} remotely: {outcome.reason}")

        return DeleteResult(local=updated_local, remote=updated_remote, outcome=outcome)

    async def sync(
        self, user_id: str, current_local: Optional[Sequence[ClipboardItem]] = None
    ) -> SyncReport:
        """Pull the remote state, then push the merged items the remote lacks."""
        async with self._guard(user_id):
            if current_local is None:
                current_local = await self.local.read(user_id)
            pulled = await self._pull(user_id, current_local)
            remote_ids = {item.id for item in pulled.remote}
            unsynced = [item for item in pulled.local if item.id not in remote_ids]
            outcomes = await self._push(user_id, unsynced)

        return SyncReport(pull=pulled, pushed=outcomes)
