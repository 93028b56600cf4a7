from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import httpx
from pydantic import ValidationError

from clipsync.errors import RemoteStoreError
from clipsync.models import ClipboardItem
from clipsync.schema import ClipboardRow, DeleteRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteResult:
    ok: bool
    status: Optional[int] = None
    body: str = ""

    @property
    def reason(self) -> str:
        if self.ok:
            return ""
        if self.status is None:
            return self.body or "transport error"
        return f"{self.status}: {self.body}" if self.body else str(self.status)


class RemoteStoreClient:
    """
    Client for the per-user remote store.

    All requests go to one endpoint URL with the user identifier passed as the
    ``customer_id`` query parameter. Each item costs one round trip.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _params(self, user_id: str) -> dict:
        return {"customer_id": user_id}

    async def fetch(self, user_id: str) -> List[ClipboardItem]:
        try:
            response = await self._client.get(self.base_url, params=self._params(user_id))
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Could not reach remote store: {e}") from e

        if not response.is_success:
            raise RemoteStoreError(
                f"Remote list failed with status {response.status_code}",
                status=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
            if not isinstance(payload, list):
                raise RemoteStoreError("Remote list did not return an array", status=response.status_code)
            return [ClipboardRow.model_validate(row).to_item() for row in payload]
        except (ValueError, ValidationError) as e:
            raise RemoteStoreError(f"Malformed remote list: {e}", status=response.status_code) from e

    async def list(self, user_id: str) -> List[ClipboardItem]:
        """Like ``fetch`` but an unreachable or failing remote yields an empty list."""
        try:
            return await self.fetch(user_id)
        except RemoteStoreError as e:
            logger.warning(f"Remote list for {user_id} unavailable: {e}")
            return []

    async def upsert(self, user_id: str, item: ClipboardItem) -> RemoteResult:
        body = ClipboardRow.from_item(item).model_dump()
        return await self._send("PUT", user_id, body)

    async def delete(self, user_id: str, item_id: int) -> RemoteResult:
        body = DeleteRequest(id=item_id).model_dump()
        return await self._send("DELETE", user_id, body)

    async def _send(self, method: str, user_id: str, body: dict) -> RemoteResult:
        try:
            response = await self._client.request(
                method, self.base_url, params=self._params(user_id), json=body
            )
        except httpx.HTTPError as e:
            return RemoteResult(ok=False, body=str(e) or type(e).__name__)

        if response.is_success:
            return RemoteResult(ok=True, status=response.status_code, body=response.text)
        return RemoteResult(ok=False, status=response.status_code, body=response.text)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RemoteStoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
