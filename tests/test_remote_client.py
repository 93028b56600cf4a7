"""Tests for the remote store client."""

import json

import httpx
import pytest

from clipsync.api.main import create_app
from clipsync.errors import RemoteStoreError
from clipsync.models import ClipboardItem
from clipsync.services.remote_client import RemoteResult, RemoteStoreClient

BASE_URL = "http://remote.test/"


def make_client(handler) -> RemoteStoreClient:
    transport = httpx.MockTransport(handler)
    return RemoteStoreClient(BASE_URL, client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_list_maps_wire_rows_to_items() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[
            {"id": 2, "clipboard_data": "b"},
            {"id": 1, "clipboard_data": "a"},
        ])

    client = make_client(handler)

    items = await client.list("alice")

    assert items == [ClipboardItem(2, "b"), ClipboardItem(1, "a")]
    assert seen[0].method == "GET"
    assert seen[0].url.params["customer_id"] == "alice"


@pytest.mark.asyncio
async def test_list_is_empty_on_error_status() -> None:
    client = make_client(lambda request: httpx.Response(500, text="Error: boom"))

    assert await client.list("alice") == []


@pytest.mark.asyncio
async def test_list_is_empty_when_unreachable() -> None:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    assert await client.list("alice") == []


@pytest.mark.asyncio
async def test_fetch_raises_with_status_and_body() -> None:
    client = make_client(lambda request: httpx.Response(503, text="down"))

    with pytest.raises(RemoteStoreError) as exc_info:
        await client.fetch("alice")

    assert exc_info.value.status == 503
    assert exc_info.value.body == "down"


@pytest.mark.asyncio
async def test_fetch_rejects_malformed_payload() -> None:
    client = make_client(lambda request: httpx.Response(200, json={"id": 1}))

    with pytest.raises(RemoteStoreError):
        await client.fetch("alice")


@pytest.mark.asyncio
async def test_upsert_sends_wire_body() -> None:
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="Data synced successfully")

    client = make_client(handler)

    result = await client.upsert("alice", ClipboardItem(7, "hello"))

    assert result.ok
    assert seen[0].method == "PUT"
    assert seen[0].url.params["customer_id"] == "alice"
    assert json.loads(seen[0].content) == {"id": 7, "clipboard_data": "hello"}


@pytest.mark.asyncio
async def test_upsert_failure_is_reported_not_raised() -> None:
    client = make_client(lambda request: httpx.Response(500, text="Error: disk full"))

    result = await client.upsert("alice", ClipboardItem(7, "hello"))

    assert not result.ok
    assert result.status == 500
    assert result.reason == "500: Error: disk full"


def test_reason_keeps_body_text_verbatim() -> None:
    assert RemoteResult(ok=False, status=502, body="upstream: ").reason == "502: upstream: "
    assert RemoteResult(ok=False, status=503).reason == "503"
    assert RemoteResult(ok=True, status=200, body="ok").reason == ""


@pytest.mark.asyncio
async def test_upsert_transport_failure_is_reported() -> None:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    result = await client.upsert("alice", ClipboardItem(7, "hello"))

    assert not result.ok
    assert result.status is None
    assert "connection refused" in result.reason


@pytest.mark.asyncio
async def test_delete_sends_id_body() -> None:
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="Data deleted successfully")

    client = make_client(handler)

    result = await client.delete("alice", 7)

    assert result.ok
    assert seen[0].method == "DELETE"
    assert json.loads(seen[0].content) == {"id": 7}


@pytest.mark.asyncio
async def test_round_trip_against_backend(registry) -> None:
    transport = httpx.ASGITransport(app=create_app(registry))
    async with RemoteStoreClient(
        BASE_URL, client=httpx.AsyncClient(transport=transport)
    ) as client:
        assert (await client.upsert("alice", ClipboardItem(1, "a"))).ok
        assert (await client.upsert("alice", ClipboardItem(2, "b"))).ok
        assert (await client.delete("alice", 1)).ok

        assert await client.fetch("alice") == [ClipboardItem(2, "b")]
        assert await client.fetch("bob") == []
