import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from clipsync.api.units import ClipboardUnit, UnitRegistry
from clipsync.config import DEFAULT_CUSTOMER_ID, MySQLConfig, RedisConfig, ServerConfig
from clipsync.database.mysql import MySQLClipboardTable
from clipsync.database.redis_manager import LocalItemCache, RedisItemCache
from clipsync.schema import ClipboardRow, DeleteRequest

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def build_registry(use_redis: Optional[bool] = None) -> UnitRegistry:
    if use_redis is None:
        use_redis = ServerConfig.from_env().use_redis
    table = MySQLClipboardTable.from_config(MySQLConfig.from_env())
    if use_redis:
        cache = RedisItemCache.from_config(RedisConfig.from_env())
    else:
        logger.info("Redis disabled, caching items in process")
        cache = LocalItemCache()
    return UnitRegistry(table, cache)


def _unit(request: Request, customer_id: Optional[str]) -> ClipboardUnit:
    registry: UnitRegistry = request.app.state.registry
    return registry.unit_for(customer_id or DEFAULT_CUSTOMER_ID)


def _server_error(e: Exception) -> PlainTextResponse:
    logger.error(f"Request failed: {e}")
    return PlainTextResponse(f"Error: {e}", status_code=500)


def create_app(registry: Optional[UnitRegistry] = None, *, use_redis: Optional[bool] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if app.state.registry is None:
            owned = build_registry(use_redis)
            app.state.registry = owned
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.registry = None

    app = FastAPI(title="clipsync", lifespan=lifespan)
    app.state.registry = registry

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/health")
    def health():
        return "running"

    @app.options("/")
    async def preflight():
        return Response(status_code=204, headers=CORS_HEADERS)

    @app.get("/")
    async def list_items(request: Request, customer_id: Optional[str] = None):
        try:
            rows = await _unit(request, customer_id).list()
            return JSONResponse(rows)
        except Exception as e:
            return _server_error(e)

    @app.put("/")
    async def put_item(request: Request, customer_id: Optional[str] = None):
        try:
            payload = await request.json()
            row = ClipboardRow.model_validate(payload)
        except (ValueError, ValidationError) as e:
            return PlainTextResponse(f"Invalid clipboard item: {e}", status_code=400)

        try:
            await _unit(request, customer_id).upsert(row.id, row.clipboard_data)
            return PlainTextResponse("Data synced successfully")
        except Exception as e:
            return _server_error(e)

    @app.delete("/")
    async def delete_item(request: Request, customer_id: Optional[str] = None):
        try:
            payload = await request.json()
            data = DeleteRequest.model_validate(payload)
        except (ValueError, ValidationError):
            return PlainTextResponse("Missing or invalid id in JSON body", status_code=400)

        try:
            await _unit(request, customer_id).delete(data.id)
            return PlainTextResponse("Data deleted successfully")
        except Exception as e:
            return _server_error(e)

    return app


app = create_app()
