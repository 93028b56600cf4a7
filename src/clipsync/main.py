#!/usr/bin/env python3

import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Sequence

from clipsync.config import ClientConfig, MySQLConfig, ServerConfig
from clipsync.database.local_store import LocalStoreAdapter, SQLiteKeyValueStore
from clipsync.errors import ClipsyncError
from clipsync.models import ClipboardItem
from clipsync.services.remote_client import RemoteStoreClient
from clipsync.services.sync_service import PushOutcome, SyncService
from clipsync.utils.data_uri import describe, encode_image

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


def _notice(outcomes: Sequence[PushOutcome], verb: str) -> int:
    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            print(f"{verb} {outcome.item_id}")
        else:
            failed += 1
            print(f"Failed to {verb.lower()} {outcome.item_id}: {outcome.reason}")
    return 1 if failed else 0


class ClipsyncApp:

    def __init__(self, user_id: str, config: Optional[ClientConfig] = None) -> None:
        self.user_id = user_id
        self.config = config or ClientConfig.from_env()
        self.store = SQLiteKeyValueStore(self.config.local_db_path)
        self.remote = RemoteStoreClient(self.config.remote_url, timeout=self.config.timeout)
        self.service = SyncService(LocalStoreAdapter(self.store), self.remote)

    async def close(self) -> None:
        await self.remote.close()
        self.store.close()

    async def list(self) -> int:
        loaded = await self.service.load(self.user_id)
        remote_ids = {item.id for item in loaded.remote}
        merged = loaded.merged
        if not merged:
            print("Clipboard is empty")
        for item in merged:
            marker = "" if item.id in remote_ids else "  (local only)"
            print(f"{item.id}  {describe(item)}{marker}")
        return 0

    async def save(self, value: str) -> int:
        local = await self.service.local.read(self.user_id)
        result = await self.service.save(self.user_id, local, value)
        print(f"Saved {result.item.id}")
        return _notice([result.outcome], "Synced")

    async def pull(self) -> int:
        local = await self.service.local.read(self.user_id)
        result = await self.service.pull_from_remote(self.user_id, local)
        print(f"Pulled {len(result.remote)} items, {len(result.local)} stored locally")
        return 0

    async def push(self) -> int:
        local = await self.service.local.read(self.user_id)
        outcomes = await self.service.push_to_remote(self.user_id, local)
        return _notice(outcomes, "Synced")

    async def sync(self) -> int:
        report = await self.service.sync(self.user_id)
        print(f"Pulled {len(report.pull.remote)} items, pushing {len(report.pushed)}")
        return _notice(report.pushed, "Synced")

    async def delete(self, item_id: int) -> int:
        loaded = await self.service.load(self.user_id)
        known: List[ClipboardItem] = loaded.merged
        if not any(item.id == item_id for item in known):
            print(f"No item {item_id}")
            return 1
        result = await self.service.delete_item(self.user_id, item_id, loaded.local, loaded.remote)
        return _notice([result.outcome], "Deleted")


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        description="clipsync - clipboard snippets kept locally and in the cloud"
    )
    parser.add_argument(
        "-u", "--user",
        type=str,
        default=None,
        help="User identifier (default: $CLIPSYNC_USER)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable informational logging"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the remote store backend")
    serve.add_argument("--host", type=str, default=None,
                       help="Bind address (default: $CLIPSYNC_HOST or 0.0.0.0)")
    serve.add_argument("-p", "--port", type=int, default=None,
                       help="Port (default: $CLIPSYNC_PORT or 8787)")
    serve.add_argument("--no-redis", action="store_true",
                       help="Cache items in process instead of Redis")

    commands.add_parser("init-db", help="Create the MySQL clipboard table")
    commands.add_parser("list", help="Show the merged clipboard")

    save = commands.add_parser("save", help="Save a new clipboard item")
    source = save.add_mutually_exclusive_group(required=True)
    source.add_argument("value", nargs="?", help="Text to save")
    source.add_argument("--image", type=str, help="Image file to save as a data URI")

    commands.add_parser("pull", help="Merge the remote clipboard into the local store")
    commands.add_parser("push", help="Push every local item to the remote store")
    commands.add_parser("sync", help="Pull, then push items the remote is missing")

    delete = commands.add_parser("delete", help="Delete an item locally and remotely")
    delete.add_argument("id", type=int, help="Item id")

    args = parser.parse_args(argv)
    args.parser = parser
    return args


def serve(args) -> int:
    import uvicorn
    from clipsync.api.main import create_app

    server = ServerConfig.from_env()
    use_redis = server.use_redis and not args.no_redis
    uvicorn.run(
        create_app(use_redis=use_redis),
        host=args.host or server.host,
        port=args.port or server.port,
    )
    return 0


def init_db() -> int:
    from clipsync.database.mysql import MySQLClipboardTable

    MySQLClipboardTable.from_config(MySQLConfig.from_env()).create_schema()
    print("Clipboard table ready")
    return 0


async def run_command(app: ClipsyncApp, args) -> int:
    try:
        if args.command == "list":
            return await app.list()
        if args.command == "save":
            value = encode_image(args.image) if args.image else args.value
            return await app.save(value)
        if args.command == "pull":
            return await app.pull()
        if args.command == "push":
            return await app.push()
        if args.command == "sync":
            return await app.sync()
        if args.command == "delete":
            return await app.delete(args.id)
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await app.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)

    if args.command == "serve":
        return serve(args)
    if args.command == "init-db":
        return init_db()

    config = ClientConfig.from_env()
    user_id = args.user or config.user
    if not user_id:
        args.parser.error("a user is required: pass --user or set CLIPSYNC_USER")

    try:
        return asyncio.run(run_command(ClipsyncApp(user_id, config), args))
    except (ClipsyncError, ValueError, OSError) as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
