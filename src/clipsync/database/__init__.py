"""
Storage layer for clipsync.

Local on-device store, durable MySQL table and Redis cache.
"""

from clipsync.database.local_store import LocalStoreAdapter, SQLiteKeyValueStore
from clipsync.database.mysql import MySQLClipboardTable
from clipsync.database.redis_manager import LocalItemCache, RedisItemCache

__all__ = [
    'LocalItemCache',
    'LocalStoreAdapter',
    'MySQLClipboardTable',
    'RedisItemCache',
    'SQLiteKeyValueStore',
]
