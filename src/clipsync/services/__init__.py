"""Service layer for clipsync."""

from .remote_client import RemoteResult, RemoteStoreClient
from .sync_service import PushOutcome, SyncService, SyncStatus, merge

__all__ = [
    "PushOutcome",
    "RemoteResult",
    "RemoteStoreClient",
    "SyncService",
    "SyncStatus",
    "merge",
]
