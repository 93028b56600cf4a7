"""
clipsync: clipboard snippets kept in a local store and a per-user remote
store, reconciled with remote-wins merge.
"""

from clipsync.models import ClipboardItem
from clipsync.services.sync_service import SyncService, merge

__version__ = "0.1.0"

__all__ = [
    'ClipboardItem',
    'SyncService',
    'merge',
]
