from .storage import NoteVault
from .sync_log import SyncLog

__all__ = ["NoteVault", "SyncLog"]
