from enum import Enum


class SyncStatus(Enum):
    """Outcome of the last or ongoing reconciliation with the remote store."""
    SYNCED = "SYNCED"
    SYNCING = "SYNCING"
    FAILED = "FAILED"
    OFFLINE = "OFFLINE"
