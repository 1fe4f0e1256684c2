"""
Data-access contract for the shop pages.

Pages read collections, save whole collections back, and read the sync
status. They own no sync logic: every save here is written to the local
store first and then queued in the outbox.
"""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from snapos.errors import StorageError
from snapos.models.change_record import ChangeRecord
from snapos.models.collection import Collection
from snapos.models.entities import AuditLog, User
from snapos.models.settings import ShopSettings
from snapos.models.sync_status import SyncStatus
from snapos.store.keys import StorageKey
from snapos.store.local_store import LocalStore, json_serialize_fallback
from snapos.sync.outbox import Outbox
from snapos.sync.scheduler import SyncScheduler
from snapos.sync.settings_gate import SettingsGate

logger = logging.getLogger(__name__)

CollectionName = Union[Collection, str]


def _snapshot(items: Iterable[Any]) -> List[Any]:
    """Convert records to their stored JSON form."""
    records = [item.to_record() if hasattr(item, 'to_record') else item for item in items]
    try:
        return json.loads(json.dumps(records, default=json_serialize_fallback))
    except (TypeError, ValueError) as e:
        raise StorageError(f"Cannot serialize collection: {e}") from e


class ShopDatabase:
    """
    Collection access for the shop pages.

    A save is two steps: persist the snapshot, then queue it for sync. If the
    queue step fails after the write, the error still reaches the caller, and
    the change stays local until a later save of that collection queues a
    newer snapshot.
    """

    AUDIT_LIMIT = 100

    def __init__(
        self,
        store: LocalStore,
        outbox: Outbox,
        settings_gate: SettingsGate,
        scheduler: SyncScheduler,
        enqueue_unchanged: bool = True
    ):
        self.store = store
        self.outbox = outbox
        self.settings_gate = settings_gate
        self.scheduler = scheduler
        self.enqueue_unchanged = enqueue_unchanged

    def get_all(self, collection: CollectionName) -> List[Dict[str, Any]]:
        """Get every record of a collection, in stored order."""
        return self.store.get(Collection.parse(collection).storage_key, [])

    def save(self, collection: CollectionName, items: Iterable[Any]) -> Optional[ChangeRecord]:
        """
        Replace a collection and queue the new snapshot for sync.

        Args:
            collection: Collection member or name, e.g. "PRODUCTS"
            items: Records as dicts or model instances

        Returns:
            The queued change record, or None if the collection was unchanged
            and unchanged saves are not queued

        Raises:
            StorageError: If the write or the enqueue failed
        """
        target = Collection.parse(collection)
        snapshot = _snapshot(items)

        if not self.enqueue_unchanged and self.store.get(target.storage_key) == snapshot:
            logger.debug(f"{target.name} unchanged, nothing queued")
            return None

        self.store.set(target.storage_key, snapshot)
        return self.outbox.enqueue(target.name, snapshot)

    def add_audit(self, user_id: str, username: str, action: str) -> AuditLog:
        """Record an audit entry. The newest entries come first; only the last 100 are kept."""
        entry = AuditLog(
            id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).isoformat(),
            user_id=user_id,
            username=username,
            action=action,
        )
        logs = [entry.to_record()] + self.get_all(Collection.AUDIT)
        self.save(Collection.AUDIT, logs[:self.AUDIT_LIMIT])
        return entry

    def get_current_user(self) -> Optional[User]:
        raw = self.store.get(StorageKey.CURRENT_USER)
        return User.from_record(raw) if raw else None

    def set_current_user(self, user: Optional[User]) -> None:
        """Store the signed-in user. Session data is never synced."""
        if user is None:
            self.store.delete(StorageKey.CURRENT_USER)
        else:
            self.store.set(StorageKey.CURRENT_USER, user.to_record())

    def get_settings(self) -> ShopSettings:
        return self.settings_gate.get_shop()

    def save_settings(self, settings: ShopSettings) -> SyncStatus:
        """
        Save the shop settings and, if sync is enabled, sync right away.

        Returns:
            Result of the immediate sync, or OFFLINE when sync is disabled
        """
        self.settings_gate.save_shop(settings)
        if settings.sync_enabled:
            return self.trigger_sync_now()
        return SyncStatus.OFFLINE

    def pending_count(self) -> int:
        return self.outbox.count()

    def get_sync_status(self) -> SyncStatus:
        return self.scheduler.status

    def trigger_sync_now(self) -> SyncStatus:
        """Sync immediately unless a sync is already in flight."""
        return self.scheduler.trigger_now()

    def reset_database(self) -> None:
        """Remove every collection, the outbox, the settings and the session."""
        removed = self.store.clear()
        logger.warning(f"Local database reset, {removed} keys removed")
