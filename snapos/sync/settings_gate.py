"""
Settings gate for cloud sync.

Reads and writes the shop settings record and exposes its sync subset. The
engine asks the gate on every cycle; nothing here is cached.
"""

import logging

from snapos.models.settings import ShopSettings, SyncSettings
from snapos.store.keys import StorageKey
from snapos.store.local_store import LocalStore

logger = logging.getLogger(__name__)


class SettingsGate:
    """Pass-through holder of the shop and sync settings. No validation."""

    KEY = StorageKey.SETTINGS

    def __init__(self, store: LocalStore):
        self.store = store

    def get_shop(self) -> ShopSettings:
        """Load the shop settings, falling back to defaults for missing fields."""
        raw = self.store.get(self.KEY, None)
        if not raw:
            return ShopSettings()
        return ShopSettings.from_record(raw)

    def save_shop(self, settings: ShopSettings) -> None:
        """Persist the shop settings. Settings saves are never queued for sync."""
        self.store.set(self.KEY, settings.to_record())

    def get(self) -> SyncSettings:
        """Get the current sync settings."""
        return self.get_shop().sync

    def save(self, settings: SyncSettings) -> None:
        """Persist sync settings, keeping the rest of the shop settings as they are."""
        self.save_shop(self.get_shop().with_sync(settings))
        logger.info(
            f"Sync settings saved: enabled={settings.sync_enabled}, "
            f"endpoint={settings.endpoint_url or '(none)'}"
        )
