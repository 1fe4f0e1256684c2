"""
Application configuration for the shop data core.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

APP_HOME = Path.home() / ".snapos"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """Local store configuration."""
    path: str = str(APP_HOME / "snapos.db")


@dataclass
class SyncConfig:
    """Background sync configuration."""
    interval: float = 15.0
    timeout: float = 30.0
    # Saves of an unchanged collection still write and queue a record
    enqueue_unchanged: bool = True
    # Deliver only the newest queued snapshot of each collection
    compact_outbox: bool = False


@dataclass
class AppConfig:
    """Main application configuration."""
    store: StoreConfig = field(default_factory=StoreConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    log_dir: str = str(APP_HOME / "logs")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """
        Create configuration from SNAPOS_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("SNAPOS_DB_PATH"):
            config.store.path = env["SNAPOS_DB_PATH"]
        if env.get("SNAPOS_LOG_DIR"):
            config.log_dir = env["SNAPOS_LOG_DIR"]
        if env.get("SNAPOS_SYNC_INTERVAL"):
            config.sync.interval = float(env["SNAPOS_SYNC_INTERVAL"])
        if env.get("SNAPOS_SYNC_TIMEOUT"):
            config.sync.timeout = float(env["SNAPOS_SYNC_TIMEOUT"])
        if env.get("SNAPOS_ENQUEUE_UNCHANGED"):
            config.sync.enqueue_unchanged = _env_bool(env["SNAPOS_ENQUEUE_UNCHANGED"])
        if env.get("SNAPOS_COMPACT_OUTBOX"):
            config.sync.compact_outbox = _env_bool(env["SNAPOS_COMPACT_OUTBOX"])

        return config
