"""
SQLite key-value store for offline-first persistence.

Every entity collection, the sync outbox, the shop settings and the session
user live here as JSON snapshots under stable string keys. Values survive
process restarts; each call is atomic from the caller's point of view.
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional

from snapos.errors import StorageError

logger = logging.getLogger(__name__)


def json_serialize_fallback(obj: Any) -> Any:
    """
    JSON serialization fallback for non-standard types.

    Args:
        obj: Object to serialize

    Returns:
        Serializable representation of the object

    Raises:
        TypeError: If object is not serializable
    """
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def _key_name(key: Any) -> str:
    """Accept plain strings as well as StorageKey members."""
    return str(getattr(key, 'value', key))


class LocalStore:
    """
    SQLite-based key-value store.

    This class provides:
    - get/set of JSON values under string keys
    - Atomic read-modify-write through update()
    - Thread-safe operations
    - In-memory mode for tests (":memory:")

    Storage failures raise StorageError and are never swallowed, so a caller
    always knows when a change was not saved.
    """

    DEFAULT_DB_PATH = "snapos.db"

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the local store.

        Args:
            db_path: Path to the SQLite database file. If None, uses default.
                     Use ":memory:" for in-memory database (useful for testing).
        """
        self.db_path = str(db_path or self.DEFAULT_DB_PATH)
        self._lock = threading.RLock()
        self._is_memory = self.db_path == ":memory:"
        self._shared_conn: Optional[sqlite3.Connection] = None
        if not self._is_memory:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self) -> None:
        """Initialize the SQLite database schema."""
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        # For in-memory databases, reuse the same connection
        if self._is_memory:
            if self._shared_conn is None:
                self._shared_conn = sqlite3.connect(":memory:", check_same_thread=False)
                self._shared_conn.row_factory = sqlite3.Row
            return self._shared_conn

        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run a block in one committed transaction, translating SQLite errors."""
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open local store {self.db_path}: {e}") from e

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Local store operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            if not self._is_memory:
                conn.close()

    @staticmethod
    def _encode(key: str, value: Any) -> str:
        try:
            return json.dumps(value, default=json_serialize_fallback)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize value for {key}: {e}") from e

    @staticmethod
    def _read(conn: sqlite3.Connection, key: str, default: Any) -> Any:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row['value'])
        except ValueError as e:
            raise StorageError(f"Corrupt value stored under {key}: {e}") from e

    @staticmethod
    def _write(conn: sqlite3.Connection, key: str, data: str) -> None:
        conn.execute(
            """
            INSERT OR REPLACE INTO kv (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, data, datetime.now(timezone.utc).isoformat())
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read the value stored under a key.

        Args:
            key: Storage key
            default: Value returned when nothing is stored under the key

        Returns:
            The deserialized value, or default
        """
        key = _key_name(key)
        with self._lock:
            with self._transaction() as conn:
                return self._read(conn, key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Storage key
            value: Any JSON-serializable value

        Raises:
            StorageError: If the value could not be persisted
        """
        key = _key_name(key)
        data = self._encode(key, value)
        with self._lock:
            with self._transaction() as conn:
                self._write(conn, key, data)

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """
        Atomically read, transform and write back the value under a key.

        The write lock is taken before the read, so another process sharing
        the database file cannot interleave its own update.

        Args:
            key: Storage key
            fn: Function receiving the current value (or default) and returning
                the new value
            default: Value passed to fn when nothing is stored yet

        Returns:
            The new value as written
        """
        key = _key_name(key)
        with self._lock:
            with self._transaction() as conn:
                conn.execute("BEGIN IMMEDIATE")
                new_value = fn(self._read(conn, key, default))
                self._write(conn, key, self._encode(key, new_value))
                return new_value

    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if a value was removed
        """
        key = _key_name(key)
        with self._lock:
            with self._transaction() as conn:
                cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                return cursor.rowcount > 0

    def keys(self) -> List[str]:
        """Get all stored keys in sorted order."""
        with self._lock:
            with self._transaction() as conn:
                rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
                return [row['key'] for row in rows]

    def clear(self) -> int:
        """
        Remove every stored value.

        Returns:
            Number of keys deleted
        """
        with self._lock:
            with self._transaction() as conn:
                cursor = conn.execute("DELETE FROM kv")
                logger.info(f"Cleared {cursor.rowcount} keys from local store")
                return cursor.rowcount

    def close(self) -> None:
        """Close the store and any open connections."""
        with self._lock:
            if self._shared_conn is not None:
                self._shared_conn.close()
                self._shared_conn = None
