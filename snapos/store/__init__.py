"""
Durable local storage.

- LocalStore: SQLite-backed key-value store holding JSON snapshots
- StorageKey: stable key names for every persisted value
"""

from .keys import StorageKey
from .local_store import LocalStore

__all__ = ['LocalStore', 'StorageKey']
