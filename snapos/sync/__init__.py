"""
Cloud synchronization module.

This module provides components for pushing local changes to the cloud:
- Outbox: durable queue of collection snapshots awaiting delivery
- SettingsGate: sync enabled flag, endpoint URL and key
- Transport/HttpTransport: one delivery attempt per call
- SyncEngine: flushes the whole outbox, all-or-nothing
- SyncScheduler: single-flight repeating sync task
"""

from .engine import SyncEngine
from .outbox import Outbox
from .scheduler import SchedulerState, SyncScheduler
from .settings_gate import SettingsGate
from .transport import HttpTransport, Transport

__all__ = [
    'HttpTransport',
    'Outbox',
    'SchedulerState',
    'SettingsGate',
    'SyncEngine',
    'SyncScheduler',
    'Transport',
]
