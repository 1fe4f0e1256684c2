"""
SNA POS data core.

Offline-first persistence for the shop application: every collection save is
written to the local store and queued in the sync outbox, and a background
scheduler pushes the outbox to the remote database when sync is enabled.
"""

__version__ = "1.0.0"
