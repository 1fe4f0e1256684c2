"""
Sync engine: one reconciliation attempt against the remote store.
"""

import logging
from typing import Optional

from snapos.models.sync_status import SyncStatus
from snapos.sync.outbox import Outbox
from snapos.sync.settings_gate import SettingsGate
from snapos.sync.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Delivers the whole outbox to the remote endpoint in one attempt.

    Delivery is all-or-nothing: on success every delivered record is removed
    from the outbox, on failure the outbox is left exactly as it was and the
    same batch is retried on the next cycle. Records are full collection
    snapshots, so a batch that reached the remote but whose acknowledgment
    was lost is safe to send again.
    """

    def __init__(
        self,
        outbox: Outbox,
        settings_gate: SettingsGate,
        transport: Optional[Transport] = None,
        compact_outbox: bool = False
    ):
        """
        Initialize the sync engine.

        Args:
            outbox: Queue of pending change records
            settings_gate: Source of the sync settings, read on every cycle
            transport: Delivery mechanism (defaults to HttpTransport)
            compact_outbox: Send only the newest record per collection. All
                            queued records are still acknowledged on success.
        """
        self.outbox = outbox
        self.settings_gate = settings_gate
        self.transport = transport or HttpTransport()
        self.compact_outbox = compact_outbox

    def perform_sync(self) -> SyncStatus:
        """
        Attempt to flush the outbox.

        Returns:
            OFFLINE if sync is disabled or no endpoint is configured,
            SYNCED if the outbox was empty or fully delivered,
            FAILED if delivery failed (outbox untouched)
        """
        settings = self.settings_gate.get()
        if not settings.sync_enabled or not settings.endpoint_url:
            logger.debug("Sync disabled or no endpoint configured")
            return SyncStatus.OFFLINE

        pending = self.outbox.peek_all()
        if not pending:
            return SyncStatus.SYNCED

        batch = self.outbox.latest_per_entity(pending) if self.compact_outbox else pending
        logger.info(f"Pushing {len(batch)} of {len(pending)} queued updates to {settings.endpoint_url}")

        try:
            delivered = self.transport.deliver(batch, settings)
        except Exception as e:
            logger.error(f"Transport raised during delivery: {e}")
            delivered = False

        if not delivered:
            logger.warning(f"Sync failed, {len(pending)} updates kept for the next cycle")
            return SyncStatus.FAILED

        self.outbox.clear(record.id for record in pending)
        logger.info(f"Sync complete, {len(pending)} updates acknowledged")
        return SyncStatus.SYNCED
