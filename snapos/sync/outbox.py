"""
Durable outbox of pending change records.

The outbox is a single list persisted under one store key. Writers only ever
append; the sync engine only ever removes records it has delivered. Both are
whole-key operations performed through LocalStore.update(), so they are
atomic with respect to each other.
"""

import logging
from typing import Any, Iterable, List, Optional

from snapos.models.change_record import ChangeRecord
from snapos.store.keys import StorageKey
from snapos.store.local_store import LocalStore

logger = logging.getLogger(__name__)


class Outbox:
    """
    Append-only FIFO queue of ChangeRecords awaiting remote delivery.

    Each record carries a full collection snapshot, so re-delivering a record
    is harmless: the remote ends with the same collection state either way.
    """

    KEY = StorageKey.SYNC_QUEUE

    def __init__(self, store: LocalStore):
        self.store = store

    def enqueue(self, entity: str, data: Any) -> ChangeRecord:
        """
        Append a change record for a collection snapshot.

        Args:
            entity: Collection name, e.g. "PRODUCTS"
            data: Full snapshot of the collection

        Returns:
            The appended record

        Raises:
            StorageError: If the outbox could not be persisted
        """
        record = ChangeRecord(entity=entity, data=data)
        self.store.update(self.KEY, lambda queue: queue + [record.to_dict()], default=[])
        logger.debug(f"Queued {entity} snapshot {record.id}")
        return record

    def peek_all(self) -> List[ChangeRecord]:
        """Get every pending record, oldest first, without removing them."""
        return [ChangeRecord.from_dict(raw) for raw in self.store.get(self.KEY, [])]

    def count(self) -> int:
        """Get the number of pending records."""
        return len(self.store.get(self.KEY, []))

    def latest_per_entity(self, records: Optional[List[ChangeRecord]] = None) -> List[ChangeRecord]:
        """
        Get the newest pending record for each entity.

        Earlier snapshots of the same collection are fully superseded by the
        later one. Entities keep the queue position of their newest record.

        Args:
            records: Records to compact, defaults to the current queue
        """
        latest = {}
        for record in (self.peek_all() if records is None else records):
            latest.pop(record.entity, None)
            latest[record.entity] = record
        return list(latest.values())

    def clear(self, record_ids: Optional[Iterable[str]] = None) -> int:
        """
        Remove records from the outbox in a single operation.

        Args:
            record_ids: Ids of the records to drop. If None, the whole queue is
                        emptied. Records appended after the ids were read are
                        kept.

        Returns:
            Number of records removed
        """
        removed = 0
        ids = set(record_ids) if record_ids is not None else None

        def _drop(queue: list) -> list:
            nonlocal removed
            if ids is None:
                kept = []
            else:
                kept = [raw for raw in queue if raw.get('id') not in ids]
            removed = len(queue) - len(kept)
            return kept

        self.store.update(self.KEY, _drop, default=[])
        if removed:
            logger.debug(f"Removed {removed} records from outbox")
        return removed
