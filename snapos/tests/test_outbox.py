"""
Tests for the Outbox queue.
"""
import uuid
from unittest.mock import patch

import pytest

from snapos.errors import StorageError
from snapos.models.change_record import ChangeRecord
from snapos.store.local_store import LocalStore
from snapos.sync.outbox import Outbox


class TestEnqueue:
    """Test cases for Outbox.enqueue."""

    @pytest.mark.unit
    def test_enqueue_returns_record(self, outbox):
        record = outbox.enqueue("PRODUCTS", [{"id": "p-1"}])

        assert isinstance(record, ChangeRecord)
        assert record.entity == "PRODUCTS"
        assert record.data == [{"id": "p-1"}]
        assert uuid.UUID(record.id)
        assert record.timestamp

    @pytest.mark.unit
    def test_enqueue_generates_unique_ids(self, outbox):
        ids = {outbox.enqueue("SALES", []).id for _ in range(20)}
        assert len(ids) == 20

    @pytest.mark.unit
    def test_enqueue_appends_in_order(self, outbox):
        outbox.enqueue("PRODUCTS", [1])
        outbox.enqueue("SALES", [2])
        outbox.enqueue("PRODUCTS", [3])

        pending = outbox.peek_all()
        assert [r.entity for r in pending] == ["PRODUCTS", "SALES", "PRODUCTS"]
        assert [r.data for r in pending] == [[1], [2], [3]]

    @pytest.mark.unit
    def test_enqueue_persists_under_single_key(self, memory_store, outbox):
        outbox.enqueue("USERS", [{"id": "u-1"}])

        raw = memory_store.get("sna_sync_queue")
        assert len(raw) == 1
        assert set(raw[0]) == {"id", "entity", "data", "timestamp"}

    @pytest.mark.unit
    def test_enqueue_propagates_storage_errors(self, outbox):
        with patch.object(LocalStore, 'update', side_effect=StorageError("disk full")):
            with pytest.raises(StorageError):
                outbox.enqueue("PRODUCTS", [])


class TestPeekAndCount:
    """Test cases for non-destructive reads."""

    @pytest.mark.unit
    def test_empty(self, outbox):
        assert outbox.peek_all() == []
        assert outbox.count() == 0

    @pytest.mark.unit
    def test_peek_does_not_remove(self, outbox):
        outbox.enqueue("PRODUCTS", [])
        outbox.peek_all()
        outbox.peek_all()
        assert outbox.count() == 1

    @pytest.mark.unit
    def test_peek_round_trips_records(self, outbox):
        record = outbox.enqueue("REPAIRS", [{"id": "r-1", "status": "Received"}])
        assert outbox.peek_all() == [record]

    @pytest.mark.unit
    def test_survives_reopen(self, temp_db_path):
        store = LocalStore(temp_db_path)
        Outbox(store).enqueue("SUPPLIERS", [{"id": "s-1"}])
        store.close()

        reopened = LocalStore(temp_db_path)
        assert Outbox(reopened).count() == 1
        reopened.close()


class TestClear:
    """Test cases for Outbox.clear."""

    @pytest.mark.unit
    def test_clear_all(self, outbox):
        for i in range(3):
            outbox.enqueue("PRODUCTS", [i])

        assert outbox.clear() == 3
        assert outbox.count() == 0

    @pytest.mark.unit
    def test_clear_empty(self, outbox):
        assert outbox.clear() == 0

    @pytest.mark.unit
    def test_clear_selected_ids_keeps_later_records(self, outbox):
        first = outbox.enqueue("PRODUCTS", [1])
        second = outbox.enqueue("SALES", [2])
        late = outbox.enqueue("PRODUCTS", [3])

        removed = outbox.clear([first.id, second.id])

        assert removed == 2
        assert outbox.peek_all() == [late]

    @pytest.mark.unit
    def test_clear_unknown_ids_removes_nothing(self, outbox):
        outbox.enqueue("PRODUCTS", [1])
        assert outbox.clear(["not-there"]) == 0
        assert outbox.count() == 1


class TestLatestPerEntity:
    """Test cases for outbox compaction."""

    @pytest.mark.unit
    def test_keeps_newest_snapshot_per_entity(self, outbox):
        outbox.enqueue("PRODUCTS", ["old"])
        sales = outbox.enqueue("SALES", ["s"])
        newest = outbox.enqueue("PRODUCTS", ["new"])

        assert outbox.latest_per_entity() == [sales, newest]

    @pytest.mark.unit
    def test_accepts_explicit_records(self, outbox):
        a = ChangeRecord(entity="USERS", data=[1])
        b = ChangeRecord(entity="USERS", data=[2])
        assert outbox.latest_per_entity([a, b]) == [b]

    @pytest.mark.unit
    def test_does_not_modify_queue(self, outbox):
        outbox.enqueue("PRODUCTS", [1])
        outbox.enqueue("PRODUCTS", [2])
        outbox.latest_per_entity()
        assert outbox.count() == 2
