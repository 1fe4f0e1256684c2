"""
Tests for SyncScheduler.

This module covers:
- Status state machine
- Single-flight discipline with overlapping ticks
- Background thread lifecycle
- Status callbacks
"""
import threading
import time
from unittest.mock import Mock

import pytest

from snapos.errors import StorageError
from snapos.models.sync_status import SyncStatus
from snapos.sync.engine import SyncEngine
from snapos.sync.scheduler import SchedulerState, SyncScheduler

from conftest import FakeTransport


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestStateMachine:
    """Test cases for status transitions."""

    @pytest.mark.unit
    def test_initial_status_is_synced(self, scheduler):
        assert scheduler.status == SyncStatus.SYNCED
        assert scheduler.state == SchedulerState()

    @pytest.mark.unit
    def test_tick_reports_offline(self, scheduler):
        assert scheduler.tick() == SyncStatus.OFFLINE
        assert scheduler.status == SyncStatus.OFFLINE

    @pytest.mark.unit
    def test_tick_success(self, scheduler, outbox, sync_enabled):
        outbox.enqueue("PRODUCTS", [])

        assert scheduler.tick() == SyncStatus.SYNCED

        state = scheduler.state
        assert state.status == SyncStatus.SYNCED
        assert state.pending_count == 0
        assert state.last_attempt is not None
        assert state.last_success is not None

    @pytest.mark.unit
    def test_tick_failure_then_recovery(self, outbox, settings_gate, sync_enabled):
        engine = SyncEngine(outbox, settings_gate, transport=FakeTransport(outcomes=[False, True]))
        scheduler = SyncScheduler(engine)
        outbox.enqueue("SALES", [])

        assert scheduler.tick() == SyncStatus.FAILED
        assert scheduler.state.error_count == 1
        assert scheduler.state.pending_count == 1
        assert scheduler.state.last_error

        assert scheduler.tick() == SyncStatus.SYNCED
        assert scheduler.state.last_error is None
        assert scheduler.state.pending_count == 0

    @pytest.mark.unit
    def test_engine_exception_sets_failed(self):
        engine = Mock()
        engine.perform_sync.side_effect = StorageError("store locked")
        engine.outbox.count.return_value = 2
        scheduler = SyncScheduler(engine)

        assert scheduler.tick() == SyncStatus.FAILED
        assert scheduler.state.last_error == "store locked"
        # Not stuck in SYNCING
        assert scheduler.tick() == SyncStatus.FAILED
        assert engine.perform_sync.call_count == 2

    @pytest.mark.unit
    def test_state_is_a_snapshot(self, scheduler):
        state = scheduler.state
        state.status = SyncStatus.FAILED
        assert scheduler.status == SyncStatus.SYNCED


class TestSingleFlight:
    """At most one perform_sync() may run at a time."""

    @pytest.mark.concurrency
    def test_overlapping_ticks_deliver_once(self, outbox, settings_gate, sync_enabled):
        gate = threading.Event()
        transport = FakeTransport(gate=gate)
        scheduler = SyncScheduler(SyncEngine(outbox, settings_gate, transport=transport))
        outbox.enqueue("PRODUCTS", [{"id": "p-1"}])

        first = threading.Thread(target=scheduler.tick)
        first.start()
        assert transport.started.wait(timeout=2)
        assert scheduler.status == SyncStatus.SYNCING

        assert scheduler.tick() == SyncStatus.SYNCING
        assert scheduler.trigger_now() == SyncStatus.SYNCING

        gate.set()
        first.join(timeout=5)

        assert len(transport.calls) == 1
        assert scheduler.status == SyncStatus.SYNCED
        assert outbox.count() == 0

    @pytest.mark.concurrency
    def test_many_concurrent_triggers(self, outbox, settings_gate, sync_enabled):
        gate = threading.Event()
        transport = FakeTransport(gate=gate)
        scheduler = SyncScheduler(SyncEngine(outbox, settings_gate, transport=transport))
        outbox.enqueue("PRODUCTS", [])

        threads = [threading.Thread(target=scheduler.trigger_now) for _ in range(8)]
        for t in threads:
            t.start()
        assert transport.started.wait(timeout=2)
        gate.set()
        for t in threads:
            t.join(timeout=5)

        assert len(transport.calls) == 1


class TestLifecycle:
    """Test cases for start/stop of the repeating task."""

    @pytest.mark.concurrency
    def test_start_runs_ticks(self, outbox, settings_gate, sync_enabled, fake_transport):
        scheduler = SyncScheduler(SyncEngine(outbox, settings_gate, transport=fake_transport), interval=0.02)
        outbox.enqueue("PRODUCTS", [])

        assert scheduler.start() is True
        try:
            assert _wait_for(lambda: outbox.count() == 0)
            assert scheduler.is_running
        finally:
            assert scheduler.stop() is True
        assert not scheduler.is_running

    @pytest.mark.unit
    def test_start_twice(self, scheduler):
        assert scheduler.start() is True
        assert scheduler.start() is False
        scheduler.stop()

    @pytest.mark.unit
    def test_stop_when_not_running(self, scheduler):
        assert scheduler.stop() is True

    @pytest.mark.concurrency
    def test_restart_after_stop(self, scheduler):
        scheduler.start()
        scheduler.stop()
        assert scheduler.start() is True
        assert scheduler.is_running
        scheduler.stop()

    @pytest.mark.concurrency
    def test_first_tick_waits_for_interval(self):
        engine = Mock()
        engine.perform_sync.return_value = SyncStatus.OFFLINE
        engine.outbox.count.return_value = 0
        scheduler = SyncScheduler(engine, interval=10)

        scheduler.start()
        time.sleep(0.1)
        scheduler.stop()

        engine.perform_sync.assert_not_called()

    @pytest.mark.concurrency
    def test_loop_survives_errors(self):
        engine = Mock()
        engine.perform_sync.side_effect = RuntimeError("boom")
        engine.outbox.count.return_value = 0
        scheduler = SyncScheduler(engine, interval=0.01)

        scheduler.start()
        try:
            assert _wait_for(lambda: engine.perform_sync.call_count >= 3)
        finally:
            scheduler.stop()


class TestCallbacks:
    """Test cases for on_status_change."""

    @pytest.mark.unit
    def test_callback_sees_syncing_then_result(self, engine, outbox, sync_enabled):
        seen = []
        scheduler = SyncScheduler(engine, on_status_change=lambda state: seen.append(state.status))
        outbox.enqueue("USERS", [])

        scheduler.tick()

        assert seen == [SyncStatus.SYNCING, SyncStatus.SYNCED]

    @pytest.mark.unit
    def test_callback_errors_are_contained(self, engine):
        scheduler = SyncScheduler(engine, on_status_change=Mock(side_effect=RuntimeError("ui gone")))
        assert scheduler.tick() == SyncStatus.OFFLINE

    @pytest.mark.unit
    def test_skipped_tick_does_not_notify(self, engine):
        callback = Mock()
        scheduler = SyncScheduler(engine, on_status_change=callback)
        scheduler._state.status = SyncStatus.SYNCING

        assert scheduler.tick() == SyncStatus.SYNCING
        callback.assert_not_called()
