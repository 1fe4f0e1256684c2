"""
Background sync scheduler.

Runs the sync engine on a fixed interval for the lifetime of a signed-in
session, with status callbacks for the status tray and pages.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from snapos.models.sync_status import SyncStatus
from snapos.sync.engine import SyncEngine


@dataclass
class SchedulerState:
    """Current state of the sync scheduler."""
    status: SyncStatus = SyncStatus.SYNCED
    last_attempt: Optional[datetime] = None
    last_success: Optional[datetime] = None
    pending_count: int = 0
    error_count: int = 0
    last_error: Optional[str] = None


class SyncScheduler:
    """
    Cancellable repeating sync task.

    At most one perform_sync() runs at a time: a tick that finds the status
    still SYNCING is skipped. The check and the switch to SYNCING happen
    under one lock, so the timer thread and a manual trigger_now() cannot
    both start a sync.
    """

    DEFAULT_INTERVAL = 15.0  # seconds

    def __init__(
        self,
        engine: SyncEngine,
        interval: float = DEFAULT_INTERVAL,
        on_status_change: Optional[Callable[[SchedulerState], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the scheduler.

        Args:
            engine: Sync engine to invoke on each tick
            interval: Seconds between ticks
            on_status_change: Callback for status updates
            logger: Optional logger instance
        """
        self.engine = engine
        self.interval = interval
        self.on_status_change = on_status_change
        self.logger = logger or logging.getLogger(__name__)

        self._state = SchedulerState()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        """Get a snapshot of the scheduler state."""
        with self._lock:
            return replace(self._state)

    @property
    def status(self) -> SyncStatus:
        with self._lock:
            return self._state.status

    @property
    def is_running(self) -> bool:
        """Check if the repeating task is running."""
        return self._thread is not None and self._thread.is_alive()

    def _notify(self) -> None:
        if not self.on_status_change:
            return
        try:
            self.on_status_change(self.state)
        except Exception as e:
            self.logger.error(f"Error in status callback: {e}")

    def _pending_count(self) -> int:
        try:
            return self.engine.outbox.count()
        except Exception as e:
            self.logger.error(f"Could not read outbox size: {e}")
            return self._state.pending_count

    def tick(self) -> SyncStatus:
        """
        Run one sync cycle unless one is already in flight.

        Returns:
            The cycle's result, or SYNCING if the tick was skipped
        """
        with self._lock:
            if self._state.status == SyncStatus.SYNCING:
                self.logger.debug("Sync already in flight, skipping tick")
                return SyncStatus.SYNCING
            self._state.status = SyncStatus.SYNCING
            self._state.last_attempt = datetime.now()
        self._notify()

        error = None
        try:
            result = self.engine.perform_sync()
        except Exception as e:
            self.logger.exception(f"Sync cycle error: {e}")
            result = SyncStatus.FAILED
            error = str(e)

        pending = self._pending_count()
        with self._lock:
            self._state.status = result
            self._state.pending_count = pending
            if result == SyncStatus.SYNCED:
                self._state.last_success = datetime.now()
                self._state.last_error = None
            elif result == SyncStatus.FAILED:
                self._state.error_count += 1
                self._state.last_error = error or "Delivery failed"

        self.logger.info(f"Sync status: {result.value} ({pending} pending)")
        self._notify()
        return result

    def trigger_now(self) -> SyncStatus:
        """Run a sync cycle immediately on the calling thread, respecting single-flight."""
        return self.tick()

    def _run_loop(self) -> None:
        """Main loop running in the background thread."""
        while not self._stop_event.wait(self.interval):
            try:
                self.tick()
            except Exception as e:
                self.logger.error(f"Error in sync loop: {e}")

    def start(self) -> bool:
        """
        Start the repeating sync task in a background thread.

        Returns:
            True if started, False if already running
        """
        if self.is_running:
            self.logger.warning("Sync scheduler is already running")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="SyncScheduler",
            daemon=True
        )
        self._thread.start()
        self.logger.info(f"Sync scheduler started, interval {self.interval}s")
        return True

    def stop(self, timeout: float = 10.0) -> bool:
        """
        Stop the repeating task. An in-flight sync is not cancelled.

        Args:
            timeout: Maximum time to wait for the thread to finish

        Returns:
            True if stopped, False if the thread did not finish in time
        """
        if not self.is_running:
            return True

        self._stop_event.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            self.logger.warning("Sync scheduler did not stop within timeout")
            return False

        self._thread = None
        self.logger.info("Sync scheduler stopped")
        return True
