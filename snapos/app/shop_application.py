"""
Main application class for the shop data core.
"""
import logging
import signal
import threading
from typing import Callable, Optional

from snapos.app.shop_database import ShopDatabase
from snapos.config.app_config import AppConfig
from snapos.models.entities import User
from snapos.store.local_store import LocalStore
from snapos.sync.engine import SyncEngine
from snapos.sync.outbox import Outbox
from snapos.sync.scheduler import SchedulerState, SyncScheduler
from snapos.sync.settings_gate import SettingsGate
from snapos.sync.transport import HttpTransport, Transport


class ShopApplication:
    """
    Wires the data core together and owns the session lifecycle.

    This class manages:
    - The local store and the sync outbox
    - The sync engine and its background scheduler
    - Login (starts the scheduler) and logout (stops it)
    - Graceful shutdown handling
    """

    LOGIN_ACTION = "Authorized access to management system"

    def __init__(
        self,
        config: AppConfig,
        transport: Optional[Transport] = None,
        on_status_change: Optional[Callable[[SchedulerState], None]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the application.

        Args:
            config: Application configuration
            transport: Delivery mechanism, defaults to HttpTransport
            on_status_change: Callback for sync status updates
            logger: Optional logger instance
        """
        self.config = config
        self.transport = transport
        self.on_status_change = on_status_change
        self.logger = logger or logging.getLogger(__name__)

        self.store: Optional[LocalStore] = None
        self.outbox: Optional[Outbox] = None
        self.settings_gate: Optional[SettingsGate] = None
        self.engine: Optional[SyncEngine] = None
        self.scheduler: Optional[SyncScheduler] = None
        self.database: Optional[ShopDatabase] = None
        self._stop_event = threading.Event()

    def setup_store(self) -> None:
        """Open the local store and the components persisted in it."""
        self.logger.info(f"Opening local store: {self.config.store.path}")
        self.store = LocalStore(self.config.store.path)
        self.outbox = Outbox(self.store)
        self.settings_gate = SettingsGate(self.store)

    def setup_sync(self) -> None:
        """Create the sync engine and its (not yet started) scheduler."""
        self.engine = SyncEngine(
            self.outbox,
            self.settings_gate,
            transport=self.transport or HttpTransport(timeout=self.config.sync.timeout),
            compact_outbox=self.config.sync.compact_outbox
        )
        self.scheduler = SyncScheduler(
            self.engine,
            interval=self.config.sync.interval,
            on_status_change=self.on_status_change,
            logger=self.logger
        )

    def setup(self) -> ShopDatabase:
        """
        Set up every component.

        Returns:
            The data-access object handed to the shop pages
        """
        self.setup_store()
        self.setup_sync()
        self.database = ShopDatabase(
            self.store,
            self.outbox,
            self.settings_gate,
            self.scheduler,
            enqueue_unchanged=self.config.sync.enqueue_unchanged
        )
        return self.database

    def login(self, user: User) -> None:
        """Begin a session: remember the user, audit the login, start syncing."""
        self.database.set_current_user(user)
        self.database.add_audit(user.id, user.username, self.LOGIN_ACTION)
        self.scheduler.start()
        self.logger.info(f"Session started for {user.username}")

    def logout(self) -> None:
        """End the session and stop background sync."""
        self.scheduler.stop()
        self.database.set_current_user(None)
        self.logger.info("Session ended")

    def resume_session(self) -> bool:
        """
        Restart background sync for a user still signed in from a previous run.

        Returns:
            True if a session was resumed
        """
        user = self.database.get_current_user()
        if user is None:
            return False
        self.scheduler.start()
        self.logger.info(f"Resumed session for {user.username}")
        return True

    def setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, sig: int, frame) -> None:
        """
        Handle shutdown signals.

        Args:
            sig: Signal number
            frame: Current stack frame
        """
        self.logger.info("Shutdown signal received. Exiting gracefully...")
        self._stop_event.set()

    def run(self) -> None:
        """
        Run headless: set up, resume any signed-in session, and sync until a
        shutdown signal arrives.
        """
        try:
            self.setup()
            self.setup_signal_handlers()
            if not self.resume_session():
                self.logger.warning("No signed-in user, background sync is idle")
            self._stop_event.wait()
        finally:
            self.shutdown()

    def stop(self) -> None:
        """Ask run() to return."""
        self._stop_event.set()

    def shutdown(self) -> None:
        """
        Gracefully shutdown the application.

        Stops the scheduler and closes the store. Safe to call more than once.
        """
        self.logger.info("Shutting down application...")

        if self.scheduler is not None:
            self.scheduler.stop()

        if self.store is not None:
            self.store.close()

        self.logger.info("Application shutdown completed")
