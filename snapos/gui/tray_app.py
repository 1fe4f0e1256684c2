"""
System tray sync indicator for SNA POS.

Cross-platform support for Windows, macOS and Linux with:
- Status icons (green/blue/red/grey)
- Right-click context menu with "Sync Now"
- Background sync scheduler management
"""

import os
import subprocess
import sys
import logging
from pathlib import Path
from typing import Optional

import pystray
from pystray import MenuItem, Menu

from snapos.app.shop_application import ShopApplication
from snapos.config.app_config import AppConfig
from snapos.gui.icons import Icons, STATUS_LABELS
from snapos.models.sync_status import SyncStatus
from snapos.sync.scheduler import SchedulerState
from snapos.utils.logging_setup import LOG_FILE_NAME, setup_logging


# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_MACOS = sys.platform == "darwin"


def open_path(path: Path) -> bool:
    """
    Open a file or folder with the system's default application.

    Args:
        path: Path to open

    Returns:
        True if successful, False otherwise
    """
    try:
        if IS_WINDOWS:
            os.startfile(str(path))
        elif IS_MACOS:
            subprocess.run(["open", str(path)], check=True)
        else:
            subprocess.run(["xdg-open", str(path)], check=True)
        return True
    except (OSError, subprocess.CalledProcessError):
        return False


class TrayApp:
    """
    System tray indicator of the current sync status.

    Shows the status passively: FAILED and OFFLINE never raise dialogs, they
    only change the icon until the next successful cycle.
    """

    APP_NAME = "SNA POS"

    def __init__(self, config: AppConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize the tray application.

        Args:
            config: Application configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._icon: Optional[pystray.Icon] = None
        self._app: Optional[ShopApplication] = None
        self._current_status = SyncStatus.SYNCED
        self._pending = 0

    def _on_status_change(self, state: SchedulerState) -> None:
        """
        Handle status changes from the sync scheduler.

        Args:
            state: Current scheduler state
        """
        self._current_status = state.status
        self._pending = state.pending_count

        if self._icon:
            self._icon.icon = Icons.for_status(state.status)
            tooltip = f"{self.APP_NAME} - {STATUS_LABELS[state.status]}"
            if state.pending_count > 0:
                tooltip += f" ({state.pending_count} pending)"
            self._icon.title = tooltip

    def _get_status_text(self, item) -> str:
        return f"Status: {STATUS_LABELS[self._current_status]}"

    def _get_pending_text(self, item) -> str:
        return f"  Pending updates: {self._pending}"

    def _has_pending(self, item) -> bool:
        return self._pending > 0

    def _create_menu(self) -> Menu:
        """Create the right-click context menu."""
        return Menu(
            MenuItem(self._get_status_text, None, enabled=False),
            MenuItem(self._get_pending_text, None, enabled=False, visible=self._has_pending),
            Menu.SEPARATOR,
            MenuItem("Sync Now", self._on_sync_now),
            MenuItem("View Logs", self._on_view_logs),
            MenuItem("Open Logs Folder", self._on_open_logs_folder),
            Menu.SEPARATOR,
            MenuItem("Quit" if IS_MACOS else "Exit", self._on_exit),
        )

    def _on_sync_now(self, icon, item) -> None:
        self.logger.info("Manual sync requested")
        if self._app and self._app.database:
            self._app.database.trigger_sync_now()

    def _on_view_logs(self, icon, item) -> None:
        """Open log file in default viewer."""
        log_file = Path(self.config.log_dir) / LOG_FILE_NAME
        if not log_file.exists():
            self.logger.warning(f"Log file not found: {log_file}")
        elif not open_path(log_file):
            self.logger.warning(f"Could not open log file: {log_file}")

    def _on_open_logs_folder(self, icon, item) -> None:
        log_dir = Path(self.config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        if not open_path(log_dir):
            self.logger.warning(f"Could not open logs folder: {log_dir}")

    def _on_exit(self, icon, item) -> None:
        self.logger.info("Exit requested")
        self.stop()

    def _start_app(self) -> None:
        """Set up the data core and resume the signed-in session, if any."""
        self._app = ShopApplication(
            self.config,
            on_status_change=self._on_status_change,
            logger=self.logger
        )
        self._app.setup()
        self._pending = self._app.database.pending_count()
        if not self._app.resume_session():
            self.logger.info("No signed-in user, background sync is idle")
            self._on_status_change(SchedulerState(status=SyncStatus.OFFLINE, pending_count=self._pending))

    def run(self) -> None:
        """
        Run the tray application.

        Creates the tray icon and starts the data core in the background.
        Blocks until exit.
        """
        self.logger.info(f"Starting {self.APP_NAME} tray on {sys.platform}")

        self._icon = pystray.Icon(
            name="snapos",
            icon=Icons.for_status(SyncStatus.SYNCING),
            title=f"{self.APP_NAME} - Starting...",
            menu=self._create_menu()
        )

        def setup_and_run(icon):
            icon.visible = True
            self._start_app()

        self._icon.run(setup=setup_and_run)

    def stop(self) -> None:
        """Stop the tray application and the data core."""
        self.logger.info("Stopping tray application")

        if self._app:
            self._app.shutdown()
            self._app = None

        if self._icon:
            self._icon.stop()
            self._icon = None


def main() -> None:
    """Main entry point for the tray application."""
    config = AppConfig.from_env()
    logger = setup_logging(config.log_dir)
    logger.info(f"SNA POS tray starting on {sys.platform}...")

    app = TrayApp(config, logger=logger)

    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        raise
    finally:
        app.stop()
        logger.info("SNA POS tray stopped")


if __name__ == "__main__":
    main()
