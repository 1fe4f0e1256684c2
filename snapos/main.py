"""
SNA POS data core command line.

Inspects and drives the offline-first store and its cloud sync from a
terminal. The shop pages use ShopDatabase directly; this is for operators.

Usage:
    snapos status                         # Sync settings, queue size, remote health
    snapos configure --enable --url URL   # Change the sync settings
    snapos sync-now                       # Push the outbox once
    snapos run                            # Sync in the background until Ctrl+C
    snapos reset --yes                    # Wipe the local database
"""

import argparse
import logging
import sys
from typing import List, Optional

from snapos.app.shop_application import ShopApplication
from snapos.config.app_config import AppConfig
from snapos.models.sync_status import SyncStatus
from snapos.utils.logging_setup import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snapos", description="SNA POS data core")
    parser.add_argument("--db", help="Path to the local store (overrides SNAPOS_DB_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("status", help="Show sync settings and pending updates")

    configure = commands.add_parser("configure", help="Change the sync settings")
    toggle = configure.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_const", const=True)
    toggle.add_argument("--disable", dest="enabled", action="store_const", const=False)
    configure.add_argument("--url", help="Remote endpoint URL")
    configure.add_argument("--key", help="Remote endpoint key")

    commands.add_parser("sync-now", help="Push the outbox once")
    commands.add_parser("run", help="Sync in the background until interrupted")

    reset = commands.add_parser("reset", help="Remove every locally stored value")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


def _status(app: ShopApplication) -> int:
    settings = app.settings_gate.get()
    print(f"Sync enabled:    {settings.sync_enabled}")
    print(f"Endpoint:        {settings.endpoint_url or '(not configured)'}")
    print(f"Pending updates: {app.database.pending_count()}")
    if settings.endpoint_url:
        reachable = app.engine.transport.check_health(settings)
        print(f"Remote reachable: {reachable}")
    return 0


def _configure(app: ShopApplication, args: argparse.Namespace) -> int:
    settings = app.settings_gate.get()
    if args.enabled is not None:
        settings.sync_enabled = args.enabled
    if args.url is not None:
        settings.endpoint_url = args.url
    if args.key is not None:
        settings.endpoint_key = args.key
    app.settings_gate.save(settings)
    print("Sync settings saved")
    return 0


def _sync_now(app: ShopApplication) -> int:
    result = app.database.trigger_sync_now()
    print(f"{result.value} ({app.database.pending_count()} pending)")
    return 1 if result == SyncStatus.FAILED else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the command line.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    config = AppConfig.from_env()
    if args.db:
        config.store.path = args.db
    setup_logging(config.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)

    app = ShopApplication(config)
    if args.command == "run":
        app.run()
        return 0

    app.setup()
    try:
        if args.command == "status":
            return _status(app)
        if args.command == "configure":
            return _configure(app, args)
        if args.command == "sync-now":
            return _sync_now(app)
        if args.command == "reset":
            if not args.yes:
                print("Refusing to reset without --yes", file=sys.stderr)
                return 2
            app.database.reset_database()
            print("Local database reset")
            return 0
    finally:
        app.shutdown()
    return 2


if __name__ == "__main__":
    sys.exit(main())
