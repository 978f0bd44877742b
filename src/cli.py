#!/usr/bin/env python3
"""
CLI for running the folder watchers.

Usage:
    python -m src.cli watch --db folders.db --upload-url http://localhost:8001/uploads
    python -m src.cli list-folders --db folders.db
"""

import argparse
import logging
import signal
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()

from src.folderwatch import (
    ConfigQueryError,
    HttpUploadForwarder,
    SQLiteFolderStore,
    WatchConfig,
    WatcherSupervisor,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cli")


class GracefulShutdown:
    """Handle graceful shutdown on SIGINT/SIGTERM."""

    def __init__(self):
        self.should_exit = False
        signal.signal(signal.SIGINT, self._handler)
        signal.signal(signal.SIGTERM, self._handler)

    def _handler(self, signum, frame):
        logger.info("Received shutdown signal, stopping...")
        self.should_exit = True


def _build_config(args) -> WatchConfig:
    return WatchConfig.from_env(
        db_path=Path(args.db).resolve() if args.db else None,
        upload_url=getattr(args, "upload_url", None),
        forward_timeout_seconds=getattr(args, "forward_timeout", None),
    )


def cmd_watch(args):
    """Start watching every active folder and forward new files."""
    config = _build_config(args)
    logger.info("Starting folder watchers...")
    logger.info(f"Folder database: {config.db_path}")
    logger.info(f"Forwarding to: {config.upload_url}")

    # Suppress httpx logging
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    shutdown = GracefulShutdown()
    store = SQLiteFolderStore(config.db_path)

    with HttpUploadForwarder(config.upload_url, timeout=config.forward_timeout_seconds) as forwarder:
        with WatcherSupervisor(store, forwarder, config) as supervisor:
            report = supervisor.bootstrap()

            if report.config_error:
                logger.error("No folders are watched; fix the folder configuration and restart")
            for path, message in report.failures:
                logger.warning(f"  skipped {path}: {message}")

            logger.info(f"Watching {len(report.started)} folder(s)")
            for folder in report.started:
                logger.info(f"  - [{folder.id}] {folder.path}")
            logger.info("Press Ctrl+C to stop")

            while not shutdown.should_exit:
                time.sleep(1)

    logger.info("Folder watchers stopped")


def cmd_list_folders(args):
    """List the active folders the store returns."""
    config = _build_config(args)
    store = SQLiteFolderStore(config.db_path)

    try:
        folders = store.find({"active": True})
    except ConfigQueryError as e:
        logger.error(str(e))
        sys.exit(1)

    print(f"\nActive folders ({len(folders)}):")
    if folders:
        for folder in folders:
            print(f"  [{folder.id}] {folder.path}")
    else:
        print("  (none)")


def main():
    parser = argparse.ArgumentParser(
        description="Watch folders for new PDF files and forward them for ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Watch all active folders from the folder database
  python -m src.cli watch --db folders.db --upload-url http://localhost:8001/uploads

  # Show which folders would be watched
  python -m src.cli list-folders --db folders.db

Environment:
  FOLDERWATCH_DB, FOLDERWATCH_UPLOAD_URL, FOLDERWATCH_FORWARD_TIMEOUT
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Watch active folders and forward new files")
    watch_parser.add_argument("--db", default=None, help="Folder database path (or FOLDERWATCH_DB)")
    watch_parser.add_argument("--upload-url", default=None, help="Upload endpoint (or FOLDERWATCH_UPLOAD_URL)")
    watch_parser.add_argument("--forward-timeout", type=float, default=None,
                              help="Upload timeout in seconds (default: no timeout)")
    watch_parser.set_defaults(func=cmd_watch)

    # List folders command
    list_parser = subparsers.add_parser("list-folders", help="List active watched folders")
    list_parser.add_argument("--db", default=None, help="Folder database path (or FOLDERWATCH_DB)")
    list_parser.set_defaults(func=cmd_list_folders)

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
