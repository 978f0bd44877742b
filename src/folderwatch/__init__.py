"""
Folderwatch Package

Watches a configured set of folders for newly arrived PDF files and
forwards each new file's contents to an ingestion endpoint exactly once.

Features:
- One watchdog subscription per active folder, started in parallel
- Files present before watching began are never forwarded
- Per-folder serialized event handling with in-memory deduplication
- Empty files are skipped, deleted files are forgotten
- Failures contained to one file, one folder, or bootstrap
"""

from .models import (
    EventKind,
    EventOutcome,
    WatchedFolder,
    RawFSEvent,
    PendingForward,
)

from .config import WatchConfig

from .exceptions import (
    FolderWatchError,
    ConfigQueryError,
    WatchOpenError,
    StatError,
    StatNotFoundError,
    ForwardError,
    SubscriptionError,
)

from .tracker import SeenFileTracker
from .forwarder import UploadForwarder, HttpUploadForwarder
from .store import FolderStore, SQLiteFolderStore
from .fs_watcher import FolderWatcher, FolderEventHandler, normalize_folder_path
from .supervisor import WatcherSupervisor, BootstrapReport


__all__ = [
    # Models
    "EventKind",
    "EventOutcome",
    "WatchedFolder",
    "RawFSEvent",
    "PendingForward",
    # Config
    "WatchConfig",
    # Exceptions
    "FolderWatchError",
    "ConfigQueryError",
    "WatchOpenError",
    "StatError",
    "StatNotFoundError",
    "ForwardError",
    "SubscriptionError",
    # Components
    "SeenFileTracker",
    "UploadForwarder",
    "HttpUploadForwarder",
    "FolderStore",
    "SQLiteFolderStore",
    "FolderWatcher",
    "FolderEventHandler",
    "normalize_folder_path",
    # Orchestration
    "WatcherSupervisor",
    "BootstrapReport",
]

__version__ = "0.1.0"
