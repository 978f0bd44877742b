"""Bootstrap orchestration for the folder watchers."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import WatchConfig
from .exceptions import ConfigQueryError, WatchOpenError
from .forwarder import UploadForwarder
from .fs_watcher import FolderWatcher
from .models import WatchedFolder
from .store import FolderStore
from .tracker import SeenFileTracker

logger = logging.getLogger(__name__)


@dataclass
class BootstrapReport:
    """
    Result of one bootstrap run.

    Attributes:
        started: Folders whose watcher is running
        failures: (path, message) for folders that could not be watched; the
            normalized path when it could be resolved, else the configured one
        config_error: Set when the store query failed and nothing started
    """
    started: List[WatchedFolder] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    config_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.config_error is None and not self.failures


class WatcherSupervisor:
    """
    Starts one FolderWatcher per active folder at bootstrap.

    Folder start-up runs in parallel and settles completely: one folder
    failing to open never cancels the others. After bootstrap the
    supervisor only keeps the running watchers around so they can be
    stopped; closed watchers are not restarted and later configuration
    changes are not picked up.
    """

    def __init__(
        self,
        store: FolderStore,
        forwarder: UploadForwarder,
        config: Optional[WatchConfig] = None,
        tracker: Optional[SeenFileTracker] = None,
    ):
        """
        Initialize the supervisor.

        Args:
            store: Folder configuration store
            forwarder: Sink receiving new files
            config: Watch configuration
            tracker: Seen-file tracker shared by all watchers
        """
        self.store = store
        self.forwarder = forwarder
        self.config = config or WatchConfig()
        self.tracker = tracker if tracker is not None else SeenFileTracker()
        self._watchers: Dict[int, FolderWatcher] = {}
        self._lock = threading.Lock()

    def _query_folders(self) -> List[WatchedFolder]:
        try:
            folders = self.store.find({"active": True})
        except ConfigQueryError:
            raise
        except Exception as e:
            raise ConfigQueryError(f"Could not query folders to watch: {e}") from e

        if not isinstance(folders, (list, tuple)):
            raise ConfigQueryError("Query for watched folders did not return a sequence")
        for folder in folders:
            if not isinstance(folder, WatchedFolder):
                raise ConfigQueryError(f"Query for watched folders returned a non-folder item: {folder!r}")
        return list(folders)

    def _start_one(self, folder: WatchedFolder) -> FolderWatcher:
        watcher = FolderWatcher(
            folder,
            self.tracker,
            self.forwarder,
            self.config,
            on_close=self._on_watcher_closed,
        )
        watcher.start()
        with self._lock:
            # Closed before we got here: on_close already ran, keep it out
            if watcher.is_alive:
                self._watchers[folder.id] = watcher
        return watcher

    def _on_watcher_closed(self, watcher: FolderWatcher) -> None:
        with self._lock:
            if self._watchers.get(watcher.watcher_id) is watcher:
                del self._watchers[watcher.watcher_id]

    def bootstrap(self) -> BootstrapReport:
        """
        Query the active folders and start watching each of them.

        Returns:
            A report of started folders and failures; never raises
        """
        report = BootstrapReport()

        try:
            folders = self._query_folders()
        except ConfigQueryError as e:
            logger.error(str(e))
            report.config_error = str(e)
            return report

        if not folders:
            logger.info("No active folders to watch")
            return report

        workers = max(1, min(self.config.max_startup_workers, len(folders)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="watch-start") as executor:
            futures = [(folder, executor.submit(self._start_one, folder)) for folder in folders]

        for folder, future in futures:
            error = future.exception()
            if error is None:
                report.started.append(folder)
                continue

            if isinstance(error, WatchOpenError):
                path, message = error.path, error.message
            else:
                path, message = str(folder.path), str(error)
            logger.error(f"Not watching folder {path}: {message}")
            report.failures.append((path, message))

        logger.info(
            f"Watching {len(report.started)} of {len(folders)} active folder(s)"
        )
        return report

    def watchers(self) -> List[FolderWatcher]:
        """Return the watchers that are still running."""
        with self._lock:
            return list(self._watchers.values())

    def get_watcher(self, folder_id: int) -> Optional[FolderWatcher]:
        with self._lock:
            return self._watchers.get(folder_id)

    def stop_all(self) -> int:
        """
        Close every running watcher.

        Returns:
            Number of watchers closed
        """
        count = 0
        for watcher in self.watchers():
            if watcher.close():
                count += 1
        return count

    def __len__(self) -> int:
        """Return the number of running watchers."""
        with self._lock:
            return len(self._watchers)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop_all()
        return False
