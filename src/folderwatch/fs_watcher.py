"""Per-folder watcher using the watchdog library."""

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from .config import WatchConfig
from .exceptions import (
    StatError,
    StatNotFoundError,
    SubscriptionError,
    WatchOpenError,
)
from .forwarder import UploadForwarder
from .models import EventKind, EventOutcome, PendingForward, RawFSEvent, WatchedFolder
from .tracker import SeenFileTracker

logger = logging.getLogger(__name__)

# Queue markers for the consumer thread
_STOP = object()
_CLOSE = object()


def normalize_folder_path(path: Union[str, Path]) -> str:
    """
    Resolve a folder path to absolute form ending with the path separator.

    Args:
        path: Path as configured

    Returns:
        Absolute directory path with a trailing os.sep
    """
    normalized = str(Path(os.path.expanduser(str(path))).resolve())
    if not normalized.endswith(os.sep):
        normalized += os.sep
    return normalized


class FolderEventHandler(FileSystemEventHandler):
    """Handler that reduces watchdog events to rename-class and write-class notifications."""

    def __init__(
        self,
        callback: Callable[[EventKind, str], None],
        root: Path,
        on_error: Optional[Callable[[SubscriptionError], None]] = None,
    ):
        super().__init__()
        self.callback = callback
        self.root = root
        self.on_error = on_error

    def _emit(self, kind: EventKind, path: str) -> None:
        self.callback(kind, Path(os.fsdecode(path)).name)

    def _in_root(self, path: str) -> bool:
        return Path(os.fsdecode(path)).parent == self.root

    def on_created(self, event):
        if not event.is_directory:
            self._emit(EventKind.RENAME, event.src_path)

    def on_deleted(self, event):
        if event.is_directory:
            if Path(os.fsdecode(event.src_path)) == self.root and self.on_error:
                self.on_error(SubscriptionError(f"Watched folder was removed: {self.root}"))
            return
        self._emit(EventKind.RENAME, event.src_path)

    def on_moved(self, event):
        if event.is_directory:
            return
        # Both names changed: the old one disappeared, the new one appeared
        if self._in_root(event.src_path):
            self._emit(EventKind.RENAME, event.src_path)
        if self._in_root(event.dest_path):
            self._emit(EventKind.RENAME, event.dest_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._emit(EventKind.WRITE, event.src_path)

    def on_closed(self, event):
        if not event.is_directory:
            self._emit(EventKind.WRITE, event.src_path)


class FolderWatcher:
    """
    Watches one folder and forwards each newly arrived matching file once.

    A watchdog observer feeds classified notifications into a queue; a
    dedicated consumer thread handles them one at a time, so all seen-set
    decisions for this folder are serialized. Files present when watching
    starts are recorded as seen and never forwarded.
    """

    def __init__(
        self,
        folder: WatchedFolder,
        tracker: SeenFileTracker,
        forwarder: UploadForwarder,
        config: Optional[WatchConfig] = None,
        on_close: Optional[Callable[["FolderWatcher"], None]] = None,
    ):
        """
        Initialize the watcher.

        Args:
            folder: The configured folder to watch
            tracker: Shared seen-file tracker, keyed by folder id
            forwarder: Sink receiving new files
            config: Watch configuration
            on_close: Called once after the watcher has closed
        """
        self.folder = folder
        self.tracker = tracker
        self.forwarder = forwarder
        self.config = config or WatchConfig()
        try:
            self.path = normalize_folder_path(folder.path)
        except (ValueError, OSError) as e:
            raise WatchOpenError(str(folder.path), str(e)) from e
        self._root = Path(self.path)
        self._on_close = on_close

        self._observer: Optional[Observer] = None
        self._consumer: Optional[threading.Thread] = None
        self._events: "queue.Queue" = queue.Queue()
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._started = False
        self._closed = False

    @property
    def watcher_id(self) -> int:
        return self.folder.id

    @property
    def is_alive(self) -> bool:
        """True between a successful start() and close()."""
        return self._started and not self._closed

    def start(self) -> None:
        """
        Open the subscription, seed the seen set and start consuming events.

        Raises:
            WatchOpenError: If the folder cannot be watched
        """
        with self._lock:
            if self._started or self._closed:
                raise WatchOpenError(self.path, "watcher was already started or closed")

        try:
            exists = self._root.exists()
            is_dir = exists and self._root.is_dir()
        except OSError as e:
            raise WatchOpenError(self.path, e.strerror or str(e)) from e
        if not exists:
            raise WatchOpenError(self.path, "no such directory")
        if not is_dir:
            raise WatchOpenError(self.path, "not a directory")

        observer = Observer()
        handler = FolderEventHandler(self._enqueue, self._root, self._on_subscription_error)
        try:
            observer.schedule(handler, str(self._root), recursive=False)
            observer.start()
        except OSError as e:
            observer.stop()
            raise WatchOpenError(self.path, e.strerror or str(e)) from e

        try:
            with os.scandir(self._root) as entries:
                existing = [
                    entry.name
                    for entry in entries
                    if self.config.matches(entry.name) and entry.is_file()
                ]
        except OSError as e:
            observer.stop()
            observer.join(timeout=5.0)
            raise WatchOpenError(self.path, e.strerror or str(e)) from e

        self.tracker.initialize(self.watcher_id, existing)
        self._observer = observer

        self._consumer = threading.Thread(
            target=self._consume_loop,
            name=f"FolderWatcher-{self.watcher_id}",
            daemon=True,
        )
        self._consumer.start()
        self._started = True
        logger.info(f"Started watching folder {self.path} ({len(existing)} existing file(s))")

    def _enqueue(self, kind: EventKind, filename: str) -> None:
        if self._closed:
            return
        self._events.put(RawFSEvent(kind=kind, filename=filename))

    def _on_subscription_error(self, error: SubscriptionError) -> None:
        """Runs on the observer thread; the consumer performs the close."""
        logger.error(f"Watch error on {self.path}: {error}")
        self._events.put(_CLOSE)

    def _consume_loop(self) -> None:
        """Worker loop that handles queued notifications one at a time."""
        logger.debug(f"Consumer for {self.path} started")

        while not self._stop_event.is_set():
            try:
                item = self._events.get(timeout=self.config.event_poll_interval)
            except queue.Empty:
                if self._observer is not None and not self._observer.is_alive() and not self._closed:
                    logger.error(f"Watch error on {self.path}: {SubscriptionError('observer stopped unexpectedly')}")
                    self.close()
                continue

            if item is _STOP:
                break
            if item is _CLOSE:
                self.close()
                break

            try:
                self.handle_event(item.kind, item.filename)
            except Exception as e:
                logger.error(f"Unexpected error handling {item.filename} in {self.path}: {e}")

    def _stat(self, file_path: Path) -> os.stat_result:
        try:
            return os.stat(file_path)
        except FileNotFoundError as e:
            raise StatNotFoundError(str(file_path), e) from e
        except OSError as e:
            raise StatError(str(file_path), e) from e

    def handle_event(self, kind: EventKind, filename: str) -> EventOutcome:
        """
        Decide what to do with one notification and carry it out.

        Args:
            kind: Rename-class or write-class
            filename: Bare filename reported by the watch layer

        Returns:
            The outcome of the decision
        """
        if not self.config.matches(filename):
            return EventOutcome.IGNORED

        # In-place writes never trigger a forward
        if kind is not EventKind.RENAME:
            return EventOutcome.IGNORED

        file_path = self._root / filename

        try:
            stats = self._stat(file_path)
        except StatNotFoundError:
            # Deleted before we got here; a later recreation counts as new
            if self.tracker.mark_gone(self.watcher_id, filename):
                logger.debug(f"File {file_path} is gone")
            return EventOutcome.GONE
        except StatError as e:
            logger.error(str(e))
            return EventOutcome.STAT_ERROR

        # Seen before the forward so duplicate notifications cannot forward twice
        if not self.tracker.mark_seen(self.watcher_id, filename):
            return EventOutcome.IGNORED

        if stats.st_size == 0:
            logger.warning(f"The file {file_path} is empty, will not forward it")
            return EventOutcome.SKIPPED_EMPTY

        try:
            pending = PendingForward(
                path=file_path,
                content=file_path.read_bytes(),
                content_type=self.config.content_type,
            )
        except OSError as e:
            logger.error(f"Could not read {file_path}: {e}")
            return EventOutcome.FORWARD_FAILED

        try:
            self.forwarder.create(pending.content, pending.content_type, filename=filename)
        except Exception as e:
            logger.error(f"Could not forward {file_path}: {e}")
            return EventOutcome.FORWARD_FAILED

        logger.info(f"Forwarded file {file_path} ({len(pending)} bytes)")
        return EventOutcome.FORWARDED

    def close(self) -> bool:
        """
        Stop watching and drop the folder's seen set.

        Returns:
            True if this call closed the watcher, False if it was already closed
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True

        self._stop_event.set()
        current = threading.current_thread()

        if self._observer is not None:
            self._observer.stop()
            if current is not self._observer:
                self._observer.join(timeout=5.0)

        self._events.put(_STOP)
        if self._consumer is not None and current is not self._consumer and self._consumer.is_alive():
            self._consumer.join(timeout=5.0)

        self.tracker.dispose(self.watcher_id)
        logger.info(f"Stopped watching folder {self.path}")

        if self._on_close:
            self._on_close(self)
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
