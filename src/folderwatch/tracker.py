"""Thread-safe bookkeeping of filenames already seen per watcher."""

import threading
from typing import Dict, FrozenSet, Iterable, List, Set


class _Entry:
    """Seen set for one watcher, guarded by its own lock."""

    __slots__ = ("names", "lock")

    def __init__(self, names: Iterable[str]):
        self.names: Set[str] = set(names)
        self.lock = threading.Lock()


class SeenFileTracker:
    """
    Per-watcher sets of filenames that are known to exist and need no forward.
    
    Entries are keyed by the watched folder id. Every operation on an
    unknown id is a no-op (or returns False); nothing here raises.
    Operations for different ids never share a lock beyond the short
    registry lookup.
    """

    def __init__(self):
        """Initialize an empty tracker."""
        self._entries: Dict[int, _Entry] = {}
        self._lock = threading.Lock()

    def _get(self, watcher_id: int):
        with self._lock:
            return self._entries.get(watcher_id)

    def initialize(self, watcher_id: int, filenames: Iterable[str]) -> None:
        """
        Set the starting seen set for a watcher.
        
        Args:
            watcher_id: Id of the watched folder
            filenames: Matching filenames present when watching began
        """
        entry = _Entry(filenames)
        with self._lock:
            self._entries[watcher_id] = entry

    def has(self, watcher_id: int, filename: str) -> bool:
        """Return True if the filename is in the watcher's seen set."""
        entry = self._get(watcher_id)
        if entry is None:
            return False
        with entry.lock:
            return filename in entry.names

    def mark_seen(self, watcher_id: int, filename: str) -> bool:
        """
        Add a filename to the watcher's seen set.
        
        Returns:
            True if the filename was newly added, False if it was already
            present or the watcher is unknown
        """
        entry = self._get(watcher_id)
        if entry is None:
            return False
        with entry.lock:
            if filename in entry.names:
                return False
            entry.names.add(filename)
            return True

    def mark_gone(self, watcher_id: int, filename: str) -> bool:
        """
        Remove a filename from the watcher's seen set.
        
        Returns:
            True if the filename was present and removed
        """
        entry = self._get(watcher_id)
        if entry is None:
            return False
        with entry.lock:
            if filename in entry.names:
                entry.names.discard(filename)
                return True
            return False

    def dispose(self, watcher_id: int) -> bool:
        """
        Drop all state for a watcher.
        
        Returns:
            True if the watcher was known
        """
        with self._lock:
            return self._entries.pop(watcher_id, None) is not None

    def snapshot(self, watcher_id: int) -> FrozenSet[str]:
        """Return a copy of the watcher's seen set (empty if unknown)."""
        entry = self._get(watcher_id)
        if entry is None:
            return frozenset()
        with entry.lock:
            return frozenset(entry.names)

    def watcher_ids(self) -> List[int]:
        """Return the ids that currently have an entry."""
        with self._lock:
            return list(self._entries.keys())

    def __contains__(self, watcher_id: int) -> bool:
        with self._lock:
            return watcher_id in self._entries

    def __len__(self) -> int:
        """Return the number of tracked watchers."""
        with self._lock:
            return len(self._entries)
