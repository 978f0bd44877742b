"""Data models for the folderwatch package."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping
import time


class EventKind(Enum):
    """Classes of filesystem change notifications."""
    RENAME = "rename"  # create, delete, rename/move
    WRITE = "write"    # in-place content change


class EventOutcome(Enum):
    """What the watcher decided to do with one notification."""
    IGNORED = "ignored"
    GONE = "gone"
    STAT_ERROR = "stat_error"
    SKIPPED_EMPTY = "skipped_empty"
    FORWARDED = "forwarded"
    FORWARD_FAILED = "forward_failed"


@dataclass(frozen=True)
class WatchedFolder:
    """
    A directory configured to be monitored for new files.
    
    Attributes:
        id: Stable identity used to key the watcher's seen set
        path: Directory path as stored in the configuration store
        active: Whether the folder should be watched
    """
    id: int
    path: str
    active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WatchedFolder":
        """Create from a store row (mapping with id, path, active)."""
        return cls(
            id=int(row["id"]),
            path=str(row["path"]),
            active=bool(row["active"]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "path": self.path, "active": self.active}


@dataclass
class RawFSEvent:
    """
    One classified notification queued for a folder watcher.
    
    Attributes:
        kind: Rename-class or write-class
        filename: Bare filename, no directory component
        timestamp: Unix timestamp when the notification arrived
    """
    kind: EventKind
    filename: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class PendingForward:
    """A completed file handed to the upload forwarder exactly once."""
    path: Path
    content: bytes
    content_type: str

    def __len__(self) -> int:
        return len(self.content)
