"""Tests for models module."""

import pytest
import sqlite3
from pathlib import Path

from src.folderwatch.models import (
    EventKind,
    EventOutcome,
    WatchedFolder,
    RawFSEvent,
    PendingForward,
)


class TestEventKind:
    """Tests for EventKind enum."""

    def test_values(self):
        assert EventKind.RENAME.value == "rename"
        assert EventKind.WRITE.value == "write"

    def test_from_value(self):
        assert EventKind("rename") == EventKind.RENAME


class TestEventOutcome:
    """Tests for EventOutcome enum."""

    def test_all_outcomes(self):
        assert {o.value for o in EventOutcome} == {
            "ignored", "gone", "stat_error", "skipped_empty", "forwarded", "forward_failed",
        }


class TestWatchedFolder:
    """Tests for WatchedFolder dataclass."""

    def test_create(self):
        folder = WatchedFolder(id=1, path="/data/in", active=True)
        assert folder.id == 1
        assert folder.path == "/data/in"
        assert folder.active is True

    def test_is_frozen(self):
        folder = WatchedFolder(id=1, path="/data/in")
        with pytest.raises(AttributeError):
            folder.path = "/elsewhere"

    def test_from_row_dict(self):
        folder = WatchedFolder.from_row({"id": "7", "path": "/data/in", "active": 1})
        assert folder == WatchedFolder(id=7, path="/data/in", active=True)

    def test_from_row_sqlite(self):
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        row = conn.execute("SELECT 3 AS id, '/x' AS path, 0 AS active").fetchone()
        conn.close()

        folder = WatchedFolder.from_row(row)
        assert folder == WatchedFolder(id=3, path="/x", active=False)

    def test_to_dict(self):
        folder = WatchedFolder(id=2, path="/data/in", active=False)
        assert folder.to_dict() == {"id": 2, "path": "/data/in", "active": False}


class TestRawFSEvent:
    """Tests for RawFSEvent dataclass."""

    def test_timestamp_default(self):
        event = RawFSEvent(kind=EventKind.RENAME, filename="a.pdf")
        assert event.timestamp > 0


class TestPendingForward:
    """Tests for PendingForward dataclass."""

    def test_len_is_content_size(self):
        pending = PendingForward(Path("/data/in/a.pdf"), b"%PDF-1.4", "application/pdf")
        assert len(pending) == 8
