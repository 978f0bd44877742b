"""
Read-only access to the watched-folder configuration.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ConfigQueryError
from .models import WatchedFolder

logger = logging.getLogger(__name__)


class FolderStore(ABC):
    """Source of watched-folder configuration."""

    @abstractmethod
    def find(self, filter: Optional[Dict[str, Any]] = None) -> List[WatchedFolder]:
        """
        Return the folders matching an equality filter.
        
        Args:
            filter: Column -> value pairs, e.g. {"active": True}
            
        Raises:
            ConfigQueryError: If the store cannot be queried
        """
        pass


class SQLiteFolderStore(FolderStore):
    """Folder configuration kept in a watched_folders table."""

    TABLE = "watched_folders"
    COLUMNS = ("id", "path", "active")

    def __init__(self, db_path: Path):
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def find(self, filter: Optional[Dict[str, Any]] = None) -> List[WatchedFolder]:
        filter = filter or {}
        unknown = [k for k in filter if k not in self.COLUMNS]
        if unknown:
            raise ConfigQueryError(f"Unknown filter column(s): {', '.join(unknown)}")

        sql = f"SELECT id, path, active FROM {self.TABLE}"
        params = []
        if filter:
            clauses = []
            for column, value in filter.items():
                clauses.append(f"{column} = ?")
                params.append(int(value) if isinstance(value, bool) else value)
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"

        if not self._db_path.exists():
            raise ConfigQueryError(f"Folder database does not exist: {self._db_path}")

        try:
            conn = self._connect()
            try:
                rows = conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise ConfigQueryError(f"Could not query {self.TABLE}: {e}") from e

        folders = [WatchedFolder.from_row(row) for row in rows]
        logger.debug(f"Folder store returned {len(folders)} folder(s) for {filter}")
        return folders
