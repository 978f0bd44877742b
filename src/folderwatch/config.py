"""Configuration for the folderwatch package."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class WatchConfig:
    """
    Configuration options for the folder watchers.
    
    Attributes:
        db_path: SQLite database holding the watched_folders table
        upload_url: Endpoint that receives forwarded file contents
        forward_timeout_seconds: HTTP timeout for a forward (None waits forever)
        file_suffix: Filename suffix a file must carry, compared case-insensitively
        content_type: Content type sent along with forwarded files
        max_startup_workers: Upper bound on folders opened in parallel at bootstrap
        event_poll_interval: Seconds a consumer waits for an event before
            checking that its observer is still alive
    """
    db_path: Path = field(default_factory=lambda: Path("folders.db"))
    upload_url: str = "http://localhost:8001/uploads"
    forward_timeout_seconds: Optional[float] = None
    file_suffix: str = ".pdf"
    content_type: str = "application/pdf"
    max_startup_workers: int = 8
    event_poll_interval: float = 0.5

    def __post_init__(self):
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)

    def matches(self, filename: str) -> bool:
        """
        Check if a bare filename carries the watched suffix.
        
        Args:
            filename: Filename without directory component
            
        Returns:
            True if the file should be considered
        """
        if not filename:
            return False
        return filename.lower().endswith(self.file_suffix.lower())

    @classmethod
    def from_env(cls, **overrides) -> "WatchConfig":
        """
        Build a config from FOLDERWATCH_* environment variables.
        
        Explicit keyword overrides that are not None win over the environment.
        """
        values = {}
        if os.environ.get("FOLDERWATCH_DB"):
            values["db_path"] = Path(os.environ["FOLDERWATCH_DB"])
        if os.environ.get("FOLDERWATCH_UPLOAD_URL"):
            values["upload_url"] = os.environ["FOLDERWATCH_UPLOAD_URL"]
        if os.environ.get("FOLDERWATCH_FORWARD_TIMEOUT"):
            values["forward_timeout_seconds"] = float(os.environ["FOLDERWATCH_FORWARD_TIMEOUT"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
