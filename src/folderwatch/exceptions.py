"""Custom exceptions for the folderwatch package."""

from typing import Optional


class FolderWatchError(Exception):
    """Base exception for all folderwatch errors."""
    pass


class ConfigQueryError(FolderWatchError):
    """The folder configuration store could not be queried or returned garbage."""
    pass


class WatchOpenError(FolderWatchError):
    """A subscription on a watched folder could not be opened."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Not watching folder {path}: {message}")
        self.path = path
        self.message = message


class StatError(FolderWatchError):
    """Stat of a candidate file failed."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(f"Could not stat {path}: {cause}")
        self.path = path
        self.cause = cause


class StatNotFoundError(StatError):
    """The file vanished between the notification and the stat."""
    pass


class ForwardError(FolderWatchError):
    """The upload forwarder rejected a file or failed to deliver it."""
    pass


class SubscriptionError(FolderWatchError):
    """The native watch layer reported a failure on a running subscription."""
    pass
