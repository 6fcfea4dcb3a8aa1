"""Custom exceptions for the polling watcher package."""


class WatcherError(Exception):
    """Base exception for all watcher errors."""
    pass


class DurationTooShortError(WatcherError):
    """Poll interval is below the minimum resolution."""
    pass


class WatcherAlreadyRunningError(WatcherError):
    """Watcher poll loop is already running."""
    pass


class WatcherClosedError(WatcherError):
    """Watcher has been closed and cannot be started again."""
    pass


class WatchedPathDeletedError(WatcherError):
    """A registered watch root no longer exists."""

    def __init__(self, path: str):
        super().__init__(f"watched file or folder deleted: {path}")
        self.path = path


class ChannelClosedError(WatcherError):
    """Receive attempted on a channel that has been closed."""
    pass
