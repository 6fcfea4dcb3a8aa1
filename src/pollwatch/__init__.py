"""
Polling File Watcher Package

A file watcher that periodically snapshots watched files and directories,
diffs each snapshot against the previous one and delivers change events
through unbuffered channels.

Features:
- Works where native change notification is unavailable (network shares)
- Change events: CREATE, WRITE, REMOVE, RENAME, MOVE, CHMOD
- Rename/move detection by metadata match of removed and created entries
- Recursive and non-recursive watch roots, ignore lists, hidden-file filter
- Per-cycle event cap and operation filtering
- Live reconfiguration while the poll loop runs
- Bridge to watchdog event handlers
"""

from .models import (
    Op,
    FileInfo,
    Event,
    Snapshot,
)

from .config import WatcherConfig

from .exceptions import (
    WatcherError,
    DurationTooShortError,
    WatcherAlreadyRunningError,
    WatcherClosedError,
    WatchedPathDeletedError,
    ChannelClosedError,
)

from .channel import Handoff
from .lister import PathLister, regex_filter_hook, is_hidden
from .snapshot_store import SnapshotStore
from .diff import diff
from .dispatcher import Dispatcher, DispatchPolicy
from .watcher import Watcher, MIN_INTERVAL
from .bridge import to_watchdog_event, dispatch_to_handler


__all__ = [
    # Models
    "Op",
    "FileInfo",
    "Event",
    "Snapshot",
    # Config
    "WatcherConfig",
    # Exceptions
    "WatcherError",
    "DurationTooShortError",
    "WatcherAlreadyRunningError",
    "WatcherClosedError",
    "WatchedPathDeletedError",
    "ChannelClosedError",
    # Components
    "Handoff",
    "PathLister",
    "regex_filter_hook",
    "is_hidden",
    "SnapshotStore",
    "diff",
    "Dispatcher",
    "DispatchPolicy",
    # Watcher
    "Watcher",
    "MIN_INTERVAL",
    # watchdog bridge
    "to_watchdog_event",
    "dispatch_to_handler",
]

__version__ = "0.1.0"
