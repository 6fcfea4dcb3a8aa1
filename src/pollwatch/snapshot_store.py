"""Thread-safe store of watch roots, ignored paths and the tracked snapshot."""

import os
import threading
from typing import Callable, Dict, FrozenSet, List, Set

from .models import Snapshot

SnapshotChange = Callable[[Snapshot], None]


def is_under(path: str, root: str) -> bool:
    """
    Check if a path is the root itself or lies below it.

    Matching is per path component: "/a/b" covers "/a/b/c" but not "/a/bc".
    """
    if path == root:
        return True
    return path.startswith(root.rstrip(os.sep) + os.sep)


def _drop_one_level(path: str, files: Snapshot) -> None:
    info = files.pop(path, None)
    if info is None or not info.is_dir:
        return
    for child in [p for p in files if os.path.dirname(p) == path]:
        del files[child]


def _drop_tree(path: str, files: Snapshot) -> None:
    for tracked in [p for p in files if is_under(p, path)]:
        del files[tracked]


class SnapshotStore:
    """
    Authoritative state shared between configuration calls and the poll loop.

    Holds the registry of watch roots (path -> recursive flag), the set of
    ignored paths and the last committed snapshot. Every access goes through
    ``lock``, which the watcher also holds while reading or changing its
    dispatch policy.

    A poll cycle is bracketed by begin_cycle() and commit(). Changes made to
    the tracked snapshot in between are applied immediately and replayed on
    top of the committed snapshot, so they survive the commit.
    """

    def __init__(self):
        """Initialize an empty store."""
        self.lock = threading.RLock()
        self._files: Snapshot = {}
        self._roots: Dict[str, bool] = {}
        self._ignored: Set[str] = set()
        self._in_cycle = False
        self._journal: List[SnapshotChange] = []

    def _apply(self, change: SnapshotChange) -> None:
        with self.lock:
            change(self._files)
            if self._in_cycle:
                self._journal.append(change)

    def add_root(self, path: str, listing: Snapshot, recursive: bool = False) -> None:
        """
        Register a root and start tracking its current listing.

        Re-adding a root overwrites its recursive flag.

        Args:
            path: Absolute root path
            listing: Snapshot of the root as produced by PathLister
            recursive: Whether the root is walked recursively
        """
        entries = dict(listing)
        with self.lock:
            self._roots[path] = recursive
            self._apply(lambda files: files.update(entries))

    def remove_root(self, path: str) -> bool:
        """
        Deregister a root and drop it plus its immediate children.

        Nested descendants stay tracked.

        Args:
            path: Absolute root path

        Returns:
            True if the path was a registered root
        """
        with self.lock:
            removed = self._roots.pop(path, None) is not None
            self._apply(lambda files: _drop_one_level(path, files))
            return removed

    def remove_root_recursive(self, path: str) -> bool:
        """
        Deregister a root and every root below it, and drop every tracked
        entry below it.

        Args:
            path: Absolute root path

        Returns:
            True if the path was a registered root
        """
        with self.lock:
            removed = self._roots.pop(path, None) is not None
            for root in [r for r in self._roots if is_under(r, path)]:
                del self._roots[root]
            self._apply(lambda files: _drop_tree(path, files))
            return removed

    def forget_root(self, path: str, recursive: bool = False) -> None:
        """
        Deregister a root whose path is gone, keeping entries another root
        still covers.

        Entries under a remaining root stay tracked so the next diff reports
        them as removed.

        Args:
            path: Absolute root path
            recursive: Whether the root was walked recursively
        """
        with self.lock:
            self._roots.pop(path, None)
            if recursive:
                for root in [r for r in self._roots if is_under(r, path)]:
                    del self._roots[root]
            survivors = dict(self._roots)

            def covered(tracked: str) -> bool:
                for root, root_recursive in survivors.items():
                    if root_recursive and is_under(tracked, root):
                        return True
                    if tracked == root or os.path.dirname(tracked) == root:
                        return True
                return False

            def drop(files: Snapshot) -> None:
                if recursive:
                    doomed = [p for p in files if is_under(p, path)]
                else:
                    doomed = [p for p in files if p == path or os.path.dirname(p) == path]
                for tracked in doomed:
                    if not covered(tracked):
                        del files[tracked]

            self._apply(drop)

    def ignore(self, path: str) -> None:
        """Stop tracking a path recursively and add it to the ignore set."""
        with self.lock:
            self.remove_root_recursive(path)
            self._ignored.add(path)

    def is_ignored(self, path: str) -> bool:
        """Check if a path is ignored or lies below an ignored path."""
        with self.lock:
            return any(is_under(path, ignored) for ignored in self._ignored)

    def get_ignored(self) -> FrozenSet[str]:
        with self.lock:
            return frozenset(self._ignored)

    def get_roots(self) -> Dict[str, bool]:
        """
        Get the registered roots.

        Returns:
            Copy of the mapping of root path to recursive flag
        """
        with self.lock:
            return dict(self._roots)

    def has_root(self, path: str) -> bool:
        with self.lock:
            return path in self._roots

    def current(self) -> Snapshot:
        """
        Get the live tracked snapshot.

        Callers must hold ``lock`` while reading it and must not mutate it.
        """
        return self._files

    def copy(self) -> Snapshot:
        """Get a copy of the tracked snapshot."""
        with self.lock:
            return dict(self._files)

    def begin_cycle(self) -> None:
        """Mark the start of a listing pass."""
        with self.lock:
            self._in_cycle = True
            self._journal.clear()

    def commit(self, snapshot: Snapshot) -> None:
        """
        Replace the tracked snapshot with the one gathered this cycle.

        Changes journaled since begin_cycle() are replayed on top of it.

        Args:
            snapshot: The snapshot gathered by the poll loop
        """
        files = dict(snapshot)
        with self.lock:
            for change in self._journal:
                change(files)
            self._files = files
            self._journal.clear()
            self._in_cycle = False

    def clear(self) -> None:
        """Drop all roots and tracked entries. Ignored paths are kept."""
        with self.lock:
            self._files = {}
            self._roots.clear()
            self._journal.clear()
            self._in_cycle = False

    def __len__(self) -> int:
        """Return the number of tracked entries."""
        with self.lock:
            return len(self._files)

    def __contains__(self, path: str) -> bool:
        """Check if a path is currently tracked."""
        with self.lock:
            return path in self._files
