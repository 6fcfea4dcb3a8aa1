"""Filesystem listing that produces snapshots for the poll loop."""

import logging
import os
import re
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .config import WatcherConfig
from .models import FileInfo, Snapshot

logger = logging.getLogger(__name__)

FilterHook = Callable[[FileInfo, str], bool]


def is_hidden(path: str) -> bool:
    """Check whether the last component of a path is a dot-file."""
    return os.path.basename(path).startswith(".")


def regex_filter_hook(pattern: str, use_full_path: bool = False) -> FilterHook:
    """
    Build a filter hook that keeps only entries matching a regex.

    Args:
        pattern: Regular expression searched in the name (or full path)
        use_full_path: Match against the absolute path instead of the name

    Returns:
        A hook suitable for Watcher.add_filter_hook()
    """
    regex = re.compile(pattern)

    def hook(info: FileInfo, full_path: str) -> bool:
        target = full_path if use_full_path else info.name
        return regex.search(target) is not None

    return hook


class PathLister:
    """
    Lists a path and its children into a snapshot.

    Ignored paths, hidden entries (when suppressed) and entries matching
    the configured ignore patterns are skipped, and a skipped directory is
    never descended into. Filter hooks only decide whether an entry is
    recorded; they do not prune the walk, and the listed root itself is
    never passed through them.

    Children are visited in name order, depth first, so snapshots iterate
    in a reproducible order.
    """

    def __init__(
        self,
        ignored: Iterable[str] = (),
        ignore_hidden: bool = False,
        filter_hooks: Iterable[FilterHook] = (),
        config: Optional[WatcherConfig] = None,
    ):
        """
        Initialize the lister.

        Args:
            ignored: Absolute paths to skip
            ignore_hidden: Skip entries whose name starts with "."
            filter_hooks: Predicates (info, full_path) -> keep
            config: Watcher configuration (ignore patterns, symlink policy)
        """
        self.ignored = frozenset(ignored)
        self.ignore_hidden = ignore_hidden
        self.filter_hooks = tuple(filter_hooks)
        self.config = config or WatcherConfig()

    def list(self, path: str, recursive: bool = False) -> Snapshot:
        """
        List a path into a snapshot.

        Args:
            path: Absolute path to list
            recursive: Walk every descendant instead of one level

        Returns:
            Mapping of absolute path to metadata, the path itself included

        Raises:
            FileNotFoundError: If the path no longer exists
            OSError: If the path cannot be stat'ed or, for a directory, read
        """
        st = os.stat(path)
        root_info = FileInfo.from_stat(os.path.basename(path) or path, st)
        snapshot: Snapshot = {path: root_info}

        if not root_info.is_dir:
            return snapshot

        visited: Set[Tuple[int, int]] = {(st.st_dev, st.st_ino)}
        self._walk(path, snapshot, recursive, visited, is_root=True)
        return snapshot

    def should_skip(self, path: str) -> bool:
        """Check whether a path is excluded before it is even stat'ed."""
        if path in self.ignored:
            return True
        if self.ignore_hidden and is_hidden(path):
            return True
        return self.config.should_ignore(path)

    def _keep(self, info: FileInfo, full_path: str) -> bool:
        return all(hook(info, full_path) for hook in self.filter_hooks)

    def _walk(
        self,
        directory: str,
        snapshot: Snapshot,
        recursive: bool,
        visited: Set[Tuple[int, int]],
        is_root: bool = False,
    ) -> None:
        try:
            children = self._scan(directory)
        except OSError as e:
            if is_root:
                raise
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            return

        for full_path, info in children:
            if self._keep(info, full_path):
                snapshot[full_path] = info

            if not (recursive and info.is_dir):
                continue

            # Directory cycles are only reachable through followed links
            if self.config.follow_symlinks and info.sys is not None:
                key = (info.sys.st_dev, info.sys.st_ino)
                if key in visited:
                    continue
                visited.add(key)

            self._walk(full_path, snapshot, recursive, visited)

    def _scan(self, directory: str) -> List[Tuple[str, FileInfo]]:
        """Stat the immediate children of a directory, sorted by name."""
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)

        children = []
        for entry in entries:
            full_path = os.path.join(directory, entry.name)
            if self.should_skip(full_path):
                continue
            try:
                st = entry.stat(follow_symlinks=self.config.follow_symlinks)
            except OSError as e:
                logger.warning(f"Skipping {full_path}: {e}")
                continue
            children.append((full_path, FileInfo.from_stat(entry.name, st)))
        return children
