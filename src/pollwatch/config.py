"""Configuration for the polling watcher package."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from .models import Op


@dataclass
class WatcherConfig:
    """
    Configuration options for the polling watcher.

    Attributes:
        poll_interval_ms: Interval between poll cycles when start() gets none
        max_events: Maximum events delivered per cycle (0 means unlimited)
        ignore_hidden: Whether to skip entries whose name starts with "."
        ops: Operations to forward (empty means all)
        ignore_patterns: Glob patterns for entries to skip while listing
        follow_symlinks: Whether to stat children through symbolic links
    """
    poll_interval_ms: int = 100
    max_events: int = 0
    ignore_hidden: bool = False
    ops: List[Op] = field(default_factory=list)
    ignore_patterns: List[str] = field(default_factory=list)
    follow_symlinks: bool = False

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    def should_ignore(self, path: Union[str, Path]) -> bool:
        """
        Check if a path should be ignored based on ignore patterns.

        Args:
            path: Path to check

        Returns:
            True if the path should be ignored
        """
        import fnmatch

        path = Path(path)
        path_str = str(path)
        name = path.name

        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(name, pattern):
                return True
            if fnmatch.fnmatch(path_str, f"*/{pattern}"):
                return True
            if fnmatch.fnmatch(path_str, pattern):
                return True

        return False
