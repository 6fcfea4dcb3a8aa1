"""Data models for the polling watcher package."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional
import os
import stat
import time


class Op(Enum):
    """Kinds of change reported by the watcher."""
    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    CHMOD = "chmod"
    MOVE = "move"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FileInfo:
    """
    Metadata captured for one path at one point in time.

    Attributes:
        name: Base name of the entry
        size: Size in bytes
        mode: Raw st_mode, including the file type bits
        mtime_ns: Modification time in nanoseconds
        is_dir: Whether the entry is a directory
        sys: The underlying stat result (not part of equality)
    """
    name: str
    size: int = 0
    mode: int = 0
    mtime_ns: int = 0
    is_dir: bool = False
    sys: Optional[os.stat_result] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> "FileInfo":
        """Create from an os.stat_result."""
        return cls(
            name=name,
            size=st.st_size,
            mode=st.st_mode,
            mtime_ns=st.st_mtime_ns,
            is_dir=stat.S_ISDIR(st.st_mode),
            sys=st,
        )

    @classmethod
    def triggered(cls) -> "FileInfo":
        """Placeholder metadata for events injected by trigger_event()."""
        return cls(name="triggered event", mtime_ns=time.time_ns())

    @property
    def mtime(self) -> float:
        return self.mtime_ns / 1e9

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)

    def same_file(self, other: "FileInfo") -> bool:
        """
        Heuristic identity check used for rename/move detection.

        Two entries are considered the same file when size, modification
        time and mode all match. No content is read.
        """
        return (
            self.size == other.size
            and self.mtime_ns == other.mtime_ns
            and self.mode == other.mode
        )


Snapshot = Dict[str, FileInfo]


@dataclass(frozen=True)
class Event:
    """
    A change observed between two snapshots.

    Attributes:
        op: The kind of change
        path: Affected path; "<old> -> <new>" for RENAME and MOVE
        info: Metadata of the triggering entry (the old entry for RENAME/MOVE)
        old_path: Source path for RENAME and MOVE
        dest_path: Destination path for RENAME and MOVE
    """
    op: Op
    path: str
    info: FileInfo
    old_path: Optional[str] = None
    dest_path: Optional[str] = None

    def __str__(self) -> str:
        kind = "DIRECTORY" if self.info.is_dir else "FILE"
        return f'{kind} "{self.info.name}" {self.op} [{self.path}]'

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "op": self.op.value,
            "path": self.path,
            "name": self.info.name,
            "size": self.info.size,
            "mode": self.info.mode,
            "mtime_ns": self.info.mtime_ns,
            "is_dir": self.info.is_dir,
            "old_path": self.old_path,
            "dest_path": self.dest_path,
        }
