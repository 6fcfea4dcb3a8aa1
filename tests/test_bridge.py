"""Tests for watchdog bridge module."""

import os
import threading
import time

import pytest

from watchdog.events import (
    DirCreatedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)

from pollwatch.bridge import dispatch_to_handler, to_watchdog_event
from pollwatch.models import Event, FileInfo, Op
from pollwatch.watcher import Watcher


FILE = FileInfo("f", size=1, mode=0o100644, mtime_ns=1)
DIRECTORY = FileInfo("d", size=4096, mode=0o40755, mtime_ns=1, is_dir=True)


class RecordingHandler(FileSystemEventHandler):
    """Handler that records the watchdog callbacks it receives."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def on_created(self, event):
        self.calls.append(("created", event.src_path))

    def on_modified(self, event):
        self.calls.append(("modified", event.src_path))

    def on_moved(self, event):
        self.calls.append(("moved", event.src_path, event.dest_path))

    def on_deleted(self, event):
        self.calls.append(("deleted", event.src_path))


class TestToWatchdogEvent:
    """Tests for to_watchdog_event function."""

    def test_create_file(self):
        fs_event = to_watchdog_event(Event(Op.CREATE, "/w/f", FILE))
        assert isinstance(fs_event, FileCreatedEvent)
        assert fs_event.src_path == "/w/f"

    def test_create_directory(self):
        fs_event = to_watchdog_event(Event(Op.CREATE, "/w/d", DIRECTORY))
        assert isinstance(fs_event, DirCreatedEvent)

    @pytest.mark.parametrize("op", [Op.WRITE, Op.CHMOD])
    def test_write_and_chmod_are_modifications(self, op):
        fs_event = to_watchdog_event(Event(op, "/w/f", FILE))
        assert isinstance(fs_event, FileModifiedEvent)

    def test_remove(self):
        fs_event = to_watchdog_event(Event(Op.REMOVE, "/w/f", FILE))
        assert isinstance(fs_event, FileDeletedEvent)

    def test_rename(self):
        event = Event(Op.RENAME, "/w/f -> /w/g", FILE, old_path="/w/f", dest_path="/w/g")
        fs_event = to_watchdog_event(event)

        assert isinstance(fs_event, FileMovedEvent)
        assert fs_event.src_path == "/w/f"
        assert fs_event.dest_path == "/w/g"

    def test_move_directory(self):
        event = Event(Op.MOVE, "/a/d -> /b/d", DIRECTORY, old_path="/a/d", dest_path="/b/d")
        assert isinstance(to_watchdog_event(event), DirMovedEvent)

    def test_triggered_event_has_no_equivalent(self):
        assert to_watchdog_event(Event(Op.CREATE, "-", FileInfo.triggered())) is None


class TestDispatchToHandler:
    """Tests for dispatch_to_handler function."""

    def test_feeds_handler_until_close(self, tmp_path):
        root = tmp_path / "w"
        root.mkdir()
        target = root / "f1"
        target.write_text("hello")

        watcher = Watcher()
        watcher.filter_ops(Op.WRITE, Op.REMOVE)
        watcher.add(target)
        watcher.start_async(0.02)

        handler = RecordingHandler()
        counts = []
        consumer = threading.Thread(
            target=lambda: counts.append(dispatch_to_handler(watcher, handler)),
            daemon=True,
        )
        consumer.start()

        os.utime(target, ns=(1_700_000_000_000_000_000, 1_700_000_000_000_000_000))
        for _ in range(100):
            if handler.calls:
                break
            time.sleep(0.02)

        watcher.close()
        consumer.join(timeout=2.0)

        assert handler.calls == [("modified", str(target))]
        assert counts == [1]
