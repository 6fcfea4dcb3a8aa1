"""Tests for models module."""

import os
import stat
import time

import pytest

from pollwatch.models import Event, FileInfo, Op


class TestOp:
    """Tests for Op enum."""

    def test_all_operations(self):
        assert [op.name for op in Op] == ["CREATE", "WRITE", "REMOVE", "RENAME", "CHMOD", "MOVE"]

    def test_str_is_upper_name(self):
        assert str(Op.CREATE) == "CREATE"
        assert str(Op.MOVE) == "MOVE"

    def test_from_value(self):
        assert Op("chmod") is Op.CHMOD


class TestFileInfo:
    """Tests for FileInfo class."""

    def test_from_stat_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("hello")

        info = FileInfo.from_stat("file.txt", os.stat(path))

        assert info.name == "file.txt"
        assert info.size == 5
        assert info.is_dir is False
        assert stat.S_ISREG(info.mode)
        assert info.sys is not None

    def test_from_stat_directory(self, tmp_path):
        info = FileInfo.from_stat(tmp_path.name, os.stat(tmp_path))
        assert info.is_dir is True

    def test_equality_ignores_sys(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("hello")
        st = os.stat(path)

        a = FileInfo.from_stat("file.txt", st)
        b = FileInfo("file.txt", st.st_size, st.st_mode, st.st_mtime_ns, False)

        assert a == b

    def test_immutable(self):
        info = FileInfo("a")
        with pytest.raises(AttributeError):
            info.size = 10

    def test_same_file_matches_metadata(self):
        a = FileInfo("a", size=10, mode=0o100644, mtime_ns=1000)
        b = FileInfo("b", size=10, mode=0o100644, mtime_ns=1000)
        assert a.same_file(b)

    def test_same_file_differs_on_size(self):
        a = FileInfo("a", size=10, mode=0o100644, mtime_ns=1000)
        b = FileInfo("a", size=11, mode=0o100644, mtime_ns=1000)
        assert not a.same_file(b)

    def test_same_file_differs_on_mtime(self):
        a = FileInfo("a", size=10, mode=0o100644, mtime_ns=1000)
        b = FileInfo("a", size=10, mode=0o100644, mtime_ns=2000)
        assert not a.same_file(b)

    def test_same_file_differs_on_mode(self):
        a = FileInfo("a", size=10, mode=0o100644, mtime_ns=1000)
        b = FileInfo("a", size=10, mode=0o100600, mtime_ns=1000)
        assert not a.same_file(b)

    def test_triggered(self):
        before = time.time()
        info = FileInfo.triggered()

        assert info.name == "triggered event"
        assert info.mtime >= before - 1

    def test_permissions(self):
        info = FileInfo("a", mode=0o100755)
        assert info.permissions == 0o755


class TestEvent:
    """Tests for Event class."""

    def test_str_file(self):
        event = Event(Op.CREATE, "/tmp/w/f1", FileInfo("f1"))
        assert str(event) == 'FILE "f1" CREATE [/tmp/w/f1]'

    def test_str_directory(self):
        event = Event(Op.REMOVE, "/tmp/w/sub", FileInfo("sub", is_dir=True))
        assert str(event) == 'DIRECTORY "sub" REMOVE [/tmp/w/sub]'

    def test_rename_fields(self):
        event = Event(
            Op.RENAME,
            "/tmp/w/f1 -> /tmp/w/f2",
            FileInfo("f1"),
            old_path="/tmp/w/f1",
            dest_path="/tmp/w/f2",
        )
        assert event.old_path == "/tmp/w/f1"
        assert event.dest_path == "/tmp/w/f2"

    def test_to_dict(self):
        event = Event(Op.WRITE, "/tmp/w/f1", FileInfo("f1", size=3, mode=0o100644, mtime_ns=5))
        data = event.to_dict()

        assert data["op"] == "write"
        assert data["path"] == "/tmp/w/f1"
        assert data["size"] == 3
        assert data["mtime_ns"] == 5
        assert data["is_dir"] is False
        assert data["old_path"] is None
