#!/usr/bin/env python3
"""
Polling watcher demo.

This example demonstrates:
1. Poll loop - runs in a background thread
2. Event consumer - prints events as they arrive
3. Error consumer - prints listing errors (a watched folder being deleted)

Usage:
    python examples/poll_demo.py

The demo will:
- Create a temporary directory structure
- Watch it recursively, ignoring hidden files
- Create, modify, rename, move and delete files
- Delete a separately watched folder to show the error channel
- Close the watcher and clean up
"""

import logging
import os
import shutil
import sys
import tempfile
import threading
import time
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pollwatch import Op, Watcher, WatcherConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def consume_events(watcher: Watcher) -> None:
    for event in watcher.iter_events():
        print(f"[EVENT] {event}")


def consume_errors(watcher: Watcher) -> None:
    for error in watcher.iter_errors():
        print(f"[ERROR] {error}")


def main() -> None:
    base = Path(tempfile.mkdtemp(prefix="pollwatch_demo_"))
    root = base / "project"
    scratch = base / "scratch"
    (root / "docs").mkdir(parents=True)
    (root / "archive").mkdir()
    scratch.mkdir()

    config = WatcherConfig(poll_interval_ms=200, ignore_hidden=True)
    watcher = Watcher(config=config)
    watcher.filter_ops(Op.CREATE, Op.WRITE, Op.REMOVE, Op.RENAME, Op.MOVE)
    watcher.add_recursive(root)
    watcher.add(scratch)

    threading.Thread(target=consume_events, args=(watcher,), daemon=True).start()
    threading.Thread(target=consume_errors, args=(watcher,), daemon=True).start()

    watcher.start_async()
    watcher.wait()
    print(f"[DEMO] Watching {root} and {scratch}")

    try:
        notes = root / "docs" / "notes.txt"
        notes.write_text("first draft")
        time.sleep(0.5)

        notes.write_text("second draft, longer")
        time.sleep(0.5)

        renamed = root / "docs" / "final.txt"
        os.rename(notes, renamed)
        time.sleep(0.5)

        os.rename(renamed, root / "archive" / "final.txt")
        time.sleep(0.5)

        (root / ".hidden").write_text("never reported")
        (root / "archive" / "final.txt").unlink()
        time.sleep(0.5)

        shutil.rmtree(scratch)
        time.sleep(0.5)

        watcher.trigger_event(Op.WRITE)
        time.sleep(0.2)
    finally:
        watcher.close()
        watcher.closed.wait(timeout=2.0)
        shutil.rmtree(base, ignore_errors=True)
        print("[DEMO] Done")


if __name__ == "__main__":
    main()
