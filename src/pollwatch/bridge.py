"""Bridge from polled events to watchdog's event model."""

import logging
from typing import Optional

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)

from .models import Event, Op
from .watcher import Watcher

logger = logging.getLogger(__name__)


def to_watchdog_event(event: Event) -> Optional[FileSystemEvent]:
    """
    Convert a polled event into the equivalent watchdog event.

    WRITE and CHMOD both become modified events, RENAME and MOVE become
    moved events.

    Args:
        event: Event taken from a Watcher

    Returns:
        The watchdog event, or None for events injected by trigger_event()
    """
    if event.path == "-":
        return None

    is_dir = event.info.is_dir

    if event.op == Op.CREATE:
        return DirCreatedEvent(event.path) if is_dir else FileCreatedEvent(event.path)
    if event.op in (Op.WRITE, Op.CHMOD):
        return DirModifiedEvent(event.path) if is_dir else FileModifiedEvent(event.path)
    if event.op == Op.REMOVE:
        return DirDeletedEvent(event.path) if is_dir else FileDeletedEvent(event.path)
    if event.op in (Op.RENAME, Op.MOVE):
        if is_dir:
            return DirMovedEvent(event.old_path, event.dest_path)
        return FileMovedEvent(event.old_path, event.dest_path)

    return None


def dispatch_to_handler(watcher: Watcher, handler: FileSystemEventHandler) -> int:
    """
    Feed a watcher's events to a watchdog event handler until it is closed.

    Blocks the calling thread; run it where a consumer would normally run.

    Args:
        watcher: The polling watcher to drain
        handler: Handler whose on_created/on_modified/... methods are called

    Returns:
        Number of events dispatched to the handler
    """
    count = 0
    for event in watcher.iter_events():
        fs_event = to_watchdog_event(event)
        if fs_event is None:
            logger.debug(f"No watchdog equivalent for {event}")
            continue
        handler.dispatch(fs_event)
        count += 1
    return count
