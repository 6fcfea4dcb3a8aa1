"""Polling watcher: configuration surface and the poll loop."""

import logging
import os
import threading
from datetime import timedelta
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .channel import Handoff
from .config import WatcherConfig
from .diff import diff
from .dispatcher import DispatchPolicy, Dispatcher
from .exceptions import (
    DurationTooShortError,
    WatchedPathDeletedError,
    WatcherAlreadyRunningError,
    WatcherClosedError,
)
from .lister import FilterHook, PathLister, is_hidden
from .models import Event, FileInfo, Op, Snapshot
from .snapshot_store import SnapshotStore, is_under

logger = logging.getLogger(__name__)

# Smallest poll interval accepted by start(), in seconds
MIN_INTERVAL = 0.001

Interval = Union[int, float, timedelta]
PathLike = Union[str, "os.PathLike[str]"]


class Watcher:
    """
    Polling filesystem watcher.

    Each cycle lists every watch root, diffs the result against the
    previously committed snapshot and hands the resulting events, one at a
    time, to whoever reads ``events``. Errors from listing go to ``errors``.
    Both channels are unbuffered: a consumer that stops reading either of
    them stalls the poll loop until it reads again or the watcher is closed.

    Configuration calls may be made from any thread at any time. They are
    serialized with the poll loop by a single lock and take effect from the
    next cycle's listing pass.
    """

    def __init__(self, config: Optional[WatcherConfig] = None):
        """
        Initialize an unstarted watcher with no roots.

        Args:
            config: Watcher configuration
        """
        self.config = config or WatcherConfig()

        self._store = SnapshotStore()
        self._lock = self._store.lock
        self._max_events = self.config.max_events
        self._ignore_hidden = self.config.ignore_hidden
        self._ops = frozenset(self.config.ops)
        self._filter_hooks: List[FilterHook] = []

        self.events: Handoff[Event] = Handoff("events")
        self.errors: Handoff[Exception] = Handoff("errors")
        self.closed = threading.Event()
        self._dispatcher = Dispatcher(self.events, self.errors)

        self._running = False
        self._finished = False
        self._started = threading.Event()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # Configuration

    def set_max_events(self, max_events: int) -> None:
        """Limit the events delivered per cycle (0 means unlimited)."""
        with self._lock:
            self._max_events = max_events

    def ignore_hidden_files(self, ignore: bool) -> None:
        """Skip entries whose name starts with "." when listing."""
        with self._lock:
            self._ignore_hidden = ignore

    def filter_ops(self, *ops: Op) -> None:
        """Forward only the given operations; no arguments forwards all."""
        with self._lock:
            self._ops = frozenset(ops)

    def add_filter_hook(self, hook: FilterHook) -> None:
        """
        Register a predicate deciding which listed entries are tracked.

        Args:
            hook: Callable (info, full_path) returning True to keep the entry
        """
        with self._lock:
            self._filter_hooks.append(hook)

    def add(self, path: PathLike) -> None:
        """
        Watch a file, or a directory and its immediate children.

        Args:
            path: Path to watch; made absolute first

        Raises:
            OSError: If the path cannot be listed
        """
        self._add(path, recursive=False)

    def add_recursive(self, path: PathLike) -> None:
        """
        Watch a directory and all of its descendants.

        Args:
            path: Path to watch; made absolute first

        Raises:
            OSError: If the path cannot be listed
        """
        self._add(path, recursive=True)

    def _add(self, path: PathLike, recursive: bool) -> None:
        path = os.path.abspath(os.fspath(path))

        with self._lock:
            if (
                self._store.is_ignored(path)
                or self.config.should_ignore(path)
                or (self._ignore_hidden and is_hidden(path))
            ):
                logger.debug(f"Not watching ignored path: {path}")
                return
            listing = self._lister().list(path, recursive)
            self._store.add_root(path, listing, recursive)

        logger.info(f"Watching {path} (recursive={recursive}, {len(listing)} entries)")

    def remove(self, path: PathLike) -> None:
        """Stop watching a path and, for a directory, its immediate children."""
        path = os.path.abspath(os.fspath(path))
        if self._store.remove_root(path):
            logger.info(f"Stopped watching {path}")

    def remove_recursive(self, path: PathLike) -> None:
        """Stop watching a path and everything tracked below it."""
        path = os.path.abspath(os.fspath(path))
        if self._store.remove_root_recursive(path):
            logger.info(f"Stopped watching {path} recursively")

    def ignore(self, *paths: PathLike) -> None:
        """
        Stop watching paths and exclude them from all future listings.

        Args:
            paths: Paths to ignore; made absolute first
        """
        for path in paths:
            path = os.path.abspath(os.fspath(path))
            self._store.ignore(path)
            logger.info(f"Ignoring {path}")

    def watched_files(self) -> Snapshot:
        """
        Get the tracked entries.

        Returns:
            Copy of the mapping of absolute path to metadata
        """
        return self._store.copy()

    def get_roots(self) -> Dict[str, bool]:
        """
        Get the registered watch roots.

        Returns:
            Mapping of root path to its recursive flag
        """
        return self._store.get_roots()

    def _lister(self) -> PathLister:
        return PathLister(
            ignored=self._store.get_ignored(),
            ignore_hidden=self._ignore_hidden,
            filter_hooks=self._filter_hooks,
            config=self.config,
        )

    # Lifecycle

    def start(self, interval: Optional[Interval] = None) -> None:
        """
        Run the poll loop in the calling thread until close() is called.

        Args:
            interval: Seconds (or a timedelta) between cycles; defaults to
                config.poll_interval

        Raises:
            DurationTooShortError: If interval is below MIN_INTERVAL
            WatcherAlreadyRunningError: If the loop is already running
            WatcherClosedError: If the watcher has been closed
        """
        seconds = self._interval_seconds(interval)
        self._begin()
        self._run(seconds)

    def start_async(self, interval: Optional[Interval] = None) -> threading.Thread:
        """
        Run the poll loop in a background thread.

        Validation happens in the calling thread, so the same errors as
        start() are raised here.

        Returns:
            The thread running the loop
        """
        seconds = self._interval_seconds(interval)
        self._begin()
        self._thread = threading.Thread(
            target=self._run,
            args=(seconds,),
            name="PollLoop",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until start() has been called.

        Returns:
            True once started, False if timeout expired first
        """
        return self._started.wait(timeout)

    def trigger_event(self, op: Op, info: Optional[FileInfo] = None) -> bool:
        """
        Inject a synthetic event on the event channel.

        Waits for the watcher to start, then blocks until a consumer takes
        the event.

        Args:
            op: Operation to report
            info: Metadata to attach; a placeholder is used when omitted

        Returns:
            False if the watcher was closed before delivery
        """
        self.wait()
        return self._dispatcher.trigger(op, info)

    def close(self) -> None:
        """
        Stop the poll loop and drop all roots and tracked entries.

        Does nothing if the loop is not running. Any blocked delivery is
        aborted and both channels are closed.
        """
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._finished = True
            self._store.clear()

        self._stop_event.set()
        self.events.close()
        self.errors.close()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

        logger.info("Watcher closed")

    @property
    def is_running(self) -> bool:
        """Check if the poll loop is running."""
        with self._lock:
            return self._running

    def iter_events(self) -> Iterator[Event]:
        """Yield events as they arrive until the watcher is closed."""
        return iter(self.events)

    def iter_errors(self) -> Iterator[Exception]:
        """Yield errors as they arrive until the watcher is closed."""
        return iter(self.errors)

    def _interval_seconds(self, interval: Optional[Interval]) -> float:
        if interval is None:
            seconds = self.config.poll_interval
        elif isinstance(interval, timedelta):
            seconds = interval.total_seconds()
        else:
            seconds = float(interval)

        if seconds < MIN_INTERVAL:
            raise DurationTooShortError(
                f"Poll interval {seconds}s is less than {MIN_INTERVAL}s"
            )
        return seconds

    def _begin(self) -> None:
        with self._lock:
            if self._running:
                raise WatcherAlreadyRunningError("Watcher is already running")
            if self._finished:
                raise WatcherClosedError("Watcher has been closed")
            self._running = True
            self._stop_event.clear()

        self._started.set()

    def _run(self, interval: float) -> None:
        """Poll loop body; exits when close() is called."""
        logger.info(f"Poll loop started, interval={interval}s")

        try:
            while not self._stop_event.is_set():
                if not self._poll_cycle():
                    break
                self._stop_event.wait(timeout=interval)
        finally:
            with self._lock:
                self._running = False
                self._finished = True
            self.events.close()
            self.errors.close()
            self.closed.set()
            logger.info("Poll loop stopped")

    def _poll_cycle(self) -> bool:
        """
        Run one list, diff, deliver, commit pass.

        Returns:
            False if the watcher was closed during the cycle
        """
        with self._lock:
            if not self._running:
                return False
            policy = DispatchPolicy(ops=self._ops, max_events=self._max_events)
            self._store.begin_cycle()
            snapshot, errors = self._gather()
            events = diff(self._store.current(), snapshot)

        for error in errors:
            if not self._dispatcher.report(error):
                return False

        if events:
            logger.debug(f"Delivering {len(events)} event(s)")
        if not self._dispatcher.dispatch(events, policy):
            return False

        with self._lock:
            if not self._running:
                return False
            self._store.commit(snapshot)
        return True

    def _gather(self) -> Tuple[Snapshot, List[Exception]]:
        """
        List every root into one snapshot. Caller holds the lock.

        A root that vanished is deregistered and reported; entries another
        root still covers stay tracked so the diff reports them removed. A
        root that failed for any other reason (an I/O error, a filter hook
        that raised) is reported, stays registered and keeps its previously
        tracked entries for this cycle.
        """
        lister = self._lister()
        snapshot: Snapshot = {}
        errors: List[Exception] = []

        for root, recursive in self._store.get_roots().items():
            if not self._store.has_root(root):
                continue
            try:
                snapshot.update(lister.list(root, recursive))
            except FileNotFoundError:
                logger.warning(f"Watched path deleted: {root}")
                errors.append(WatchedPathDeletedError(root))
                self._store.forget_root(root, recursive)
            except Exception as e:
                logger.warning(f"Failed to list {root}: {e}")
                errors.append(e)
                previous = self._store.current()
                snapshot.update({p: info for p, info in previous.items() if is_under(p, root)})

        return snapshot, errors

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
