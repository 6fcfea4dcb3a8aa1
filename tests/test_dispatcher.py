"""Tests for dispatcher module."""

import threading

import pytest

from pollwatch.channel import Handoff
from pollwatch.dispatcher import DispatchPolicy, Dispatcher
from pollwatch.models import Event, FileInfo, Op


def make_event(op, path):
    return Event(op, path, FileInfo(path.rsplit("/", 1)[-1]))


def run_dispatch(dispatcher, events, policy):
    """Dispatch in a thread and collect everything delivered."""
    received = []
    result = []

    def produce():
        result.append(dispatcher.dispatch(events, policy))
        dispatcher.events.close()

    thread = threading.Thread(target=produce, daemon=True)
    thread.start()
    for event in dispatcher.events:
        received.append(event)
    thread.join(timeout=1.0)
    return result[0], received


@pytest.fixture
def dispatcher():
    return Dispatcher(Handoff("events"), Handoff("errors"))


@pytest.fixture
def events():
    return [
        make_event(Op.WRITE, "/w/a"),
        make_event(Op.CREATE, "/w/b"),
        make_event(Op.REMOVE, "/w/c"),
    ]


class TestDispatchPolicy:
    """Tests for DispatchPolicy class."""

    def test_empty_ops_allows_everything(self):
        policy = DispatchPolicy()
        assert all(policy.allows(op) for op in Op)

    def test_ops_filter(self):
        policy = DispatchPolicy(ops=frozenset({Op.CREATE}))
        assert policy.allows(Op.CREATE)
        assert not policy.allows(Op.WRITE)


class TestDispatcher:
    """Tests for Dispatcher class."""

    def test_delivers_in_order(self, dispatcher, events):
        ok, received = run_dispatch(dispatcher, events, DispatchPolicy())

        assert ok is True
        assert received == events

    def test_op_filter_drops_events(self, dispatcher, events):
        policy = DispatchPolicy(ops=frozenset({Op.CREATE, Op.REMOVE}))
        ok, received = run_dispatch(dispatcher, events, policy)

        assert ok is True
        assert [e.op for e in received] == [Op.CREATE, Op.REMOVE]

    def test_max_events_truncates_cycle(self, dispatcher, events):
        ok, received = run_dispatch(dispatcher, events, DispatchPolicy(max_events=1))

        assert ok is True
        assert received == events[:1]

    def test_filtered_events_do_not_count_toward_cap(self, dispatcher, events):
        policy = DispatchPolicy(ops=frozenset({Op.CREATE, Op.REMOVE}), max_events=2)
        ok, received = run_dispatch(dispatcher, events, policy)

        assert [e.op for e in received] == [Op.CREATE, Op.REMOVE]

    def test_closed_channel_aborts(self, dispatcher, events):
        dispatcher.events.close()
        assert dispatcher.dispatch(events, DispatchPolicy()) is False

    def test_no_events(self, dispatcher):
        assert dispatcher.dispatch([], DispatchPolicy()) is True

    def test_report(self, dispatcher):
        error = OSError("boom")
        thread = threading.Thread(target=dispatcher.report, args=(error,), daemon=True)
        thread.start()

        assert dispatcher.errors.get(timeout=1.0) is error
        thread.join(timeout=1.0)

    def test_trigger_default_info(self, dispatcher):
        thread = threading.Thread(target=dispatcher.trigger, args=(Op.WRITE,), daemon=True)
        thread.start()

        event = dispatcher.events.get(timeout=1.0)
        thread.join(timeout=1.0)

        assert event.op == Op.WRITE
        assert event.path == "-"
        assert event.info.name == "triggered event"

    def test_trigger_custom_info(self, dispatcher):
        info = FileInfo("custom", size=1)
        thread = threading.Thread(target=dispatcher.trigger, args=(Op.CHMOD, info), daemon=True)
        thread.start()

        event = dispatcher.events.get(timeout=1.0)
        thread.join(timeout=1.0)

        assert event.info is info
