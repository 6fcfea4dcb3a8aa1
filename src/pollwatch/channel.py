"""Unbuffered, closable handoff channel."""

import threading
import time
from typing import Any, Generic, Iterator, Optional, TypeVar

from .exceptions import ChannelClosedError

T = TypeVar("T")


class _Offer:
    __slots__ = ("item", "taken")

    def __init__(self, item: Any):
        self.item = item
        self.taken = False


class Handoff(Generic[T]):
    """
    Zero-capacity channel between producer and consumer threads.

    put() blocks until a consumer has taken the item; get() blocks until a
    producer offers one. Nothing is ever queued: at most one offer is
    outstanding and further producers wait their turn. Closing the channel
    wakes everyone, retracts an untaken offer and makes get() raise
    ChannelClosedError.
    """

    def __init__(self, name: str = "channel"):
        """
        Initialize the channel.

        Args:
            name: Label used in error messages and repr
        """
        self.name = name
        self._cond = threading.Condition(threading.Lock())
        self._offer: Optional[_Offer] = None
        self._closed = False

    def put(self, item: T) -> bool:
        """
        Hand an item to a consumer.

        Args:
            item: The value to deliver

        Returns:
            True once a consumer received the item, False if the channel
            was closed before that happened
        """
        with self._cond:
            while self._offer is not None and not self._closed:
                self._cond.wait()
            if self._closed:
                return False

            offer = _Offer(item)
            self._offer = offer
            self._cond.notify_all()

            while not offer.taken and not self._closed:
                self._cond.wait()

            if not offer.taken:
                if self._offer is offer:
                    self._offer = None
                return False
            return True

    def get(self, timeout: Optional[float] = None) -> T:
        """
        Receive the next item.

        Args:
            timeout: Seconds to wait; None waits forever

        Returns:
            The item handed over by a producer

        Raises:
            ChannelClosedError: If the channel is closed
            TimeoutError: If no item arrived within timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._cond:
            while self._offer is None and not self._closed:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError(f"{self.name}: no item within {timeout}s")
                self._cond.wait(remaining)

            if self._closed:
                raise ChannelClosedError(f"{self.name} is closed")

            offer = self._offer
            offer.taken = True
            self._offer = None
            self._cond.notify_all()
            return offer.item

    def close(self) -> None:
        """Close the channel and wake all waiting producers and consumers."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosedError:
                return

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Handoff({self.name!r}, {state})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
