"""Per-cycle gating and delivery of events onto the public channels."""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from .channel import Handoff
from .models import Event, FileInfo, Op

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchPolicy:
    """
    Delivery rules captured at the start of a poll cycle.

    Attributes:
        ops: Operations to forward; empty forwards everything
        max_events: Events delivered per cycle before the rest is dropped
            (0 means unlimited)
    """
    ops: FrozenSet[Op] = field(default_factory=frozenset)
    max_events: int = 0

    def allows(self, op: Op) -> bool:
        return not self.ops or op in self.ops


class Dispatcher:
    """
    Forwards diff results to consumers through the event and error channels.

    Delivery blocks on the consumer; closing the channels aborts it.
    """

    def __init__(self, events: Handoff[Event], errors: Handoff[Exception]):
        """
        Initialize the dispatcher.

        Args:
            events: Public event channel
            errors: Public error channel
        """
        self.events = events
        self.errors = errors

    def dispatch(self, events: Iterable[Event], policy: DispatchPolicy) -> bool:
        """
        Deliver one cycle's events.

        Events whose operation is filtered out are dropped without counting
        toward the cap. Once more than ``policy.max_events`` events have been
        counted, the remainder of the cycle is dropped.

        Args:
            events: Ordered events from the diff
            policy: Rules for this cycle

        Returns:
            False if the event channel was closed during delivery
        """
        count = 0
        for event in events:
            if not policy.allows(event.op):
                continue

            count += 1
            if policy.max_events > 0 and count > policy.max_events:
                logger.debug(f"Event cap of {policy.max_events} reached, dropping the rest of this cycle")
                return True

            if not self.events.put(event):
                return False

        return True

    def report(self, error: Exception) -> bool:
        """
        Deliver an error on the error channel.

        Returns:
            False if the error channel was closed before delivery
        """
        return self.errors.put(error)

    def trigger(self, op: Op, info: Optional[FileInfo] = None) -> bool:
        """
        Deliver a synthetic event outside the poll cycle.

        Args:
            op: Operation to report
            info: Metadata to attach; a placeholder is used when omitted

        Returns:
            False if the event channel was closed before delivery
        """
        event = Event(op=op, path="-", info=info or FileInfo.triggered())
        return self.events.put(event)
