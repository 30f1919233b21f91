# v1
# file: callcenter/events.py

"""
Defines event classes and the priority event queue for the call center simulation.
Events stay policy-agnostic by delegating call handling to CallFlow.
"""

from __future__ import annotations

import enum
import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import ClassVar, List, Tuple, Type

NO_AGENT = -1


class EventKind(enum.Enum):
    ARRIVAL = "CallArrival"
    COMPLETION = "CallCompletion"
    ABANDONMENT = "CallAbandonment"


@dataclass(frozen=True)
class Event:
    """Base event storing its timestamp, the call it concerns and its queue sequence."""

    kind: ClassVar[EventKind]

    timestamp: int
    call_id: int
    agent_id: int = NO_AGENT
    seq: int = 0

    def process(self, logic):  # pragma: no cover - interface only
        raise NotImplementedError("Subclasses must implement process().")

    def __str__(self) -> str:
        agent = self.agent_id if self.agent_id != NO_AGENT else "-"
        return f"{self.__class__.__name__}(t={self.timestamp}, call={self.call_id}, agent={agent}, seq={self.seq})"


class CallArrivalEvent(Event):
    kind = EventKind.ARRIVAL

    def process(self, logic):
        logic.handle_call_arrival(self)


class CallCompletionEvent(Event):
    kind = EventKind.COMPLETION

    def process(self, logic):
        logic.handle_call_completion(self)


class CallAbandonmentEvent(Event):
    kind = EventKind.ABANDONMENT

    def process(self, logic):
        logic.handle_call_abandonment(self)


class EventQueue:
    """Min-heap priority queue keyed on (timestamp, insertion sequence).

    Same-timestamp events pop in the order they were scheduled, so dispatch
    order is fully determined by the random sequence.
    """

    def __init__(self):
        self._q: List[Tuple[int, int, Event]] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._q)

    def schedule(self, event_cls: Type[Event], timestamp: int, call_id: int, agent_id: int = NO_AGENT) -> Event:
        """Create an event stamped with the next sequence number and queue it."""
        event = event_cls(timestamp, call_id, agent_id, next(self._counter))
        self.push(event)
        return event

    def push(self, event: Event):
        heapq.heappush(self._q, (event.timestamp, event.seq, event))
        logging.debug("Event queued: %s", event)

    def pop(self) -> Event:
        _, _, event = heapq.heappop(self._q)
        logging.debug("Event dequeued: %s", event)
        return event

    def empty(self) -> bool:
        return len(self._q) == 0

    def next_event_time(self) -> float:
        return self._q[0][0] if self._q else float("inf")

    def pending(self) -> List[Event]:
        """Queued events in dispatch order, without removing them."""
        return [entry[2] for entry in sorted(self._q)]
