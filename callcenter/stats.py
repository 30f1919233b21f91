# v1
# file: callcenter/stats.py

"""
Collects statistics for a call center simulation run: call counts, abandonments,
completions, the dispatch trace and agent utilization derived from reserved busy time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

from .events import Event


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate outcome of one simulation run."""

    total_calls: int
    abandoned_calls: int
    utilization: float
    completed_calls: int = 0
    busy_minutes: Tuple[int, ...] = ()
    dispatched_events: Tuple[Event, ...] = field(default=(), repr=False)

    def as_tuple(self) -> Tuple[int, int, float]:
        return self.total_calls, self.abandoned_calls, self.utilization

    def trace(self) -> List[Tuple[int, str, int]]:
        """(timestamp, kind, call id) for every dispatched event, in order."""
        return [(ev.timestamp, ev.kind.value, ev.call_id) for ev in self.dispatched_events]


class StatsCollector:
    """Tracks call counters and the dispatch order during a run."""

    def __init__(self, state, record_trace: bool = True):
        self.state = state
        self.record_trace = record_trace
        self.total_calls = 0
        self.abandoned_calls = 0
        self.completed_calls = 0
        self.scheduled_arrivals = 0
        self.dispatched: List[Event] = []
        self.event_counters: Dict[str, int] = {}

    # ------------------------------------------------------------------
    def log_scheduled_arrival(self, call_id: int, timestamp: int):
        self.scheduled_arrivals += 1
        logging.debug("Scheduled call %s arrival at t=%d", call_id, timestamp)

    def log_dispatch(self, event: Event):
        name = event.kind.value
        self.event_counters[name] = self.event_counters.get(name, 0) + 1
        if self.record_trace:
            self.dispatched.append(event)

    def log_arrival(self, call_id: int, timestamp: int):
        self.total_calls += 1

    def log_completion(self, call_id: int, agent_id: int, timestamp: int):
        self.completed_calls += 1

    def log_abandonment(self, call_id: int, timestamp: int):
        self.abandoned_calls += 1
        logging.debug("Call %s abandoned at t=%d", call_id, timestamp)

    # ------------------------------------------------------------------
    def utilization(self) -> float:
        """Reserved busy minutes over available agent minutes; never clamped."""
        pool = self.state.agent_pool
        busy = np.array([agent.busy_minutes for agent in pool], dtype=float)
        capacity = len(pool) * self.state.simulation_horizon
        value = float(busy.sum() / capacity)
        if value > 1.0:
            logging.warning(
                "Utilization %.4f exceeds 1: reserved busy time %.0f min > capacity %d min.",
                value,
                busy.sum(),
                capacity,
            )
        return value

    def result(self) -> SimulationResult:
        busy_minutes = tuple(agent.busy_minutes for agent in self.state.agent_pool)
        return SimulationResult(
            total_calls=self.total_calls,
            abandoned_calls=self.abandoned_calls,
            utilization=self.utilization(),
            completed_calls=self.completed_calls,
            busy_minutes=busy_minutes,
            dispatched_events=tuple(self.dispatched),
        )

    def final_report(self, result: SimulationResult):
        util = result.utilization
        abandon_rate = self.abandoned_calls / self.total_calls if self.total_calls else 0.0
        logging.info(
            "Calls: total=%d abandoned=%d (%.2f%%) completed=%d; still waiting=%d; agents busy=%d",
            self.total_calls,
            self.abandoned_calls,
            abandon_rate * 100,
            self.completed_calls,
            len(self.state.wait_queue),
            self.state.agent_pool.busy_count(),
        )
        logging.info("Agent utilization: %.2f%%", util * 100)
        logging.info("Dispatched events by kind: %s", self.event_counters)
