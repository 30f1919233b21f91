# v1
# file: callcenter/entities.py

"""
Defines the call and agent entities and the shared CallCenterState for a simulation run.
The agent pool, FIFO wait queue and call counters live here; call handling belongs to CallFlow.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from typing import Deque, Iterator, List, Optional


class AgentState(enum.Enum):
    IDLE = "idle"
    BUSY = "busy"


class Call:
    """A single inbound call."""

    def __init__(self, call_id: int, arrival_time: int):
        self.call_id = call_id
        self.arrival_time = arrival_time

    def __repr__(self) -> str:
        return f"Call(id={self.call_id}, arrived={self.arrival_time})"


class Agent:
    """One agent with its availability and the service minutes reserved so far."""

    def __init__(self, agent_id: int):
        self.agent_id = agent_id
        self.state = AgentState.IDLE
        self.busy_minutes = 0
        self.current_call_id: Optional[int] = None

    @property
    def is_idle(self) -> bool:
        return self.state is AgentState.IDLE

    def assign(self, call: Call, service_time: int):
        """Take the call and reserve its whole service duration up front."""
        self.state = AgentState.BUSY
        self.current_call_id = call.call_id
        self.busy_minutes += service_time

    def release(self) -> Optional[int]:
        call_id = self.current_call_id
        self.state = AgentState.IDLE
        self.current_call_id = None
        return call_id


class AgentPool:
    """Fixed-size, indexable pool of agents scanned lowest id first."""

    def __init__(self, num_agents: int):
        self.agents: List[Agent] = [Agent(idx) for idx in range(num_agents)]

    def __len__(self) -> int:
        return len(self.agents)

    def __getitem__(self, agent_id: int) -> Agent:
        return self.agents[agent_id]

    def __iter__(self) -> Iterator[Agent]:
        return iter(self.agents)

    def first_idle(self) -> Optional[Agent]:
        for agent in self.agents:
            if agent.is_idle:
                return agent
        return None

    def busy_count(self) -> int:
        return sum(1 for agent in self.agents if not agent.is_idle)

    def total_busy_minutes(self) -> int:
        return sum(agent.busy_minutes for agent in self.agents)


class WaitQueue:
    """FIFO of calls waiting for an agent."""

    def __init__(self):
        self._calls: Deque[Call] = deque()

    def __len__(self) -> int:
        return len(self._calls)

    def __contains__(self, call_id: int) -> bool:
        return any(call.call_id == call_id for call in self._calls)

    def push(self, call: Call):
        self._calls.append(call)

    def pop_head(self) -> Optional[Call]:
        if len(self._calls) == 0:
            return None
        return self._calls.popleft()

    def remove(self, call_id: int) -> Optional[Call]:
        """Remove the call with this id, if it is still waiting."""
        for call in self._calls:
            if call.call_id == call_id:
                self._calls.remove(call)
                return call
        return None

    def call_ids(self) -> List[int]:
        return [call.call_id for call in self._calls]


class CallCenterState:
    """Holds the clock, agents, wait queue and counters for one run."""

    def __init__(self, num_agents: int, max_wait_time: int, simulation_horizon: int):
        self.current_time = 0
        self.max_wait_time = max_wait_time
        self.simulation_horizon = simulation_horizon
        self.agent_pool = AgentPool(num_agents)
        self.wait_queue = WaitQueue()
        self.calls: dict[int, Call] = {}
        self._next_call_id = 1

    # ---- Clock ----------------------------------------------------------
    def advance_clock(self, timestamp: int):
        if timestamp < self.current_time:
            raise RuntimeError(
                f"Clock would move backwards from t={self.current_time} to t={timestamp}."
            )
        self.current_time = timestamp

    # ---- Call helpers ---------------------------------------------------
    def issue_call_id(self) -> int:
        call_id = self._next_call_id
        self._next_call_id += 1
        return call_id

    def create_call(self, call_id: int, arrival_time: int) -> Call:
        call = Call(call_id, arrival_time)
        self.calls[call_id] = call
        logging.debug("Call %s created at t=%d", call_id, arrival_time)
        return call

    def finish_call(self, call_id: Optional[int]) -> Optional[Call]:
        if call_id is None:
            return None
        return self.calls.pop(call_id, None)
