# v1
# file: callcenter/workflow_logic.py

"""
CallFlow encapsulates the call handling semantics for call center DES runs.
Arrival, completion and abandonment transitions, agent assignment and abandonment
timers are handled here so other layers stay focused on plumbing and instrumentation.
"""

from __future__ import annotations

import logging

from .entities import Agent, Call
from .events import CallAbandonmentEvent, CallCompletionEvent, Event
from .sampling import sample_duration


class CallFlow:
    """Orchestrates arrivals, service completions and abandonments."""

    def __init__(self, state, stats, event_queue, source, service_rate: float):
        self.state = state
        self.stats = stats
        self.event_queue = event_queue
        self.source = source
        self.service_rate = service_rate

    # ------------------------------------------------------------------
    def handle_call_arrival(self, event: Event):
        """Count the call, serve it on the first idle agent or queue it with a patience timer."""
        call = self.state.create_call(event.call_id, event.timestamp)
        self.stats.log_arrival(call.call_id, event.timestamp)
        agent = self.state.agent_pool.first_idle()
        if agent is not None and self.assign_agent(agent, call):
            return

        self.state.wait_queue.push(call)
        abandon_at = self.state.current_time + self.state.max_wait_time
        self.event_queue.schedule(CallAbandonmentEvent, abandon_at, call.call_id)
        logging.debug(
            "Call %s queued at t=%d (queue length %d); abandons at t=%d if unserved",
            call.call_id,
            self.state.current_time,
            len(self.state.wait_queue),
            abandon_at,
        )

    def handle_call_completion(self, event: Event):
        """Free the agent and hand it the oldest waiting call, if any."""
        agent = self.state.agent_pool[event.agent_id]
        if agent.is_idle:
            logging.error(
                "Completion for idle agent %s at t=%d (call %s); ignoring.",
                event.agent_id,
                event.timestamp,
                event.call_id,
            )
            return
        finished = agent.release()
        self.state.finish_call(finished)
        self.stats.log_completion(event.call_id, agent.agent_id, event.timestamp)
        logging.debug("Agent %s finished call %s at t=%d", agent.agent_id, event.call_id, event.timestamp)

        next_call = self.state.wait_queue.pop_head()
        if next_call is not None:
            self.assign_agent(agent, next_call)

    def handle_call_abandonment(self, event: Event):
        """Drop the call if it is still waiting; otherwise it was already served."""
        call = self.state.wait_queue.remove(event.call_id)
        if call is None:
            logging.debug("Call %s already served; abandonment at t=%d ignored", event.call_id, event.timestamp)
            return
        self.state.finish_call(call.call_id)
        self.stats.log_abandonment(call.call_id, event.timestamp)

    # ------------------------------------------------------------------
    def assign_agent(self, agent: Agent, call: Call) -> bool:
        """Start service, reserving the sampled duration as busy time immediately."""
        if not agent.is_idle:
            return False
        service_time = sample_duration(self.source, self.service_rate)
        agent.assign(call, service_time)
        completion_time = self.state.current_time + service_time
        self.event_queue.schedule(CallCompletionEvent, completion_time, call.call_id, agent.agent_id)
        logging.debug(
            "Call %s started on agent %s at t=%d (wait %d, svc %d, completes %d)",
            call.call_id,
            agent.agent_id,
            self.state.current_time,
            self.state.current_time - call.arrival_time,
            service_time,
            completion_time,
        )
        return True
