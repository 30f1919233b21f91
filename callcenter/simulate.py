# v1
# file: callcenter/simulate.py

"""
Main entry point for the call center event-driven simulation.
Wires together the DES components, seeds the whole arrival stream up front and
drains the event queue until it is empty or the next event reaches the horizon.

Events stamped at or after the horizon are never dispatched: calls still in
service or waiting at that point are left out of the final counts.

    python -m callcenter.simulate --agents 3 --lambda 1.0 --avg-call-time 3 --max-wait 10
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Sequence

if __package__ is None or __package__ == "":  # pragma: no cover - runtime path fix
    sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from callcenter import config  # type: ignore
from callcenter.config import ConfigurationError, SimulationConfig  # type: ignore
from callcenter.entities import CallCenterState  # type: ignore
from callcenter.events import CallArrivalEvent, EventQueue  # type: ignore
from callcenter.sampling import UniformSource, make_rng, sample_duration  # type: ignore
from callcenter.stats import SimulationResult, StatsCollector  # type: ignore
from callcenter.workflow_logic import CallFlow  # type: ignore


def configure_logging(log_file: str = config.LOG_FILE, level: int = logging.INFO):
    log_dir = os.path.dirname(log_file) or "."
    os.makedirs(log_dir, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode="w", encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )
    logging.info("Simulation logging initialized at %s", datetime.now().isoformat())


class CallCenterSimulation:
    """One engine instance: owns the event queue, state, statistics and random source."""

    def __init__(self, cfg: SimulationConfig, source: UniformSource, record_trace: bool = True):
        self.config = cfg
        self.source = source
        self.state = CallCenterState(cfg.num_agents, cfg.max_wait_time, cfg.simulation_horizon)
        self.stats = StatsCollector(self.state, record_trace=record_trace)
        self.event_queue = EventQueue()
        self.logic = CallFlow(self.state, self.stats, self.event_queue, source, cfg.service_rate)

    def schedule_arrivals(self) -> int:
        """Precompute every arrival strictly below the horizon; returns how many were queued."""
        horizon = self.config.simulation_horizon
        t = 0
        scheduled = 0
        while t < horizon:
            t += sample_duration(self.source, self.config.arrival_rate)
            if t >= horizon:
                break
            call_id = self.state.issue_call_id()
            self.event_queue.schedule(CallArrivalEvent, t, call_id)
            self.stats.log_scheduled_arrival(call_id, t)
            scheduled += 1
        logging.debug("Seeded %d arrivals below horizon %d", scheduled, horizon)
        return scheduled

    def run(self) -> SimulationResult:
        horizon = self.config.simulation_horizon
        self.schedule_arrivals()

        while not self.event_queue.empty():
            next_time = self.event_queue.next_event_time()
            if next_time >= horizon:
                logging.debug(
                    "Next event at t=%d reaches horizon %d; %d events left unprocessed.",
                    next_time,
                    horizon,
                    len(self.event_queue),
                )
                break
            event = self.event_queue.pop()
            self.state.advance_clock(event.timestamp)
            self.stats.log_dispatch(event)
            event.process(self.logic)

        return self.stats.result()


def run_simulation(cfg: SimulationConfig, source: UniformSource, record_trace: bool = True) -> SimulationResult:
    """Run one simulation to completion and return its aggregate statistics."""
    simulation = CallCenterSimulation(cfg, source, record_trace=record_trace)
    result = simulation.run()
    logging.debug(
        "Run finished: agents=%d wait=%d lambda=%.2f avg=%.2f -> total=%d abandoned=%d util=%.4f",
        cfg.num_agents,
        cfg.max_wait_time,
        cfg.arrival_rate,
        cfg.average_call_time,
        result.total_calls,
        result.abandoned_calls,
        result.utilization,
    )
    return result


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a single call center simulation.")
    parser.add_argument("--agents", type=int, default=config.NUM_AGENTS, help="Number of agents.")
    parser.add_argument("--max-wait", type=int, default=config.MAX_WAIT_TIME, help="Caller patience in minutes.")
    parser.add_argument(
        "--lambda", dest="arrival_rate", type=float, default=config.ARRIVAL_RATE, help="Arrivals per minute."
    )
    parser.add_argument(
        "--avg-call-time", type=float, default=config.AVERAGE_CALL_TIME, help="Mean service time in minutes."
    )
    parser.add_argument("--horizon", type=int, default=config.SIM_DURATION, help="Simulated minutes.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: config or env override).")
    parser.add_argument("--log-file", default=config.LOG_FILE, help="Log file path.")
    parser.add_argument("--verbose", action="store_true", help="Log every dispatched event.")
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    if args.seed is not None:
        seed, source_label = args.seed, "--seed"
    else:
        seed, override = config.resolve_seed()
        source_label = override or "config"

    try:
        cfg = SimulationConfig(
            num_agents=args.agents,
            max_wait_time=args.max_wait,
            arrival_rate=args.arrival_rate,
            average_call_time=args.avg_call_time,
            simulation_horizon=args.horizon,
        )
    except ConfigurationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    logging.info(
        "Simulation configuration: horizon=%d min, λ=%.3f/min, mean call=%.2f min, agents=%d, patience=%d min",
        cfg.simulation_horizon,
        cfg.arrival_rate,
        cfg.average_call_time,
        cfg.num_agents,
        cfg.max_wait_time,
    )
    logging.info("Random generator initialized with seed %d (source: %s).", seed, source_label)

    simulation = CallCenterSimulation(cfg, make_rng(seed), record_trace=False)
    result = simulation.run()
    simulation.stats.final_report(result)
    logging.info("Simulation complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
