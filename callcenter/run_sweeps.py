# v1
# file: callcenter/run_sweeps.py

"""
Parameter sweep runner for the call center capacity study.

Enumerates every combination of agent count, patience, arrival rate and mean
call time, runs one independent simulation per combination (in parallel worker
processes, each with its own spawned seed) and writes the results table as CSV.
Example usage:

    python -m callcenter.run_sweeps --outdir experiments/baseline --workers 4
"""

from __future__ import annotations

import argparse
import itertools
import json
import logging
import os
import sys
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from . import config
from .config import SimulationConfig
from .sampling import make_rng
from .simulate import run_simulation

LOG_FILENAME = "sweep.log"

RESULT_COLUMNS = [
    "NumAgents",
    "SimulationTime",
    "MaxWaitTime",
    "Lambda",
    "AverageCallTime",
    "TotalCalls",
    "AbandonedCalls",
    "Utilization",
]


@dataclass
class SweepExperiment:
    """Container for a single grid point and its random stream."""

    index: int
    config: SimulationConfig
    seed: np.random.SeedSequence


def configure_logging(base_outdir: str) -> None:
    """Configure stdout and file logging for sweep execution."""
    os.makedirs(base_outdir, exist_ok=True)
    logfile = os.path.join(base_outdir, LOG_FILENAME)
    handlers: List[logging.Handler] = [
        logging.FileHandler(logfile, mode="w", encoding="utf-8"),
        logging.StreamHandler(sys.stdout),
    ]
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )
    logging.info("Sweep logging initialized. Output dir: %s", base_outdir)


def build_sweep(
    agents: Sequence[int],
    max_waits: Sequence[int],
    arrival_rates: Sequence[float],
    call_times: Sequence[float],
    horizon: int,
    seed: int,
) -> List[SweepExperiment]:
    """Cross product of the grid, in agents > patience > lambda > call time order."""
    grid = list(itertools.product(agents, max_waits, arrival_rates, call_times))
    children = np.random.SeedSequence(seed).spawn(len(grid))
    experiments: List[SweepExperiment] = []
    for idx, ((n_agents, max_wait, lam, avg_time), child) in enumerate(zip(grid, children)):
        cfg = SimulationConfig(
            num_agents=n_agents,
            max_wait_time=max_wait,
            arrival_rate=lam,
            average_call_time=avg_time,
            simulation_horizon=horizon,
        )
        experiments.append(SweepExperiment(idx, cfg, child))
    return experiments


def run_single_experiment(exp: SweepExperiment) -> Dict[str, Any]:
    """Run one grid point and format it as a results row."""
    cfg = exp.config
    result = run_simulation(cfg, make_rng(exp.seed), record_trace=False)
    return {
        "NumAgents": cfg.num_agents,
        "SimulationTime": cfg.simulation_horizon,
        "MaxWaitTime": cfg.max_wait_time,
        "Lambda": f"{cfg.arrival_rate:.1f}",
        "AverageCallTime": f"{cfg.average_call_time:.1f}",
        "TotalCalls": result.total_calls,
        "AbandonedCalls": result.abandoned_calls,
        "Utilization": f"{result.utilization * 100:.2f}",
    }


def run_sweep(experiments: List[SweepExperiment], workers: int = 1) -> pd.DataFrame:
    """Execute all experiments; rows keep grid order whatever the completion order."""
    rows: Dict[int, Dict[str, Any]] = {}
    if workers <= 1:
        for exp in experiments:
            try:
                rows[exp.index] = run_single_experiment(exp)
            except Exception as exc:  # noqa: BLE001 - explicit logging and continuation required
                logging.exception("Experiment %d failed: %s", exp.index, exc)
    else:
        with ProcessPoolExecutor(max_workers=workers) as ex:
            futures = {ex.submit(run_single_experiment, exp): exp for exp in experiments}
            for fut in as_completed(futures):
                exp = futures[fut]
                try:
                    rows[exp.index] = fut.result()
                except Exception as exc:  # noqa: BLE001 - explicit logging and continuation required
                    logging.exception("Experiment %d failed: %s", exp.index, exc)

    logging.info("Completed %d/%d experiments", len(rows), len(experiments))
    ordered = [rows[idx] for idx in sorted(rows)]
    return pd.DataFrame(ordered, columns=RESULT_COLUMNS)


def persist_outputs(df: pd.DataFrame, outdir: str, results_name: str, seed: int) -> str:
    """Write the results table and a config snapshot; returns the results path."""
    os.makedirs(outdir, exist_ok=True)
    results_path = os.path.join(outdir, results_name)
    df.to_csv(results_path, index=False)
    logging.info("Results written to %s (%d rows)", results_path, len(df))

    snapshot = config.current_config()
    snapshot["sweep_seed"] = seed
    config_path = os.path.join(outdir, config.CONFIG_FILENAME)
    with open(config_path, "w", encoding="utf-8") as handle:
        json.dump(snapshot, handle, indent=2, sort_keys=True)
    logging.info("Wrote config snapshot to %s", config_path)
    return results_path


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run call center parameter sweeps.")
    parser.add_argument("--outdir", default=".", help="Output directory.")
    parser.add_argument("--results", default=config.RESULTS_FILE, help="Results CSV filename.")
    parser.add_argument("--agents", type=int, nargs="+", default=config.NUM_AGENTS_GRID)
    parser.add_argument("--max-waits", type=int, nargs="+", default=config.MAX_WAIT_TIMES)
    parser.add_argument("--lambdas", type=float, nargs="+", default=config.ARRIVAL_RATES)
    parser.add_argument("--call-times", type=float, nargs="+", default=config.AVERAGE_CALL_TIMES)
    parser.add_argument("--horizon", type=int, default=config.SIM_DURATION, help="Simulated minutes per run.")
    parser.add_argument("--seed", type=int, default=None, help="Base seed for all runs.")
    parser.add_argument(
        "--workers", type=int, default=os.cpu_count() or 1, help="Worker processes (1 runs inline)."
    )
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.outdir)

    if args.seed is not None:
        seed = args.seed
    else:
        seed, _ = config.resolve_seed()
    logging.info("Sweep base seed %d", seed)

    experiments = build_sweep(args.agents, args.max_waits, args.lambdas, args.call_times, args.horizon, seed)
    logging.info("Running %d experiments on %d worker(s)", len(experiments), args.workers)
    df = run_sweep(experiments, workers=args.workers)
    persist_outputs(df, args.outdir, args.results, seed)
    return 0 if len(df) == len(experiments) else 1


if __name__ == "__main__":
    sys.exit(main())
