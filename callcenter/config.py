# v1
# file: callcenter/config.py

"""
Central configuration for call center simulation parameters.
All times are in MINUTES. Arrival rate is calls per MINUTE.
Sweep grid values reproduce the original capacity-planning study.
"""
from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict

# ----------------------------- General ----------------------------- #
SIM_DURATION = 1440  # minutes of simulated time (one day)

# ----------------------------- Logging ----------------------------- #
LOG_FILE = "logs/simulation.log"

# ----------------------------- Outputs ----------------------------- #
RESULTS_FILE = "simulation_results.csv"
CONFIG_FILENAME = "config_used.json"

# --------------------------- Single-run defaults --------------------------- #
NUM_AGENTS = 3
MAX_WAIT_TIME = 10      # patience, minutes
ARRIVAL_RATE = 1.0      # calls/minute (lambda)
AVERAGE_CALL_TIME = 3.0  # minutes

# --------------------------- Sweep grid --------------------------- #
NUM_AGENTS_GRID = list(range(1, 11))
MAX_WAIT_TIMES = [5, 10, 15]
ARRIVAL_RATES = [0.5, 1.0, 1.5, 2.0]
AVERAGE_CALL_TIMES = [3.0, 5.0, 7.0, 9.0]

# --------------------------- Random seeds --------------------------- #
GLOBAL_RANDOM_SEED = 14402024
SEED_OVERRIDE_ENV_VAR = "CALLCENTER_SIM_SEED"


class ConfigurationError(ValueError):
    """Raised when simulation parameters violate their preconditions."""


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of a single simulation run."""

    num_agents: int
    max_wait_time: int
    arrival_rate: float
    average_call_time: float
    simulation_horizon: int = SIM_DURATION

    def __post_init__(self):
        if self.num_agents <= 0:
            raise ConfigurationError(f"num_agents must be positive, got {self.num_agents}.")
        if self.max_wait_time < 0:
            raise ConfigurationError(f"max_wait_time must be non-negative, got {self.max_wait_time}.")
        if self.arrival_rate <= 0:
            raise ConfigurationError(f"arrival_rate must be positive, got {self.arrival_rate}.")
        if self.average_call_time <= 0:
            raise ConfigurationError(f"average_call_time must be positive, got {self.average_call_time}.")
        if self.simulation_horizon <= 0:
            raise ConfigurationError(f"simulation_horizon must be positive, got {self.simulation_horizon}.")

    @property
    def service_rate(self) -> float:
        """Service completions per minute for a single busy agent."""
        return 1.0 / self.average_call_time

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_config() -> SimulationConfig:
    return SimulationConfig(
        num_agents=NUM_AGENTS,
        max_wait_time=MAX_WAIT_TIME,
        arrival_rate=ARRIVAL_RATE,
        average_call_time=AVERAGE_CALL_TIME,
        simulation_horizon=SIM_DURATION,
    )


def resolve_seed(default: int = GLOBAL_RANDOM_SEED) -> tuple[int, str | None]:
    """Return the seed to use and the env var that supplied it, if any."""
    override_val = os.environ.get(SEED_OVERRIDE_ENV_VAR)
    if override_val is None:
        return default, None
    try:
        return int(override_val), SEED_OVERRIDE_ENV_VAR
    except ValueError:
        logging.warning(
            "Env override %s=%r is not an integer; falling back to default seed %d.",
            SEED_OVERRIDE_ENV_VAR,
            override_val,
            default,
        )
        return default, None


def current_config() -> Dict[str, Any]:
    """JSON-serializable snapshot of the module-level settings."""
    return {
        "SIM_DURATION": SIM_DURATION,
        "NUM_AGENTS": NUM_AGENTS,
        "MAX_WAIT_TIME": MAX_WAIT_TIME,
        "ARRIVAL_RATE": ARRIVAL_RATE,
        "AVERAGE_CALL_TIME": AVERAGE_CALL_TIME,
        "NUM_AGENTS_GRID": list(NUM_AGENTS_GRID),
        "MAX_WAIT_TIMES": list(MAX_WAIT_TIMES),
        "ARRIVAL_RATES": list(ARRIVAL_RATES),
        "AVERAGE_CALL_TIMES": list(AVERAGE_CALL_TIMES),
        "GLOBAL_RANDOM_SEED": GLOBAL_RANDOM_SEED,
        "LOG_FILE": LOG_FILE,
        "RESULTS_FILE": RESULTS_FILE,
    }
