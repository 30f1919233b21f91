# v1
# file: callcenter/sampling.py

"""
Samples exponentially distributed integer durations (minutes) for the call center
simulation. Inter-arrival gaps use rate = lambda; service times use
rate = 1 / average_call_time.

The random source is an explicit handle owned by each run. Anything exposing
``random() -> float in [0, 1)`` works: ``numpy.random.Generator`` in production,
scripted stubs in tests.
"""

from __future__ import annotations

import math
from typing import Protocol

import numpy as np

from .config import ConfigurationError


class UniformSource(Protocol):
    def random(self) -> float:  # pragma: no cover - interface only
        ...


def make_rng(seed: int | np.random.SeedSequence | None) -> np.random.Generator:
    """Build an independent generator for one simulation run."""
    return np.random.default_rng(seed)


def sample_duration(source: UniformSource, rate: float) -> int:
    """Draw one exponential duration and truncate it to whole minutes.

    A draw near zero yields a duration of 0, which is a valid outcome
    (immediate next arrival or instantaneous service).
    """
    if rate <= 0:
        raise ConfigurationError(f"Sampling rate must be positive, got {rate}.")
    u = float(source.random())
    return int(math.floor(-math.log(1.0 - u) / rate))
