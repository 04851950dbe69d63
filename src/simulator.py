"""
Roll simulator for a weighted die.

Draws repeated independent rolls from a face distribution and records the
per-face counts plus a subsampled running mean for convergence plots.
"""
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np

from die_geometry import InvalidInput
from sampler import build_cdf, roll_weighted_die, sample_index
from weights import normalize_weights

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_STEP = 10

# Uniform draws generated per batch; memory stays bounded for any n
DRAW_CHUNK_SIZE = 65536


@dataclass
class SimulationResult:
    """Results from one simulation run."""
    counts: List[int]
    rel_freq: List[float]
    probs: List[float]  # distribution the rolls were drawn from
    running_mean: List[float]
    sample_step: int

    # Number of rolls so far at each running_mean entry
    sample_points: List[int] = field(default_factory=list)
    wall_time: float = 0.0  # seconds

    @property
    def n(self) -> int:
        return sum(self.counts)

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            "n": self.n,
            "counts": list(self.counts),
            "rel_freq": list(self.rel_freq),
            "probs": list(self.probs),
            "running_mean": list(self.running_mean),
            "sample_step": self.sample_step,
            "sample_points": list(self.sample_points),
            "wall_time": self.wall_time,
        }


def _uniform_draws(rng: np.random.Generator, n: int,
                   chunk_size: int = DRAW_CHUNK_SIZE) -> Iterator[float]:
    """Yield ``n`` uniform values in [0, 1), generated ``chunk_size`` at a time."""
    remaining = n
    while remaining > 0:
        size = min(chunk_size, remaining)
        yield from rng.random(size)
        remaining -= size


def _as_float(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a number, got {value!r}") from exc


def simulate_rolls(
    weights: Sequence[float],
    n: float,
    sample_step: float = DEFAULT_SAMPLE_STEP,
    rng: Optional[np.random.Generator] = None,
) -> SimulationResult:
    """Roll a weighted die ``n`` times and collect statistics.

    Args:
        weights: Non-negative face weights (normalized internally).
        n: Number of rolls; must be > 0, floored to an integer.
        sample_step: Record the running mean every this many rolls (>= 1,
            floored). The final roll is always recorded.
        rng: Random generator; a fresh unseeded one if omitted.

    Returns:
        SimulationResult with counts, relative frequencies and running mean.

    Raises:
        InvalidInput: bad ``n``, ``sample_step`` or weights.
    """
    n = _as_float(n, "n")
    if not math.isfinite(n) or n <= 0:
        raise InvalidInput(f"n must be a positive integer, got {n!r}")
    n = math.floor(n)
    if n < 1:
        raise InvalidInput("n must be at least 1 after flooring")

    sample_step = _as_float(sample_step, "sample_step")
    if not math.isfinite(sample_step) or sample_step < 1:
        raise InvalidInput(f"sample_step must be >= 1, got {sample_step!r}")
    sample_step = math.floor(sample_step)

    start_wall_time = time.time()
    if rng is None:
        rng = np.random.default_rng()

    probs = normalize_weights(weights)
    cdf = build_cdf(probs)

    counts = [0] * len(probs)
    running_mean: List[float] = []
    sample_points: List[int] = []
    sum_values = 0

    for rolls, u in enumerate(_uniform_draws(rng, n), start=1):
        idx = sample_index(cdf, u)
        counts[idx] += 1
        sum_values += idx + 1

        if rolls % sample_step == 0 or rolls == n:
            running_mean.append(sum_values / rolls)
            sample_points.append(rolls)

    rel_freq = [c / n for c in counts]
    wall_time = time.time() - start_wall_time
    logger.debug("Simulated %d rolls in %.3f s", n, wall_time)

    return SimulationResult(
        counts=counts,
        rel_freq=rel_freq,
        probs=probs,
        running_mean=running_mean,
        sample_step=sample_step,
        sample_points=sample_points,
        wall_time=wall_time,
    )


class DieSimulator:
    """
    Simulator that owns its random generator.

    Give each concurrent caller its own instance; a single instance is not
    safe to share across threads.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the simulator.

        Args:
            seed: Seed for a new generator (ignored when ``rng`` is given)
            rng: Existing generator to draw from
        """
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def roll(self, weights: Sequence[float]) -> int:
        """Roll once, returning a face index (0-5)."""
        return roll_weighted_die(weights, rng=self.rng)

    def simulate(self, weights: Sequence[float], n: float,
                 sample_step: float = DEFAULT_SAMPLE_STEP) -> SimulationResult:
        return simulate_rolls(weights, n, sample_step=sample_step, rng=self.rng)

    def simulate_batch(self, weight_sets: list, n: float,
                       sample_step: float = DEFAULT_SAMPLE_STEP) -> list:
        """
        Simulate several dice with the same roll count.

        Args:
            weight_sets: List of weight vectors
            n: Rolls per die

        Returns:
            List of SimulationResult objects
        """
        results = []
        for weights in weight_sets:
            results.append(self.simulate(weights, n, sample_step))
        return results
