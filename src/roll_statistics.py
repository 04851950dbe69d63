"""
Summary statistics for simulated rolls.

Compares a simulation's empirical distribution with the distribution it was
drawn from: expected value, variance, cumulative distributions, running-mean
chart points and a chi-square goodness-of-fit test.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from simulator import SimulationResult

logger = logging.getLogger(__name__)


@dataclass
class GoodnessOfFit:
    """Chi-square test of observed counts against the face probabilities."""
    statistic: float
    p_value: float
    dof: int


@dataclass
class RollSummary:
    """Theoretical vs empirical statistics for one simulation."""
    theoretical_mean: float
    empirical_mean: float
    theoretical_variance: float
    empirical_variance: float
    fit: GoodnessOfFit
    cdf_rows: List[Dict[str, float]] = field(default_factory=list)
    mean_points: List[Tuple[int, float]] = field(default_factory=list)

    @property
    def mean_error(self) -> float:
        return self.empirical_mean - self.theoretical_mean

    def to_dict(self) -> Dict:
        return {
            "theoretical_mean": self.theoretical_mean,
            "empirical_mean": self.empirical_mean,
            "theoretical_variance": self.theoretical_variance,
            "empirical_variance": self.empirical_variance,
            "chi_square": self.fit.statistic,
            "p_value": self.fit.p_value,
            "dof": self.fit.dof,
            "cdf": self.cdf_rows,
            "mean_points": [list(p) for p in self.mean_points],
        }


def _face_values(k: int) -> np.ndarray:
    return np.arange(1, k + 1, dtype=float)


def expected_value(probs: Sequence[float]) -> float:
    """E[X] for faces labelled 1..k."""
    p = np.asarray(probs, dtype=float)
    return float(np.dot(p, _face_values(p.size)))


def variance(probs: Sequence[float]) -> float:
    """Var[X] = E[X^2] - E[X]^2 for faces labelled 1..k."""
    p = np.asarray(probs, dtype=float)
    faces = _face_values(p.size)
    mean = float(np.dot(p, faces))
    return float(np.dot(p, faces ** 2)) - mean ** 2


def cdf_series(probs: Sequence[float], rel_freq: Sequence[float]) -> List[Dict[str, float]]:
    """Per-face theoretical and empirical cumulative probabilities."""
    rows = []
    cum_theoretical = 0.0
    cum_empirical = 0.0
    for i, (p, f) in enumerate(zip(probs, rel_freq)):
        cum_theoretical += p
        cum_empirical += f
        rows.append({
            "face": i + 1,
            "theoretical_cdf": cum_theoretical,
            "empirical_cdf": cum_empirical,
        })
    return rows


def running_mean_points(result: SimulationResult) -> List[Tuple[int, float]]:
    """(rolls so far, running mean) pairs for a convergence chart."""
    points = result.sample_points
    if len(points) != len(result.running_mean):
        # Result built by hand without sample points; rebuild from the stride.
        n = result.n
        points = [min((i + 1) * result.sample_step, n) for i in range(len(result.running_mean))]
    return list(zip(points, result.running_mean))


def goodness_of_fit(result: SimulationResult) -> GoodnessOfFit:
    """Chi-square test of ``result.counts`` against ``n * result.probs``.

    Faces with zero probability are left out. A count on such a face makes
    the fit infinitely bad.
    """
    counts = np.asarray(result.counts, dtype=float)
    probs = np.asarray(result.probs, dtype=float)
    n = counts.sum()

    possible = probs > 0
    if np.any(counts[~possible] > 0):
        logger.warning("Rolls landed on a zero-probability face")
        return GoodnessOfFit(statistic=float("inf"), p_value=0.0, dof=int(possible.sum()) - 1)

    dof = int(possible.sum()) - 1
    if dof < 1:
        return GoodnessOfFit(statistic=0.0, p_value=1.0, dof=0)

    observed = counts[possible]
    expected = n * probs[possible] / probs[possible].sum()
    statistic, p_value = stats.chisquare(observed, f_exp=expected)
    return GoodnessOfFit(statistic=float(statistic), p_value=float(p_value), dof=dof)


def summarize(result: SimulationResult) -> RollSummary:
    """Bundle every statistic for a simulation result."""
    return RollSummary(
        theoretical_mean=expected_value(result.probs),
        empirical_mean=expected_value(result.rel_freq),
        theoretical_variance=variance(result.probs),
        empirical_variance=variance(result.rel_freq),
        fit=goodness_of_fit(result),
        cdf_rows=cdf_series(result.probs, result.rel_freq),
        mean_points=running_mean_points(result),
    )
