"""
Inverse-transform sampling of die faces.

Every draw takes an optional ``numpy.random.Generator``; without one a fresh
unseeded generator is used, so results are not reproducible unless the caller
supplies a seeded generator.
"""
import math
from typing import List, Optional, Sequence

import numpy as np

from die_geometry import InvalidInput
from weights import normalize_weights

# Tolerance before roll_from_probs renormalizes its input
PROB_SUM_TOL = 1e-9


def _generator(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def build_cdf(probs: Sequence[float]) -> List[float]:
    """Cumulative distribution of ``probs`` with the last entry pinned to 1.0."""
    p = normalize_weights(probs)
    cdf = []
    s = 0.0
    for value in p:
        s += value
        cdf.append(s)
    cdf[-1] = 1.0
    return cdf


def sample_index(cdf: Sequence[float], u: float) -> int:
    """First index whose cumulative value is >= ``u``.

    Ties go to the lower index. Falls back to the last index if ``u`` is
    above every entry.
    """
    for i, c in enumerate(cdf):
        if u <= c:
            return i
    return len(cdf) - 1


def roll_from_probs(probs: Sequence[float], rng: Optional[np.random.Generator] = None) -> int:
    """Draw one face index from a probability vector.

    Probabilities off from 1 by more than PROB_SUM_TOL are renormalized.

    Raises:
        InvalidInput: empty, non-finite or negative entries, or a zero sum.
    """
    if len(probs) == 0:
        raise InvalidInput("probs must be a non-empty sequence")

    s = 0.0
    for p in probs:
        if not math.isfinite(p):
            raise InvalidInput("probabilities must be finite numbers")
        if p < 0:
            raise InvalidInput("probabilities must be >= 0")
        s += p
    if s <= 0:
        raise InvalidInput("sum of probabilities must be > 0")

    if abs(s - 1.0) > PROB_SUM_TOL:
        probs = [p / s for p in probs]

    u = _generator(rng).random()
    cumulative = 0.0
    for i, p in enumerate(probs):
        cumulative += p
        if u <= cumulative:
            return i
    return len(probs) - 1


def roll_weighted_die(weights: Sequence[float], rng: Optional[np.random.Generator] = None) -> int:
    """Normalize ``weights`` and draw one face index."""
    return roll_from_probs(normalize_weights(weights), rng=rng)
