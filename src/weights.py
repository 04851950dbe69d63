"""
Face weights for the die.

Normalizes raw weights into probabilities and converts between box
dimensions and face weights. A face's weight is its area raised to an
exponent, so opposite faces always share a weight.
"""
import logging
import math
from typing import List, Sequence

import numpy as np

from die_geometry import MIN_DIMENSION, N_FACES, BoxDimensions, InvalidInput

logger = logging.getLogger(__name__)


def as_weight_array(weights: Sequence[float], name: str = "weights") -> np.ndarray:
    """Validate a weight vector: non-empty, finite, every entry >= 0."""
    try:
        arr = np.asarray(weights, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a sequence of numbers") from exc
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidInput(f"{name} must be a non-empty 1-D sequence")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} must contain finite numbers")
    if np.any(arr < 0):
        raise InvalidInput(f"{name} must be >= 0")
    return arr


def normalize_weights(weights: Sequence[float]) -> List[float]:
    """Convert non-negative weights into probabilities summing to 1.

    A zero total falls back to the uniform distribution rather than failing,
    so a die can always be rolled.
    """
    arr = as_weight_array(weights)
    total = float(arr.sum())
    if total <= 0:
        logger.debug("Weights sum to %g, using uniform distribution", total)
        return [1.0 / arr.size] * arr.size
    return (arr / total).tolist()


def _check_exponent(exponent: float, allow_zero: bool) -> float:
    exponent = float(exponent)
    if not math.isfinite(exponent):
        raise InvalidInput(f"exponent must be a finite number, got {exponent!r}")
    if not allow_zero and exponent == 0:
        raise InvalidInput("exponent must be nonzero to invert weights")
    return exponent


def weights_from_dimensions(dims, exponent: float = 1.0) -> List[float]:
    """Face weights proportional to face area raised to ``exponent``.

    Args:
        dims: BoxDimensions, {lx, ly, lz} mapping or 3-sequence.
        exponent: 1 means weight proportional to area; larger values favour
            the larger faces more strongly.

    Returns:
        Six weights in face order (+Y, +X, +Z, -Z, -X, -Y).
    """
    exponent = _check_exponent(exponent, allow_zero=True)
    clean = BoxDimensions.coerce(dims).cleaned()

    area_xz = clean.lx * clean.lz  # faces 1 & 6 (+/-Y)
    area_yz = clean.ly * clean.lz  # faces 2 & 5 (+/-X)
    area_xy = clean.lx * clean.ly  # faces 3 & 4 (+/-Z)

    w_xz = area_xz ** exponent
    w_yz = area_yz ** exponent
    w_xy = area_xy ** exponent

    return [w_xz, w_yz, w_xy, w_xy, w_yz, w_xz]


def dimensions_from_weights(weights: Sequence[float], exponent: float = 1.0) -> BoxDimensions:
    """Recover box dimensions from six face weights.

    Each axis-pair area is the geometric mean of its two opposite faces'
    un-scaled weights, and the three areas are solved for the edges. Weights
    that no box can produce still give an answer; nothing checks that the
    three areas are mutually consistent.

    Raises:
        InvalidInput: wrong length, a non-finite or non-positive weight, or a
            zero/non-finite exponent.
    """
    try:
        arr = np.asarray(weights, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInput("weights must be a sequence of numbers") from exc
    if arr.shape != (N_FACES,):
        raise InvalidInput(f"weights must have length {N_FACES}")
    exponent = _check_exponent(exponent, allow_zero=False)
    if not np.all(np.isfinite(arr)):
        raise InvalidInput("weights must contain finite numbers")
    if np.any(arr <= 0):
        raise InvalidInput("weights must be > 0 to invert into dimensions")

    unscaled = arr ** (1.0 / exponent)

    area_xz = math.sqrt(unscaled[0] * unscaled[5])  # lx*lz
    area_yz = math.sqrt(unscaled[1] * unscaled[4])  # ly*lz
    area_xy = math.sqrt(unscaled[2] * unscaled[3])  # lx*ly

    lx = math.sqrt(area_xy * area_xz / area_yz)
    ly = area_xy / lx
    lz = area_xz / lx

    return BoxDimensions(
        lx=max(lx, MIN_DIMENSION),
        ly=max(ly, MIN_DIMENSION),
        lz=max(lz, MIN_DIMENSION),
    )
