"""
Air-bubble bias for the die.

A cavity offset from the box center moves the solid's center of mass the
other way. Faces whose outward normal points along that shift get heavier
(more likely to land down) through an exponential multiplier. This is a
closed-form heuristic, not a rigid-body model.
"""
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from die_geometry import (
    FACE_NORMALS,
    N_FACES,
    BoxDimensions,
    BubbleConfig,
    clamp_bubble_to_box,
)
from weights import as_weight_array

logger = logging.getLogger(__name__)

# Lower bound on the solid volume when the cavity nearly fills the box
MIN_SOLID_VOLUME = 1e-12

# Sensitivity numerator; k = K_SCALE / smallest half-extent
K_SCALE = 8.0


def default_sensitivity(dims: BoxDimensions) -> float:
    """Exponential sensitivity scaled to the smallest half-extent."""
    return K_SCALE / float(np.min(BoxDimensions.coerce(dims).half_extents))


def center_of_mass_shift(bubble: BubbleConfig, dims: BoxDimensions) -> np.ndarray:
    """Displacement of the solid's center of mass caused by the cavity.

    ``bubble`` must already be clamped to ``dims``.
    """
    v_die = BoxDimensions.coerce(dims).volume
    v_bubble = bubble.volume
    v_solid = max(v_die - v_bubble, MIN_SOLID_VOLUME)
    alpha = v_bubble / v_solid
    return -alpha * bubble.offset_array


def apply_bubble_physics(
    base_weights: Sequence[float],
    bubble: Optional[BubbleConfig],
    dims: Optional[BoxDimensions] = None,
    k_override: Optional[float] = None,
) -> List[float]:
    """Bias face weights for an off-center air bubble.

    Args:
        base_weights: Six non-negative face weights.
        bubble: Cavity config; ``None`` or disabled leaves weights as given.
        dims: Box the bubble lives in (unit cube if omitted).
        k_override: Sensitivity to use instead of the default when finite.

    Returns:
        Adjusted weights, or ``base_weights`` itself when the bubble has no
        effect.

    Raises:
        InvalidInput: a weight is negative or non-finite.
    """
    if bubble is None or not bubble.enabled:
        return base_weights
    if len(base_weights) != N_FACES:
        return base_weights

    weights = as_weight_array(base_weights, name="base_weights")
    clean = BoxDimensions.coerce(dims).cleaned()

    effective = clamp_bubble_to_box(bubble, clean)
    if effective.radius <= 0:
        return base_weights

    com_shift = center_of_mass_shift(effective, clean)

    if k_override is not None and math.isfinite(k_override):
        k = float(k_override)
    else:
        k = default_sensitivity(clean)

    dh = FACE_NORMALS @ com_shift
    with np.errstate(over="ignore", invalid="ignore"):
        adjusted = np.maximum(weights * np.exp(-k * dh), 0.0)

    # An overflowing multiplier gives inf, or nan on a zero weight
    if not np.all(np.isfinite(adjusted)) or not adjusted.sum() > 0:
        logger.debug("Bubble adjustment left no usable weights, keeping base weights")
        return base_weights

    logger.debug(
        "Bubble r=%.4g offset=%s shifted COM by %s (k=%.4g)",
        effective.radius, effective.offset, np.round(com_shift, 6).tolist(), k,
    )
    return adjusted.tolist()
