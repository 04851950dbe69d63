"""
Core geometry types for the weighted die.

Provides the face-normal convention shared by every module, box dimensions
with the minimum-edge floor, the air-bubble (spherical cavity) config, and the
clamp that keeps a bubble fully inside its box.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Mapping, Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Smallest edge length used anywhere geometry is computed
MIN_DIMENSION = 0.01

N_FACES = 6

# Face i (label i + 1) lands face-down when its outward normal points down.
FACE_NORMALS = np.array([
    [0.0, 1.0, 0.0],   # Face 1 (+Y)
    [1.0, 0.0, 0.0],   # Face 2 (+X)
    [0.0, 0.0, 1.0],   # Face 3 (+Z)
    [0.0, 0.0, -1.0],  # Face 4 (-Z)
    [-1.0, 0.0, 0.0],  # Face 5 (-X)
    [0.0, -1.0, 0.0],  # Face 6 (-Y)
])


class InvalidInput(ValueError):
    """A numeric argument is non-finite or outside its allowed range."""


@dataclass(frozen=True)
class BoxDimensions:
    """Edge lengths of the die along x, y and z."""

    lx: float = 1.0
    ly: float = 1.0
    lz: float = 1.0

    def cleaned(self) -> "BoxDimensions":
        """Copy with every edge floored to MIN_DIMENSION."""
        for name, value in (("lx", self.lx), ("ly", self.ly), ("lz", self.lz)):
            if not math.isfinite(value):
                raise InvalidInput(f"{name} must be a finite number, got {value!r}")
        return BoxDimensions(
            lx=max(float(self.lx), MIN_DIMENSION),
            ly=max(float(self.ly), MIN_DIMENSION),
            lz=max(float(self.lz), MIN_DIMENSION),
        )

    @property
    def half_extents(self) -> np.ndarray:
        clean = self.cleaned()
        return np.array([clean.lx, clean.ly, clean.lz]) / 2.0

    @property
    def volume(self) -> float:
        clean = self.cleaned()
        return clean.lx * clean.ly * clean.lz

    def as_tuple(self) -> Vec3:
        return (self.lx, self.ly, self.lz)

    @classmethod
    def coerce(
        cls,
        value: Union["BoxDimensions", Mapping[str, float], Sequence[float], None],
    ) -> "BoxDimensions":
        """Accept a BoxDimensions, an {lx, ly, lz} mapping or a 3-sequence.

        ``None`` means the unit cube.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(lx=float(value["lx"]), ly=float(value["ly"]), lz=float(value["lz"]))
            except KeyError as exc:
                raise InvalidInput(f"Box dimensions missing key {exc}") from exc
        values = list(value)
        if len(values) != 3:
            raise InvalidInput(f"Box dimensions need 3 values, got {len(values)}")
        return cls(*(float(v) for v in values))


@dataclass(frozen=True)
class BubbleConfig:
    """A spherical air cavity inside the die.

    The offset is measured from the box center. Instances are never mutated;
    clamping returns a new config.
    """

    enabled: bool = False
    radius: float = 0.1
    offset: Vec3 = field(default=(0.0, 0.0, 0.0))

    @property
    def offset_array(self) -> np.ndarray:
        return np.asarray(self.offset, dtype=float)

    @property
    def volume(self) -> float:
        return (4.0 / 3.0) * math.pi * self.radius ** 3

    @classmethod
    def from_dict(cls, data: Mapping) -> "BubbleConfig":
        offset = data.get("offset", (0.0, 0.0, 0.0))
        if isinstance(offset, Mapping):
            offset = (offset.get("x", 0.0), offset.get("y", 0.0), offset.get("z", 0.0))
        offset = tuple(float(v) for v in offset)
        if len(offset) != 3:
            raise InvalidInput(f"Bubble offset needs 3 values, got {len(offset)}")
        enabled = data.get("enabled", False)
        if not isinstance(enabled, (bool, np.bool_)):
            raise InvalidInput(f"Bubble 'enabled' must be true or false, got {enabled!r}")
        return cls(
            enabled=bool(enabled),
            radius=float(data.get("radius", cls.radius)),
            offset=offset,
        )


DEFAULT_BUBBLE = BubbleConfig()


def clamp_bubble_to_box(bubble: BubbleConfig, dims: BoxDimensions) -> BubbleConfig:
    """Constrain a bubble's radius and offset so the sphere stays inside the box.

    Radius and offset limit each other, so the offset is clamped to the box,
    the radius to the room left at that offset, and then the offset again to
    the room left for that radius.

    Args:
        bubble: Requested bubble. Returned unchanged when disabled.
        dims: Box dimensions (floored to MIN_DIMENSION).

    Returns:
        A clamped copy of ``bubble``.
    """
    if not bubble.enabled:
        return bubble

    if math.isnan(bubble.radius) or np.isnan(bubble.offset_array).any():
        raise InvalidInput("Bubble radius and offset must not be NaN")

    half = BoxDimensions.coerce(dims).half_extents

    offset = np.clip(bubble.offset_array, -half, half)

    max_radius = max(0.0, float(np.min(half - np.abs(offset))))
    radius = min(max(float(bubble.radius), 0.0), max_radius)

    room = half - radius
    offset = np.clip(offset, -room, room)

    if radius != bubble.radius:
        logger.debug("Bubble radius clamped %.4g -> %.4g", bubble.radius, radius)

    return replace(
        bubble,
        radius=radius,
        offset=(float(offset[0]), float(offset[1]), float(offset[2])),
    )
