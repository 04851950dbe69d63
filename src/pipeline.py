"""Single-path pipeline: die config -> face weights -> bubble bias -> rolls -> summary."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from bubble_physics import apply_bubble_physics
from die_geometry import DEFAULT_BUBBLE, BoxDimensions, BubbleConfig, InvalidInput, clamp_bubble_to_box
from roll_statistics import RollSummary, summarize
from simulator import DEFAULT_SAMPLE_STEP, SimulationResult, simulate_rolls
from weights import normalize_weights, weights_from_dimensions

logger = logging.getLogger(__name__)

MODE_WEIGHTS = "weights"
MODE_DIMENSIONS = "dimensions"
MODES = (MODE_WEIGHTS, MODE_DIMENSIONS)

DEFAULT_WEIGHTS = (1.0, 1.0, 1.0, 1.0, 1.0, 1.0)
DEFAULT_EXPONENT = 1.0
DEFAULT_ROLLS = 1000


@dataclass
class PipelineConfig:
    mode: str = MODE_WEIGHTS
    weights: List[float] = field(default_factory=lambda: list(DEFAULT_WEIGHTS))
    dimensions: BoxDimensions = field(default_factory=BoxDimensions)
    exponent: float = DEFAULT_EXPONENT
    bubble: BubbleConfig = DEFAULT_BUBBLE
    n_rolls: int = DEFAULT_ROLLS
    sample_step: int = DEFAULT_SAMPLE_STEP
    k_override: Optional[float] = None
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        """Build a config from a JSON-style mapping."""
        if not isinstance(data, Mapping):
            raise InvalidInput(f"Config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidInput(f"Unknown config keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = dict(data)
        try:
            if "dimensions" in kwargs:
                kwargs["dimensions"] = BoxDimensions.coerce(kwargs["dimensions"])
            if "bubble" in kwargs:
                bubble = kwargs["bubble"]
                if isinstance(bubble, Mapping):
                    kwargs["bubble"] = BubbleConfig.from_dict(bubble)
                elif not isinstance(bubble, BubbleConfig):
                    raise InvalidInput(
                        f"bubble must be a mapping, got {type(bubble).__name__}"
                    )
            if "weights" in kwargs:
                kwargs["weights"] = [float(w) for w in kwargs["weights"]]
        except (TypeError, ValueError) as exc:
            raise InvalidInput(f"Invalid config value: {exc}") from exc
        return cls(**kwargs)

    def validate(self) -> None:
        if self.mode not in MODES:
            raise InvalidInput(f"mode must be one of {MODES}, got {self.mode!r}")


@dataclass
class ResolvedDie:
    mode: str
    dimensions: BoxDimensions
    base_weights: List[float]
    bubble: BubbleConfig  # clamped to dimensions
    weights: List[float]  # base weights after bubble bias
    probs: List[float]


@dataclass
class PipelineResult:
    die: ResolvedDie
    simulation: SimulationResult
    summary: RollSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.die.mode,
            "dimensions": self.die.dimensions.as_tuple(),
            "base_weights": self.die.base_weights,
            "bubble": {
                "enabled": self.die.bubble.enabled,
                "radius": self.die.bubble.radius,
                "offset": list(self.die.bubble.offset),
            },
            "weights": self.die.weights,
            "probs": self.die.probs,
            "simulation": self.simulation.to_dict(),
            "summary": self.summary.to_dict(),
        }


def die_dimensions(config: PipelineConfig) -> BoxDimensions:
    """Box the bubble lives in: the configured box, or the unit cube in weights mode."""
    if config.mode == MODE_DIMENSIONS:
        return config.dimensions.cleaned()
    return BoxDimensions()


def resolve_weights(config: PipelineConfig) -> ResolvedDie:
    """Work out the face weights and probabilities a config describes."""
    config.validate()
    dims = die_dimensions(config)

    if config.mode == MODE_DIMENSIONS:
        base_weights = weights_from_dimensions(dims, config.exponent)
    else:
        base_weights = list(config.weights)

    bubble = clamp_bubble_to_box(config.bubble, dims)
    weights = list(apply_bubble_physics(base_weights, bubble, dims, config.k_override))
    probs = normalize_weights(weights)

    return ResolvedDie(
        mode=config.mode,
        dimensions=dims,
        base_weights=base_weights,
        bubble=bubble,
        weights=weights,
        probs=probs,
    )


def run_pipeline(
    config: Optional[PipelineConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> PipelineResult:
    if config is None:
        config = PipelineConfig()
    if rng is None:
        rng = np.random.default_rng(config.seed)

    die = resolve_weights(config)
    simulation = simulate_rolls(die.weights, config.n_rolls, config.sample_step, rng=rng)
    summary = summarize(simulation)

    logger.info(
        "Rolled %s-mode die %d times (bubble %s)",
        die.mode, simulation.n, "on" if die.bubble.enabled else "off",
    )
    logger.info(
        "Mean %.4f (expected %.4f), chi-square p=%.3g",
        summary.empirical_mean, summary.theoretical_mean, summary.fit.p_value,
    )
    return PipelineResult(die=die, simulation=simulation, summary=summary)


def with_overrides(config: PipelineConfig, **changes: Any) -> PipelineConfig:
    """Copy of ``config`` with the non-None ``changes`` applied."""
    return replace(config, **{k: v for k, v in changes.items() if v is not None})
