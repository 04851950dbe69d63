#!/usr/bin/env python3
"""
Roll a weighted die and report convergence statistics.

Face weights come from --weights, or from box dimensions with --dims. An
optional air bubble biases the die toward the faces its center of mass
shifts to.

Usage:
    python scripts/simulate_die.py --rolls 6000
    python scripts/simulate_die.py --weights 1 1 1 1 1 3 --rolls 10000 --seed 7
    python scripts/simulate_die.py --dims 2 1 1 --bubble-radius 0.2 --bubble-offset 0 0.25 0
    python scripts/simulate_die.py --config die.json --json
"""
import sys
import json
import argparse
import logging
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from die_geometry import BoxDimensions, BubbleConfig, InvalidInput
from pipeline import (
    MODE_DIMENSIONS,
    MODE_WEIGHTS,
    PipelineConfig,
    run_pipeline,
    with_overrides,
)


def build_config(args, parser) -> PipelineConfig:
    if args.config:
        config_path = Path(args.config)
        if not config_path.is_file():
            parser.error(f"Config file not found: {config_path}")
        try:
            payload = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            parser.error(f"Config file is not valid JSON: {exc}")
        config = PipelineConfig.from_dict(payload)
    else:
        config = PipelineConfig()

    if args.weights and args.dims:
        parser.error("--weights and --dims are mutually exclusive")
    if args.weights:
        config = with_overrides(config, mode=MODE_WEIGHTS, weights=list(args.weights))
    if args.dims:
        config = with_overrides(config, mode=MODE_DIMENSIONS, dimensions=BoxDimensions(*args.dims))

    if args.bubble_radius is not None or args.bubble_offset is not None:
        bubble = BubbleConfig(
            enabled=True,
            radius=args.bubble_radius if args.bubble_radius is not None else config.bubble.radius,
            offset=tuple(args.bubble_offset) if args.bubble_offset is not None else config.bubble.offset,
        )
        config = with_overrides(config, bubble=bubble)

    return with_overrides(
        config,
        exponent=args.exponent,
        n_rolls=args.rolls,
        sample_step=args.sample_step,
        k_override=args.k,
        seed=args.seed,
    )


def print_report(result) -> None:
    die = result.die
    sim = result.simulation
    summary = result.summary

    print(f"Mode: {die.mode}  box: {die.dimensions.lx:.3g} x {die.dimensions.ly:.3g} x {die.dimensions.lz:.3g}")
    if die.bubble.enabled:
        ox, oy, oz = die.bubble.offset
        print(f"Bubble: r={die.bubble.radius:.4g} offset=({ox:.4g}, {oy:.4g}, {oz:.4g})")

    print(f"\n{'Face':>4} {'Weight':>10} {'P(theory)':>10} {'Count':>8} {'P(sample)':>10}")
    for i, (w, p, c, f) in enumerate(zip(die.weights, die.probs, sim.counts, sim.rel_freq)):
        print(f"{i + 1:>4} {w:>10.4f} {p:>10.4f} {c:>8d} {f:>10.4f}")

    print(f"\nRolls: {sim.n}")
    print(f"E[X]   theoretical {summary.theoretical_mean:.4f}  empirical {summary.empirical_mean:.4f}")
    print(f"Var[X] theoretical {summary.theoretical_variance:.4f}  empirical {summary.empirical_variance:.4f}")
    print(f"Chi-square {summary.fit.statistic:.3f} (dof {summary.fit.dof}), p = {summary.fit.p_value:.4f}")


def main():
    parser = argparse.ArgumentParser(
        description="Simulate rolls of a weighted or irregular die.",
    )
    parser.add_argument(
        "--weights", type=float, nargs=6, default=None,
        metavar="W",
        help="Six face weights in face order 1-6 (+Y, +X, +Z, -Z, -X, -Y)",
    )
    parser.add_argument(
        "--dims", type=float, nargs=3, default=None,
        metavar=("LX", "LY", "LZ"),
        help="Box edge lengths; face weights follow face areas",
    )
    parser.add_argument(
        "--exponent", type=float, default=None,
        help="Area exponent for --dims (default: 1)",
    )
    parser.add_argument(
        "--bubble-radius", type=float, default=None,
        help="Enable an air bubble with this radius",
    )
    parser.add_argument(
        "--bubble-offset", type=float, nargs=3, default=None,
        metavar=("X", "Y", "Z"),
        help="Bubble center offset from the box center",
    )
    parser.add_argument(
        "--k", type=float, default=None,
        help="Bubble sensitivity (default: 8 / smallest half-extent)",
    )
    parser.add_argument(
        "--rolls", type=float, default=None,
        help="Number of rolls (default: 1000)",
    )
    parser.add_argument(
        "--sample-step", type=float, default=None,
        help="Record the running mean every N rolls (default: 10)",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for a reproducible run",
    )
    parser.add_argument(
        "--config", default=None,
        help="JSON file with PipelineConfig fields",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the full result as JSON",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args, parser)
        result = run_pipeline(config)
    except InvalidInput as exc:
        parser.error(str(exc))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_report(result)


if __name__ == "__main__":
    main()
