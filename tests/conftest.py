"""
Shared test fixtures for the weighted die engine.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from die_geometry import BoxDimensions, BubbleConfig


@pytest.fixture
def unit_box():
    """A 1x1x1 die (half-extent 0.5 on every axis)."""
    return BoxDimensions(lx=1.0, ly=1.0, lz=1.0)


@pytest.fixture
def long_box():
    """A 2x1x1 die, long along x."""
    return BoxDimensions(lx=2.0, ly=1.0, lz=1.0)


@pytest.fixture
def uniform_weights():
    return [1.0, 1.0, 1.0, 1.0, 1.0, 1.0]


@pytest.fixture
def loaded_weights():
    """A die loaded toward face 6."""
    return [1.0, 1.0, 1.0, 1.0, 1.0, 5.0]


@pytest.fixture
def rng():
    """Seeded generator so statistical tests are repeatable."""
    return np.random.default_rng(20240601)


@pytest.fixture
def top_bubble():
    """A bubble pushed toward +Y, too large for a unit box at that offset."""
    return BubbleConfig(enabled=True, radius=0.4, offset=(0.0, 0.3, 0.0))


@pytest.fixture
def simulate_script():
    return Path(__file__).resolve().parent.parent / "scripts" / "simulate_die.py"
