"""Tests for sampler module."""
import numpy as np
import pytest

from die_geometry import InvalidInput
from sampler import build_cdf, roll_from_probs, roll_weighted_die, sample_index
from weights import normalize_weights


class TestBuildCdf:
    """Test cumulative distribution construction."""

    def test_uniform(self, uniform_weights):
        cdf = build_cdf(normalize_weights(uniform_weights))
        assert cdf == pytest.approx([1 / 6, 2 / 6, 3 / 6, 4 / 6, 5 / 6, 1.0])

    def test_last_entry_exactly_one(self):
        # Tenths do not sum to exactly 1.0 in floating point
        cdf = build_cdf([0.1] * 10)
        assert cdf[-1] == 1.0

    def test_non_decreasing(self, rng):
        for _ in range(20):
            probs = normalize_weights(rng.uniform(0, 1, size=6).tolist())
            cdf = build_cdf(probs)
            assert all(b >= a for a, b in zip(cdf, cdf[1:]))
            assert cdf[-1] == 1.0

    def test_renormalizes_raw_weights(self):
        assert build_cdf([2, 2]) == pytest.approx([0.5, 1.0])

    def test_all_zero_is_uniform(self):
        assert build_cdf([0, 0, 0, 0]) == pytest.approx([0.25, 0.5, 0.75, 1.0])

    def test_invalid(self):
        with pytest.raises(InvalidInput):
            build_cdf([0.5, -0.5])


class TestSampleIndex:
    """Test inverse-CDF lookup."""

    def test_zero_maps_to_first(self):
        assert sample_index([0.2, 0.5, 1.0], 0.0) == 0

    def test_tie_goes_to_lower_index(self):
        assert sample_index([0.2, 0.5, 1.0], 0.5) == 1
        assert sample_index([0.2, 0.5, 1.0], 0.2) == 0

    def test_between_entries(self):
        assert sample_index([0.2, 0.5, 1.0], 0.3) == 1
        assert sample_index([0.2, 0.5, 1.0], 0.99) == 2

    def test_above_every_entry_returns_last(self):
        assert sample_index([0.2, 0.5, 0.9], 0.95) == 2

    def test_zero_probability_faces(self):
        cdf = build_cdf([0, 1, 0, 1])
        # Only u == 0 exactly can land on a leading zero-probability face
        assert sample_index(cdf, 0.0) == 0
        assert sample_index(cdf, 0.25) == 1
        assert sample_index(cdf, 0.75) == 3


class TestRollFromProbs:
    """Test single draws."""

    def test_agrees_with_cdf_lookup(self, loaded_weights):
        probs = normalize_weights(loaded_weights)
        cdf = build_cdf(probs)
        for seed in range(200):
            direct = roll_from_probs(probs, rng=np.random.default_rng(seed))
            u = np.random.default_rng(seed).random()
            assert direct == sample_index(cdf, u)

    def test_unnormalized_probs_agree(self):
        weights = [3.0, 0.0, 1.0, 2.0, 0.5, 0.5]
        cdf = build_cdf(weights)
        for seed in range(200):
            direct = roll_from_probs(weights, rng=np.random.default_rng(seed))
            u = np.random.default_rng(seed).random()
            assert direct == sample_index(cdf, u)

    def test_certain_face(self, rng):
        for _ in range(50):
            assert roll_from_probs([0, 0, 0, 1, 0, 0], rng=rng) == 3

    def test_in_range_without_rng(self):
        assert 0 <= roll_from_probs([0.5, 0.5]) <= 1

    @pytest.mark.parametrize("bad", [
        [],
        [0, 0, 0],
        [0.5, -0.1, 0.6],
        [float("nan"), 1.0],
    ])
    def test_invalid(self, bad):
        with pytest.raises(InvalidInput):
            roll_from_probs(bad)


class TestRollWeightedDie:

    def test_certain_face(self, rng):
        assert roll_weighted_die([0, 0, 0, 0, 0, 7], rng=rng) == 5

    def test_all_zero_weights_still_roll(self, rng):
        assert 0 <= roll_weighted_die([0] * 6, rng=rng) <= 5
