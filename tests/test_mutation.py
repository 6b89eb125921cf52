"""Tests for the mutation operator."""

import numpy as np
import pytest

from breed_art.core.mutation import MutationParams, mutate
from breed_art.errors import ConfigurationError


class TestMutationParams:
    """Tests for MutationParams validation."""

    def test_defaults_valid(self):
        """Default parameters pass validation."""
        MutationParams().validate()

    @pytest.mark.parametrize("rate", [-0.1, 1.5])
    def test_rate_out_of_range(self, rate):
        """Rates outside [0, 1] are rejected."""
        with pytest.raises(ConfigurationError):
            MutationParams(rate=rate).validate()

    def test_negative_sd(self):
        """Negative standard deviations are rejected."""
        with pytest.raises(ConfigurationError):
            MutationParams(sd=-0.1).validate()

    def test_to_dict(self):
        """Dictionary conversion keeps the fields."""
        d = MutationParams(rate=0.2, mean=0.1, sd=0.3).to_dict()
        assert d == {'rate': 0.2, 'mean': 0.1, 'sd': 0.3}


class TestMutate:
    """Tests for mutate."""

    def test_values_clamped(self):
        """Large mutations still leave every value in [0, 1]."""
        rng = np.random.default_rng(0)
        img = rng.random((20, 20, 1, 3))
        params = MutationParams(rate=1.0, mean=0.0, sd=5.0)
        result = mutate(img, params, rng)
        assert result.min() >= 0.0
        assert result.max() <= 1.0

    def test_shifted_mean_clamped(self):
        """A strongly positive mean pushes values to exactly 1."""
        img = np.full((10, 10), 0.5)
        result = mutate(img, MutationParams(rate=1.0, mean=10.0, sd=0.0), np.random.default_rng(1))
        np.testing.assert_array_equal(result, np.ones((10, 10)))

    def test_zero_rate_is_identity(self):
        """With rate 0 the image comes back unchanged."""
        img = np.random.default_rng(2).random((6, 6, 1, 3))
        result = mutate(img, MutationParams(rate=0.0, mean=3.0, sd=2.0), np.random.default_rng(3))
        np.testing.assert_array_equal(result, img)

    def test_input_not_modified(self):
        """The parent image is never changed in place."""
        img = np.random.default_rng(4).random((8, 8))
        original = img.copy()
        result = mutate(img, MutationParams(rate=1.0, sd=0.5), np.random.default_rng(5))
        np.testing.assert_array_equal(img, original)
        assert not np.shares_memory(img, result)

    def test_rate_controls_fraction(self):
        """About rate * size elements change."""
        img = np.full((100, 100), 0.5)
        result = mutate(img, MutationParams(rate=0.2, sd=0.1), np.random.default_rng(6))
        changed = np.mean(result != img)
        assert 0.17 < changed < 0.23

    def test_deterministic_with_seed(self):
        """The same generator seed gives the same mutation."""
        img = np.random.default_rng(7).random((10, 10))
        params = MutationParams(rate=0.3, sd=0.2)
        a = mutate(img, params, np.random.default_rng(42))
        b = mutate(img, params, np.random.default_rng(42))
        np.testing.assert_array_equal(a, b)

    def test_shape_preserved(self):
        """Output has the input's shape."""
        img = np.random.default_rng(8).random((3, 4, 2, 3))
        result = mutate(img, MutationParams(), np.random.default_rng(9))
        assert result.shape == img.shape
