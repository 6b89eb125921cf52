"""Tests for correlation fitness."""

import warnings

import numpy as np
import pytest

from breed_art.core.fitness import (
    DEGENERATE_SCORE,
    TargetScorer,
    fitness,
    is_degenerate,
)
from breed_art.errors import ShapeMismatchError


class TestFitness:
    """Tests for fitness scoring."""

    def test_identical_images(self):
        """An image correlates perfectly with itself."""
        img = np.random.default_rng(0).random((10, 10, 1, 3))
        assert fitness(img, img) == pytest.approx(1.0)

    def test_inverted_image(self):
        """An inverted image has correlation -1."""
        img = np.random.default_rng(1).random((10, 10))
        assert fitness(1.0 - img, img) == pytest.approx(-1.0)

    def test_matches_numpy_corrcoef(self):
        """Scores agree with numpy's Pearson correlation."""
        rng = np.random.default_rng(2)
        a = rng.random((8, 8, 1, 3))
        b = rng.random((8, 8, 1, 3))
        expected = np.corrcoef(a.ravel(), b.ravel())[0, 1]
        assert fitness(a, b) == pytest.approx(expected)

    def test_score_in_range(self):
        """Scores lie in [-1, 1]."""
        rng = np.random.default_rng(3)
        target = rng.random((5, 5))
        for _ in range(20):
            score = fitness(rng.random((5, 5)), target)
            assert -1.0 <= score <= 1.0

    def test_constant_candidate_is_degenerate(self):
        """A constant candidate yields the degenerate marker, no warning."""
        target = np.random.default_rng(4).random((6, 6))
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            score = fitness(np.full((6, 6), 0.3), target)
        assert is_degenerate(score)

    def test_constant_target_is_degenerate(self):
        """A constant target makes every score degenerate."""
        candidate = np.random.default_rng(5).random((6, 6))
        assert is_degenerate(fitness(candidate, np.zeros((6, 6))))

    @pytest.mark.parametrize("value", [0.1, 0.2, 0.7, 51 / 255, 77 / 255])
    def test_constant_with_inexact_mean(self, value):
        """Constants whose float mean is not exact are still degenerate."""
        image = np.full((9, 7, 1, 3), value)
        target = np.random.default_rng(7).random(image.shape)
        assert is_degenerate(fitness(image, target))
        assert is_degenerate(fitness(target, image))
        assert TargetScorer(image).is_degenerate

    def test_marker_is_nan(self):
        """The marker is detectable as NaN."""
        assert np.isnan(DEGENERATE_SCORE)
        assert not is_degenerate(0.0)

    def test_shape_mismatch(self):
        """Differently shaped images cannot be scored."""
        with pytest.raises(ShapeMismatchError):
            fitness(np.zeros((3, 3)), np.zeros((3, 4)))


class TestTargetScorer:
    """Tests for the cached target scorer."""

    def test_agrees_with_fitness(self):
        """The scorer and fitness() agree."""
        rng = np.random.default_rng(6)
        target = rng.random((7, 7, 1, 3))
        scorer = TargetScorer(target)
        for _ in range(5):
            candidate = rng.random(target.shape)
            assert scorer.score(candidate) == pytest.approx(fitness(candidate, target))

    def test_shape_property(self):
        """The scorer exposes the target shape."""
        assert TargetScorer(np.zeros((2, 3, 1, 1))).shape == (2, 3, 1, 1)

    def test_degenerate_target_flag(self):
        """A constant target is flagged."""
        assert TargetScorer(np.ones((3, 3))).is_degenerate
        assert not TargetScorer(np.eye(3)).is_degenerate
