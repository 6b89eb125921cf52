"""Tests for replication and truncation selection."""

import numpy as np
import pytest

from breed_art.core.fitness import TargetScorer
from breed_art.core.image import random_population
from breed_art.core.mutation import MutationParams, mutate
from breed_art.core.selection import (
    SelectionParams,
    mean_fitness,
    ranking,
    replicate,
    truncate,
)
from breed_art.errors import ConfigurationError


class TestSelectionParams:
    """Tests for SelectionParams."""

    def test_replicate_size(self):
        """replicate_size is popsize / selection_rate."""
        assert SelectionParams(popsize=10, selection_rate=0.1).replicate_size == 100
        assert SelectionParams(popsize=4, selection_rate=0.5).replicate_size == 8
        assert SelectionParams(popsize=5, selection_rate=1.0).replicate_size == 5

    def test_float_rounding_tolerated(self):
        """3 / 0.1 is 30.000000000000004 in floating point but is whole."""
        assert SelectionParams(popsize=3, selection_rate=0.1).replicate_size == 30

    def test_fractional_replicate_size(self):
        """Non-integer replicate sizes are configuration errors."""
        with pytest.raises(ConfigurationError):
            SelectionParams(popsize=10, selection_rate=0.3).validate()

    @pytest.mark.parametrize("rate", [0.0, -0.5, 1.5])
    def test_selection_rate_range(self, rate):
        """Selection rates outside (0, 1] are rejected."""
        with pytest.raises(ConfigurationError):
            SelectionParams(popsize=10, selection_rate=rate).validate()

    def test_popsize_positive(self):
        """popsize must be at least 1."""
        with pytest.raises(ConfigurationError):
            SelectionParams(popsize=0, selection_rate=0.5).validate()

    def test_popsize_integer(self):
        """popsize must be an integer."""
        with pytest.raises(ConfigurationError):
            SelectionParams(popsize=2.5, selection_rate=0.5).validate()


class TestReplicate:
    """Tests for replicate."""

    def test_size_and_membership(self):
        """Children are copies of population members."""
        pop = np.stack([np.full((2, 2), v) for v in (0.1, 0.2, 0.3)])
        children = replicate(pop, 30, np.random.default_rng(0))
        assert children.shape == (30, 2, 2)
        assert set(np.round(children[:, 0, 0], 6)) <= {0.1, 0.2, 0.3}

    def test_children_do_not_alias_parents(self):
        """Writing to a child leaves the parent intact."""
        pop = np.zeros((2, 3, 3))
        children = replicate(pop, 4, np.random.default_rng(1))
        children[0] += 1
        assert pop.sum() == 0
        assert not np.shares_memory(pop, children)

    def test_sampling_with_replacement(self):
        """Each parent can appear many times."""
        pop = np.arange(2, dtype=float).reshape(2, 1)
        children = replicate(pop, 50, np.random.default_rng(2))
        counts = np.bincount(children[:, 0].astype(int), minlength=2)
        assert counts.sum() == 50
        assert counts.min() > 0


class TestTruncate:
    """Tests for ranking and truncate."""

    def test_keeps_best(self):
        """The highest scores survive, best first."""
        children = np.arange(5, dtype=float).reshape(5, 1)
        scores = np.array([0.1, 0.9, 0.5, 0.7, 0.3])
        survivors, kept = truncate(children, scores, 2)
        np.testing.assert_array_equal(survivors[:, 0], [1.0, 3.0])
        np.testing.assert_array_equal(kept, [0.9, 0.7])

    def test_nan_ranked_last(self):
        """Degenerate scores are dropped before valid ones."""
        scores = np.array([np.nan, -0.5, np.nan, 0.2])
        assert list(ranking(scores)) == [3, 1, 0, 2]

    def test_all_nan(self):
        """All-degenerate scores still yield a full population."""
        children = np.zeros((4, 2))
        survivors, kept = truncate(children, np.full(4, np.nan), 2)
        assert len(survivors) == 2
        assert np.isnan(kept).all()

    def test_ties_stable(self):
        """Equal scores keep their original order."""
        scores = np.array([0.5, 0.5, 0.5, 0.1])
        assert list(ranking(scores)) == [0, 1, 2, 3]

    def test_too_few_children(self):
        """Cannot keep more survivors than children."""
        with pytest.raises(ConfigurationError):
            truncate(np.zeros((2, 2)), np.zeros(2), 3)

    def test_score_count_mismatch(self):
        """Every child needs exactly one score."""
        with pytest.raises(ConfigurationError):
            truncate(np.zeros((3, 2)), np.zeros(2), 1)

    def test_selection_does_not_lower_mean(self):
        """Truncating 100 children to 10 keeps a mean at least the pool's."""
        rng = np.random.default_rng(3)
        target = rng.random((6, 6, 1, 3))
        scorer = TargetScorer(target)
        params = SelectionParams(popsize=10, selection_rate=0.1)

        pop = random_population(target, params.popsize, rng)
        children = replicate(pop, params.replicate_size, rng)
        children = np.stack([mutate(c, MutationParams(), rng) for c in children])
        scores = np.array([scorer.score(c) for c in children])

        survivors, kept = truncate(children, scores, params.popsize)
        assert len(survivors) == 10
        assert kept.mean() >= scores.mean()


class TestMeanFitness:
    """Tests for mean_fitness."""

    def test_plain_mean(self):
        assert mean_fitness(np.array([0.2, 0.4])) == pytest.approx(0.3)

    def test_ignores_nan(self):
        assert mean_fitness(np.array([0.2, np.nan, 0.4])) == pytest.approx(0.3)

    def test_all_nan(self):
        assert np.isnan(mean_fitness(np.array([np.nan, np.nan])))
