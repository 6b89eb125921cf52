"""Tests for mutation size tables and plots."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from scipy.stats import norm

from breed_art.visualization.mutation_sizes import get_mutation_sizes, plot_mutation_sizes
from breed_art.visualization.renderer import (
    plot_fitness_history,
    render_population,
    save_figure,
)
from breed_art.errors import ConfigurationError


class TestMutationSizes:
    """Tests for get_mutation_sizes."""

    def test_points(self):
        """Sizes run from -1 to 1 in steps of 0.1."""
        sizes = get_mutation_sizes(0.0, 0.15)
        assert len(sizes.size) == 21
        assert sizes.size[0] == -1.0
        assert sizes.size[-1] == 1.0
        assert sizes.size[10] == 0.0

    def test_interior_is_normal_density(self):
        sizes = get_mutation_sizes(0.1, 0.3)
        assert sizes.density[10] == pytest.approx(norm.pdf(0.0, loc=0.1, scale=0.3))

    def test_tails_added_to_endpoints(self):
        """Endpoint bins absorb the probability outside [-1, 1]."""
        mean, sd = 0.2, 0.8
        sizes = get_mutation_sizes(mean, sd)
        expected_low = norm.pdf(-1.0, mean, sd) + norm.cdf(-1.0, mean, sd)
        expected_high = norm.pdf(1.0, mean, sd) + norm.sf(1.0, mean, sd)
        assert sizes.density[0] == pytest.approx(expected_low)
        assert sizes.density[-1] == pytest.approx(expected_high)

    def test_symmetric_for_zero_mean(self):
        sizes = get_mutation_sizes(0.0, 0.5)
        np.testing.assert_allclose(sizes.density, sizes.density[::-1])

    def test_invalid_sd(self):
        with pytest.raises(ConfigurationError):
            get_mutation_sizes(0.0, 0.0)

    def test_to_dict(self):
        d = get_mutation_sizes(0.0, 0.15).to_dict()
        assert set(d) == {'size', 'density'}
        assert len(d['size']) == len(d['density'])


class TestPlots:
    """Smoke tests for plotting helpers."""

    def test_mutation_size_plot(self, tmp_path):
        fig = plot_mutation_sizes(0.0, 0.15)
        path = save_figure(fig, tmp_path / "sizes.png")
        assert path.exists()

    def test_fitness_history_plot(self, tmp_path):
        fig = plot_fitness_history([0.1, 0.2, 0.35], initial_fitness=0.0)
        line = fig.axes[0].lines[0]
        assert list(line.get_xdata()) == [0, 1, 2, 3]
        save_figure(fig, tmp_path / "history.png")

    def test_render_population(self, tmp_path):
        pop = np.random.default_rng(0).random((7, 6, 4, 1, 3))
        fig = render_population(pop, cols=3)
        assert len(fig.axes) == 9
        save_figure(fig, tmp_path / "pop.png")

    def test_render_grayscale_population(self):
        pop = np.random.default_rng(1).random((2, 6, 4, 1, 1))
        fig = render_population(pop, labels=["a", "b"])
        assert fig.axes[0].get_title() == "a"
