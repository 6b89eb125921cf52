"""Distribution of mutation sizes, for display next to the mutation settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

import numpy as np
from scipy.stats import norm

from breed_art.errors import ConfigurationError

if TYPE_CHECKING:
    import matplotlib.figure


@dataclass
class MutationSizes:
    """Normal density sampled over mutation sizes in [-1, 1].

    The first and last bins also hold the probability of falling below -1
    or above 1, since such mutations saturate a pixel anyway.
    """

    size: np.ndarray
    density: np.ndarray

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            'size': self.size.tolist(),
            'density': self.density.tolist(),
        }


def get_mutation_sizes(mutation_mean: float, mutation_sd: float, step: float = 0.1) -> MutationSizes:
    """Tabulate the mutation size density.

    Args:
        mutation_mean: Mean mutation size.
        mutation_sd: Standard deviation of mutation sizes.
        step: Spacing of the size points between -1 and 1.

    Returns:
        MutationSizes with one density value per size point.
    """
    if not mutation_sd > 0:
        raise ConfigurationError(f"mutation_sd must be > 0, got {mutation_sd}")
    if not 0 < step <= 1:
        raise ConfigurationError(f"step must be in (0, 1], got {step}")

    num_points = int(round(2.0 / step)) + 1
    points = np.round(np.linspace(-1.0, 1.0, num_points), 10)
    density = norm.pdf(points, loc=mutation_mean, scale=mutation_sd)

    lower_tail = norm.cdf(-1.0, loc=mutation_mean, scale=mutation_sd)
    upper_tail = norm.sf(1.0, loc=mutation_mean, scale=mutation_sd)

    density[0] += lower_tail
    density[-1] += upper_tail

    return MutationSizes(size=points, density=density)


def plot_mutation_sizes(
    mutation_mean: float,
    mutation_sd: float,
    title: str | None = None,
) -> "matplotlib.figure.Figure":
    """Bar chart of :func:`get_mutation_sizes`."""
    import matplotlib.pyplot as plt

    sizes = get_mutation_sizes(mutation_mean, mutation_sd)

    fig, ax = plt.subplots(figsize=(6, 4))
    ax.bar(sizes.size, sizes.density, width=0.08, color="steelblue")
    ax.set_xlim(-1.1, 1.1)
    ax.set_xlabel("Mutation size")
    ax.set_ylabel("Density")
    ax.set_title(title or f"Mutation sizes (mean={mutation_mean:g}, sd={mutation_sd:g})")

    fig.tight_layout()
    return fig
