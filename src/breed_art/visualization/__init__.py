"""Plots for mutation sizes, fitness history and populations."""

from breed_art.visualization.mutation_sizes import (
    MutationSizes,
    get_mutation_sizes,
    plot_mutation_sizes,
)
from breed_art.visualization.renderer import (
    plot_fitness_history,
    render_population,
    save_figure,
)

__all__ = [
    "MutationSizes",
    "get_mutation_sizes",
    "plot_mutation_sizes",
    "plot_fitness_history",
    "render_population",
    "save_figure",
]
