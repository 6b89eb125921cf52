"""Rendering utilities for evolution results."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    import matplotlib.figure


def _display_array(image: np.ndarray, frame: int = 0) -> np.ndarray:
    """Turn a (width, height[, frames], channels) image into imshow layout."""
    arr = np.asarray(image, dtype=np.float64)
    if arr.ndim == 4:
        arr = arr[:, :, frame, :]
    if arr.ndim == 3:
        arr = arr.transpose(1, 0, 2)
        if arr.shape[2] == 1:
            arr = arr[:, :, 0]
    elif arr.ndim == 2:
        arr = arr.T
    return np.clip(arr, 0.0, 1.0)


def plot_fitness_history(
    fitness_history: Sequence[float],
    initial_fitness: float | None = None,
    title: str = "Average population fitness",
) -> "matplotlib.figure.Figure":
    """Line plot of the mean kept fitness per generation.

    Args:
        fitness_history: One value per generation.
        initial_fitness: Optional score of the random starting population,
            drawn at generation 0.
        title: Figure title.

    Returns:
        Matplotlib Figure object.
    """
    import matplotlib.pyplot as plt

    history = np.asarray(fitness_history, dtype=np.float64)
    generations = np.arange(1, len(history) + 1)

    if initial_fitness is not None and np.isfinite(initial_fitness):
        history = np.concatenate([[initial_fitness], history])
        generations = np.concatenate([[0], generations])

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(generations, history, color="darkgreen")
    ax.set_xlabel("Generation")
    ax.set_ylabel("Correlation with target")
    ax.set_title(title)
    ax.grid(alpha=0.3)

    fig.tight_layout()
    return fig


def render_population(
    images: Sequence[np.ndarray] | np.ndarray,
    labels: Sequence[str] | None = None,
    cols: int = 5,
    frame: int = 0,
) -> "matplotlib.figure.Figure":
    """Show every member of a population in a grid.

    Args:
        images: Population array or list of images.
        labels: Optional label per image.
        cols: Number of columns in the grid.
        frame: Frame shown for multi-frame images.

    Returns:
        Matplotlib Figure with all images arranged in a grid.
    """
    import matplotlib.pyplot as plt

    n = len(images)
    cols = max(1, min(cols, n))
    rows = (n + cols - 1) // cols

    fig, axes = plt.subplots(rows, cols, figsize=(2.5 * cols, 2.5 * rows), squeeze=False)

    for idx in range(rows * cols):
        ax = axes[idx // cols, idx % cols]
        ax.axis("off")
        if idx >= n:
            continue
        data = _display_array(images[idx], frame=frame)
        ax.imshow(data, cmap="gray" if data.ndim == 2 else None, vmin=0, vmax=1,
                  interpolation="nearest")
        if labels is not None:
            ax.set_title(labels[idx], fontsize=8)

    fig.tight_layout()
    return fig


def save_figure(fig: "matplotlib.figure.Figure", path: str | Path, dpi: int = 100) -> Path:
    """Save a figure and close it."""
    import matplotlib.pyplot as plt

    path = Path(path)
    fig.savefig(path, dpi=dpi, bbox_inches="tight", pad_inches=0.1)
    plt.close(fig)
    return path
