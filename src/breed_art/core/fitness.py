"""Fitness scoring by linear correlation with the target image.

A candidate's fitness is the Pearson correlation between its flattened
values and the flattened target. Correlation is undefined when either
vector is constant; that case scores ``DEGENERATE_SCORE`` (NaN) so that
selection can rank it last instead of the generation failing.
"""

from __future__ import annotations

import math

import numpy as np

from breed_art.errors import ShapeMismatchError

DEGENERATE_SCORE = float("nan")


def is_degenerate(score: float) -> bool:
    """True if ``score`` is the zero-variance marker."""
    return math.isnan(score)


class TargetScorer:
    """Scores candidates against one fixed target.

    The centred target and its norm are computed once and shared read-only
    by every call, including calls made from worker threads.
    """

    def __init__(self, target: np.ndarray):
        self.target = np.asarray(target, dtype=np.float64)
        flat = self.target.ravel()
        self._constant = bool(flat.max() == flat.min())
        self._centred = flat - flat.mean()
        self._norm = float(np.sqrt(np.dot(self._centred, self._centred)))

    @property
    def shape(self) -> tuple:
        return self.target.shape

    @property
    def is_degenerate(self) -> bool:
        return self._constant

    def score(self, candidate: np.ndarray) -> float:
        """Pearson correlation of ``candidate`` with the target."""
        candidate = np.asarray(candidate)
        if candidate.shape != self.target.shape:
            raise ShapeMismatchError(self.target.shape, candidate.shape)

        flat = candidate.ravel().astype(np.float64, copy=False)

        # Centring a constant on a float mean can leave rounding residue,
        # so constancy is tested on the raw values
        if self._constant or flat.max() == flat.min():
            return DEGENERATE_SCORE

        centred = flat - flat.mean()
        norm = float(np.sqrt(np.dot(centred, centred)))
        r = float(np.dot(centred, self._centred)) / (norm * self._norm)
        # Rounding can push |r| a hair past 1
        return min(1.0, max(-1.0, r))


def fitness(candidate: np.ndarray, target: np.ndarray) -> float:
    """Score one candidate image against the target.

    Returns:
        Correlation in [-1, 1], or ``DEGENERATE_SCORE`` if either image
        has zero variance.

    Raises:
        ShapeMismatchError: If the images differ in shape.
    """
    return TargetScorer(target).score(candidate)
