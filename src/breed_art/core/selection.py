"""Replication and truncation selection."""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

import numpy as np

from breed_art.errors import ConfigurationError


@dataclass(frozen=True)
class SelectionParams:
    """Population size and selection intensity.

    Each generation ``popsize / selection_rate`` children are sampled and
    only the best ``popsize`` survive. Smaller rates mean harsher selection.
    """

    popsize: int = 10
    selection_rate: float = 0.1

    @property
    def replicate_size(self) -> int:
        """Number of children sampled before truncation."""
        raw = self.popsize / self.selection_rate
        size = int(round(raw))
        if size < 1 or not math.isclose(raw, size, rel_tol=1e-9, abs_tol=1e-9):
            raise ConfigurationError(
                f"popsize / selection_rate must be a positive integer, "
                f"got {self.popsize} / {self.selection_rate} = {raw}"
            )
        return size

    def validate(self) -> None:
        if isinstance(self.popsize, bool) or not isinstance(self.popsize, (int, np.integer)):
            raise ConfigurationError(f"popsize must be an integer, got {self.popsize!r}")
        if self.popsize < 1:
            raise ConfigurationError(f"popsize must be >= 1, got {self.popsize}")
        if not 0.0 < self.selection_rate <= 1.0:
            raise ConfigurationError(
                f"selection_rate must be in (0, 1], got {self.selection_rate}"
            )
        # Raises if the ratio is fractional
        self.replicate_size

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def replicate(
    population: np.ndarray,
    replicate_size: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Sample ``replicate_size`` members uniformly with replacement.

    The result is a new buffer; children never alias their parents.
    """
    indices = rng.integers(0, len(population), size=replicate_size)
    return population[indices]


def ranking(scores: np.ndarray) -> np.ndarray:
    """Indices ordering ``scores`` best first, NaN last, ties stable."""
    scores = np.asarray(scores, dtype=np.float64)
    keys = np.where(np.isnan(scores), np.inf, -scores)
    return np.argsort(keys, kind="stable")


def truncate(
    children: np.ndarray,
    scores: np.ndarray,
    popsize: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Keep the ``popsize`` best-scoring children.

    Returns:
        (survivors, survivor_scores), both best first.
    """
    if len(children) != len(scores):
        raise ConfigurationError(
            f"Got {len(scores)} scores for {len(children)} children"
        )
    if popsize > len(children):
        raise ConfigurationError(
            f"Cannot keep {popsize} of only {len(children)} children"
        )
    keep = ranking(scores)[:popsize]
    return children[keep], np.asarray(scores, dtype=np.float64)[keep]


def mean_fitness(scores: np.ndarray) -> float:
    """Mean of the valid scores; NaN only if every score is degenerate."""
    scores = np.asarray(scores, dtype=np.float64)
    valid = scores[~np.isnan(scores)]
    if valid.size == 0:
        return float("nan")
    return float(valid.mean())
