"""Per-pixel mutation operator."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict

import numpy as np

from breed_art.errors import ConfigurationError


@dataclass(frozen=True)
class MutationParams:
    """How often pixels mutate and how large the changes are.

    Colour values live in [0, 1], so an ``sd`` of 1 is already a very
    disruptive mutation.
    """

    rate: float = 0.1   # Probability that any one element mutates
    mean: float = 0.0   # Mean of the normal mutation delta
    sd: float = 0.15    # Standard deviation of the mutation delta

    def validate(self) -> None:
        if not 0.0 <= self.rate <= 1.0:
            raise ConfigurationError(f"mutation rate must be in [0, 1], got {self.rate}")
        if not np.isfinite(self.mean):
            raise ConfigurationError(f"mutation mean must be finite, got {self.mean}")
        if not (np.isfinite(self.sd) and self.sd >= 0):
            raise ConfigurationError(f"mutation sd must be >= 0, got {self.sd}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def mutate(
    image: np.ndarray,
    params: MutationParams,
    rng: np.random.Generator,
) -> np.ndarray:
    """Return a mutated copy of ``image``.

    Each element mutates independently with probability ``params.rate`` by
    adding a draw from ``Normal(params.mean, params.sd)``. The result is
    clamped to [0, 1]. The input array is never modified.
    """
    out = np.array(image, dtype=np.float64, copy=True)
    if params.rate == 0:
        return out

    to_change = rng.random(out.shape) < params.rate
    changes = rng.normal(params.mean, params.sd, size=int(to_change.sum()))
    out[to_change] += changes

    np.clip(out, 0.0, 1.0, out=out)
    return out
