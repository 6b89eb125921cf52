"""breed_art - evolve random images toward a target picture by mutation and truncation selection."""

__version__ = "0.1.0"

from breed_art.errors import ConfigurationError, ShapeMismatchError
from breed_art.core.image import random_image, random_population, average_images
from breed_art.core.mutation import MutationParams, mutate
from breed_art.core.fitness import fitness, is_degenerate, DEGENERATE_SCORE
from breed_art.core.selection import SelectionParams
from breed_art.evolution.engine import (
    EvolutionConfig,
    EvolutionState,
    ImageEvolution,
    evolve_images,
    evolve_images_once,
)

__all__ = [
    "ConfigurationError",
    "ShapeMismatchError",
    "random_image",
    "random_population",
    "average_images",
    "MutationParams",
    "mutate",
    "fitness",
    "is_degenerate",
    "DEGENERATE_SCORE",
    "SelectionParams",
    "EvolutionConfig",
    "EvolutionState",
    "ImageEvolution",
    "evolve_images",
    "evolve_images_once",
]
