"""Evolution building blocks: images, mutation, fitness and selection."""

from breed_art.core.image import (
    check_image,
    random_image,
    random_population,
    average_images,
)
from breed_art.core.mutation import MutationParams, mutate
from breed_art.core.fitness import (
    DEGENERATE_SCORE,
    TargetScorer,
    fitness,
    is_degenerate,
)
from breed_art.core.selection import (
    SelectionParams,
    replicate,
    truncate,
    mean_fitness,
)

__all__ = [
    "check_image",
    "random_image",
    "random_population",
    "average_images",
    "MutationParams",
    "mutate",
    "DEGENERATE_SCORE",
    "TargetScorer",
    "fitness",
    "is_degenerate",
    "SelectionParams",
    "replicate",
    "truncate",
    "mean_fitness",
]
