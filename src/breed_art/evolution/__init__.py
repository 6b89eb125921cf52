"""Batch and incremental drivers for image evolution."""

from breed_art.evolution.engine import (
    EvolutionConfig,
    EvolutionState,
    ImageEvolution,
    evolve_images,
    evolve_images_once,
)

__all__ = [
    "EvolutionConfig",
    "EvolutionState",
    "ImageEvolution",
    "evolve_images",
    "evolve_images_once",
]
