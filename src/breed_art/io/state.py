"""Checkpointing of EvolutionState to ``.npz`` files.

The generator state is stored as JSON so a reloaded state continues the
same random stream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import numpy as np

from breed_art.errors import ConfigurationError
from breed_art.evolution.engine import EvolutionState


def _rng_to_json(rng: Optional[np.random.Generator]) -> str:
    if rng is None:
        return ""
    return json.dumps(rng.bit_generator.state)


def _rng_from_json(text: str) -> Optional[np.random.Generator]:
    if not text:
        return None
    state = json.loads(text)
    bit_generator_cls = getattr(np.random, state["bit_generator"], None)
    if bit_generator_cls is None:
        raise ConfigurationError(f"Unknown bit generator: {state['bit_generator']}")
    bit_generator = bit_generator_cls()
    bit_generator.state = state
    return np.random.Generator(bit_generator)


def save_state(state: EvolutionState, path: str | Path) -> Path:
    """Write ``state`` to ``path``."""
    path = Path(path)
    with open(path, "wb") as f:
        np.savez_compressed(
            f,
            population=np.asarray(state.population, dtype=np.float64),
            fitness_history=np.asarray(state.fitness_history, dtype=np.float64),
            average_image=np.asarray(state.average_image, dtype=np.float64),
            initial_fitness=np.float64(state.initial_fitness),
            rng_state=np.array(_rng_to_json(state.rng)),
        )
    return path


def load_state(path: str | Path) -> EvolutionState:
    """Read a state written by :func:`save_state`."""
    with np.load(Path(path), allow_pickle=False) as data:
        return EvolutionState(
            population=data["population"],
            fitness_history=tuple(float(x) for x in data["fitness_history"]),
            average_image=data["average_image"],
            initial_fitness=float(data["initial_fitness"]),
            rng=_rng_from_json(str(data["rng_state"])),
        )
