"""Generational image evolution.

Each generation samples ``popsize / selection_rate`` children from the
current population with replacement, mutates and scores every child, and
keeps the ``popsize`` best. Two drivers share that cycle:

- :func:`evolve_images` runs a fixed number of generations (batch).
- :func:`evolve_images_once` runs exactly one generation from an explicit
  :class:`EvolutionState` and returns the next one (incremental), for
  callers such as an interactive front-end that advance one step per event.

All randomness comes from one ``numpy.random.Generator`` owned by the
driver. Before each mutation stage a seed is drawn from it for every child,
and each child is mutated with its own generator built from that seed, so
results do not depend on how many worker threads ran the stage.
"""

from __future__ import annotations

import copy
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field, asdict, fields, replace
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

from breed_art.core.fitness import TargetScorer
from breed_art.core.image import average_images, check_image, random_population
from breed_art.core.mutation import MutationParams, mutate
from breed_art.core.selection import SelectionParams, mean_fitness, replicate, truncate
from breed_art.errors import ConfigurationError

_MAX_CHILD_SEED = np.iinfo(np.int64).max


def _check_generations(generations) -> None:
    if isinstance(generations, bool) or not isinstance(generations, (int, np.integer)):
        raise ConfigurationError(f"generations must be an integer, got {generations!r}")
    if generations < 1:
        raise ConfigurationError(f"generations must be >= 1, got {generations}")


@dataclass
class EvolutionConfig:
    """Configuration for an evolution run."""

    # Population parameters
    popsize: int = 10
    selection_rate: float = 0.1

    # Mutation parameters
    mutation_rate: float = 0.1
    mutation_mean: float = 0.0
    mutation_sd: float = 0.15

    # Run parameters
    generations: int = 1000
    workers: int = 1
    seed: Optional[int] = None

    # Output
    verbose: bool = False
    report_interval: int = 10

    @property
    def selection(self) -> SelectionParams:
        return SelectionParams(popsize=self.popsize, selection_rate=self.selection_rate)

    @property
    def mutation(self) -> MutationParams:
        return MutationParams(
            rate=self.mutation_rate,
            mean=self.mutation_mean,
            sd=self.mutation_sd,
        )

    def validate(self) -> None:
        """Raise ConfigurationError on any invalid setting."""
        self.selection.validate()
        self.mutation.validate()
        _check_generations(self.generations)
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        if self.report_interval < 1:
            raise ConfigurationError(
                f"report_interval must be >= 1, got {self.report_interval}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'EvolutionConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**d)


@dataclass(frozen=True, eq=False)
class EvolutionState:
    """Everything needed to continue an evolution.

    A state is never modified; each generation produces a new one.
    """

    population: np.ndarray             # (popsize, *target.shape)
    fitness_history: Tuple[float, ...]  # One post-selection mean per generation
    average_image: np.ndarray
    initial_fitness: float = float("nan")  # Mean score of the random starting population
    rng: Optional[np.random.Generator] = field(default=None, repr=False)

    @property
    def generation(self) -> int:
        return len(self.fitness_history)

    @property
    def popsize(self) -> int:
        return len(self.population)

    @property
    def final_fitness(self) -> float:
        if not self.fitness_history:
            return self.initial_fitness
        return self.fitness_history[-1]


class ImageEvolution:
    """Evolves a population of images toward a target."""

    def __init__(
        self,
        target: np.ndarray,
        config: EvolutionConfig,
        rng: Optional[np.random.Generator] = None,
    ):
        config.validate()
        self.target = check_image(target, "target")
        self.config = config
        self.selection = config.selection
        self.mutation = config.mutation
        self.replicate_size = self.selection.replicate_size
        self.scorer = TargetScorer(self.target)

        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self._stop_requested = False

    def request_stop(self) -> None:
        """Ask a running batch loop to stop after the current generation."""
        self._stop_requested = True

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def check_state(self, state: EvolutionState) -> np.ndarray:
        """Ensure a carried-in population fits the target.

        Returns:
            The population as a float64 array.
        """
        population = np.asarray(state.population, dtype=np.float64)
        if population.ndim != self.target.ndim + 1 or population.shape[1:] != self.target.shape:
            raise ConfigurationError(
                f"State population has shape {population.shape}, "
                f"expected (n, *{self.target.shape})"
            )
        return population

    def score_population(self, population: np.ndarray) -> np.ndarray:
        return np.array([self.scorer.score(member) for member in population], dtype=np.float64)

    def initial_state(self) -> EvolutionState:
        """Create a random population and its baseline statistics."""
        population = random_population(self.target, self.selection.popsize, self.rng)
        scores = self.score_population(population)
        return EvolutionState(
            population=population,
            fitness_history=(),
            average_image=average_images(population),
            initial_fitness=mean_fitness(scores),
            rng=copy.deepcopy(self.rng),
        )

    def _breed_child(self, child: np.ndarray, seed: int) -> Tuple[np.ndarray, float]:
        mutated = mutate(child, self.mutation, np.random.default_rng(seed))
        return mutated, self.scorer.score(mutated)

    def step(
        self,
        population: np.ndarray,
        executor: Optional[Executor] = None,
    ) -> Tuple[np.ndarray, float]:
        """Run one replicate, mutate, score and truncate cycle.

        Returns:
            (new_population, mean fitness of the kept children)
        """
        children = replicate(population, self.replicate_size, self.rng)
        seeds = self.rng.integers(0, _MAX_CHILD_SEED, size=len(children))

        if executor is None:
            results = list(map(self._breed_child, children, seeds))
        else:
            results = list(executor.map(self._breed_child, children, seeds))

        scores = np.empty(len(children), dtype=np.float64)
        for i, (mutated, score) in enumerate(results):
            children[i] = mutated
            scores[i] = score

        survivors, kept_scores = truncate(children, scores, self.selection.popsize)
        return survivors, mean_fitness(kept_scores)

    def advance(
        self,
        state: EvolutionState,
        executor: Optional[Executor] = None,
    ) -> EvolutionState:
        """Produce the state one generation after ``state``."""
        population, avg_fitness = self.step(state.population, executor)
        return EvolutionState(
            population=population,
            fitness_history=state.fitness_history + (avg_fitness,),
            average_image=average_images(population),
            initial_fitness=state.initial_fitness,
            rng=copy.deepcopy(self.rng),
        )

    def _report(self, generation: int, avg_fitness: float) -> None:
        if not self.config.verbose or generation % self.config.report_interval != 0:
            return
        # Progress output must never abort a generation
        try:
            print(f"Generation {generation} : Average population fitness is {avg_fitness:.4f}")
        except Exception:
            pass

    def _run(
        self,
        state: EvolutionState,
        generations: int,
        callback: Optional[Callable[[int, EvolutionState], None]],
        executor: Optional[Executor],
    ) -> EvolutionState:
        for _ in range(generations):
            if self._stop_requested:
                break

            state = self.advance(state, executor)
            self._report(state.generation, state.fitness_history[-1])

            if callback:
                callback(state.generation, state)

        return state

    def run(
        self,
        generations: Optional[int] = None,
        callback: Optional[Callable[[int, EvolutionState], None]] = None,
        state: Optional[EvolutionState] = None,
    ) -> EvolutionState:
        """Run the batch loop.

        Args:
            generations: Number of generations; defaults to the config's.
            callback: Optional function called after every generation with
                (generation, state).
            state: State to continue from. A fresh random population is
                created when omitted.

        Returns:
            The state after the last completed generation. Fewer than
            ``generations`` generations are recorded if a stop was requested.
        """
        if generations is None:
            generations = self.config.generations
        _check_generations(generations)

        if state is None:
            state = self.initial_state()
        else:
            state = replace(state, population=self.check_state(state))

        if self.config.workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                return self._run(state, generations, callback, executor)
        return self._run(state, generations, callback, None)


def evolve_images(
    target: np.ndarray,
    popsize: int = 10,
    selection_rate: float = 0.1,
    mutation_rate: float = 0.1,
    mutation_mean: float = 0.0,
    mutation_sd: float = 0.15,
    generations: int = 1000,
    workers: int = 1,
    verbose: bool = False,
    seed: Optional[int] = None,
    callback: Optional[Callable[[int, EvolutionState], None]] = None,
) -> EvolutionState:
    """Evolve images to look like ``target`` for a fixed number of generations.

    Args:
        target: Image the population is selected toward.
        popsize: Number of images kept each generation.
        selection_rate: Fraction of children kept. ``popsize / selection_rate``
            must be a whole number.
        mutation_rate: Probability that any one element mutates.
        mutation_mean: Mean of the normal mutation delta (generally 0).
        mutation_sd: Standard deviation of the mutation delta.
        generations: How many generations to run.
        workers: Threads used to mutate and score children.
        verbose: Print the average fitness every 10th generation.
        seed: Random seed for reproducibility.
        callback: Optional function called each generation with
            (generation, state).

    Returns:
        Final EvolutionState holding the fitness history, the population and
        its average image.
    """
    config = EvolutionConfig(
        popsize=popsize,
        selection_rate=selection_rate,
        mutation_rate=mutation_rate,
        mutation_mean=mutation_mean,
        mutation_sd=mutation_sd,
        generations=generations,
        workers=workers,
        seed=seed,
        verbose=verbose,
    )
    evolution = ImageEvolution(target, config)
    return evolution.run(callback=callback)


def evolve_images_once(
    target: np.ndarray,
    state: Optional[EvolutionState] = None,
    popsize: int = 10,
    selection_rate: float = 0.1,
    mutation_rate: float = 0.1,
    mutation_mean: float = 0.0,
    mutation_sd: float = 0.15,
    workers: int = 1,
    verbose: bool = False,
    seed: Optional[int] = None,
) -> EvolutionState:
    """Advance an evolution by exactly one generation.

    Without a prior state (or with an empty population) a random population
    is created first and its mean fitness stored as ``initial_fitness``.
    The prior state is left untouched: its generator is copied before use.

    Args:
        target: Image the population is selected toward.
        state: State returned by the previous call, or None on the first call.
        seed: Reseed the generator. When omitted, the state's generator
            continues, so seeding only the first call reproduces
            :func:`evolve_images` with the same seed.

    Returns:
        New state with one more entry in ``fitness_history``.
    """
    config = EvolutionConfig(
        popsize=popsize,
        selection_rate=selection_rate,
        mutation_rate=mutation_rate,
        mutation_mean=mutation_mean,
        mutation_sd=mutation_sd,
        generations=1,
        workers=workers,
        seed=seed,
        verbose=verbose,
        report_interval=1,
    )
    config.validate()

    if seed is None and state is not None and state.rng is not None:
        rng = copy.deepcopy(state.rng)
    else:
        rng = np.random.default_rng(seed)

    evolution = ImageEvolution(target, config, rng=rng)

    if state is None or state.population is None or len(state.population) == 0:
        state = evolution.initial_state()

    return evolution.run(1, state=state)
