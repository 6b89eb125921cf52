"""Command-line interface for breed_art."""

from __future__ import annotations

import argparse
import json
import signal
import sys
from pathlib import Path
from typing import Any, Dict

from breed_art.errors import ConfigurationError

# Flags that map directly onto EvolutionConfig fields
CONFIG_FLAGS = (
    "popsize",
    "selection_rate",
    "mutation_rate",
    "mutation_mean",
    "mutation_sd",
    "generations",
    "workers",
    "seed",
)


def build_config(args: argparse.Namespace):
    """EvolutionConfig from an optional JSON file overridden by explicit flags."""
    from breed_art.evolution.engine import EvolutionConfig

    values: Dict[str, Any] = {}
    if getattr(args, "config", None):
        with open(args.config) as f:
            values.update(json.load(f))

    for name in CONFIG_FLAGS:
        value = getattr(args, name, None)
        if value is not None:
            values[name] = value
    if getattr(args, "verbose", False):
        values["verbose"] = True

    config = EvolutionConfig.from_dict(values)
    config.validate()
    return config


def cmd_evolve(args: argparse.Namespace) -> int:
    """Run the batch loop and save the results as a run."""
    from tqdm import tqdm

    from breed_art.evolution.engine import ImageEvolution
    from breed_art.io.images import load_image, save_image
    from breed_art.io.state import save_state
    from breed_art.utils.run_manager import RunManager
    from breed_art.visualization.renderer import (
        plot_fitness_history,
        render_population,
        save_figure,
    )

    config = build_config(args)
    target = load_image(args.target, max_pixels=args.max_pixels, grayscale=args.grayscale)

    run = RunManager(args.output_dir).create_run(
        "evolve", Path(args.target).stem, config={**config.to_dict(), "target": str(args.target)}
    )
    logger = run.setup_logger()

    logger.info("=" * 60)
    logger.info("IMAGE EVOLUTION")
    logger.info("=" * 60)
    logger.info(f"Run ID: {run.metadata.run_id}")
    logger.info(f"Target: {args.target} {target.shape}")
    logger.info(f"Population: {config.popsize}, replicate size: {config.selection.replicate_size}")
    logger.info(f"Mutation: rate={config.mutation_rate}, mean={config.mutation_mean}, sd={config.mutation_sd}")
    logger.info(f"Generations: {config.generations}, workers: {config.workers}, seed: {config.seed}")

    evolution = ImageEvolution(target, config)

    def on_interrupt(signum, frame):
        logger.info("Stop requested; finishing current generation")
        evolution.request_stop()

    previous_handler = signal.signal(signal.SIGINT, on_interrupt)

    progress = tqdm(total=config.generations, desc="Evolving", disable=args.no_progress)

    def on_generation(generation, state):
        progress.update(1)
        progress.set_postfix(fitness=f"{state.fitness_history[-1]:.4f}")
        logger.debug(f"Generation {generation}: {state.fitness_history[-1]:.6f}")
        if args.checkpoint_interval and generation % args.checkpoint_interval == 0:
            save_state(state, run.checkpoint_path(f"gen_{generation:05d}"))

    try:
        state = evolution.run(callback=on_generation)
    except Exception:
        logger.exception("Evolution failed")
        run.complete(status="failed")
        raise
    finally:
        progress.close()
        signal.signal(signal.SIGINT, previous_handler)

    save_state(state, run.checkpoint_path("final"))
    save_image(state.average_image, run.image_path("average"))
    save_image(target, run.image_path("target"))
    save_figure(
        plot_fitness_history(state.fitness_history, state.initial_fitness),
        run.image_path("fitness_history"),
    )
    save_figure(render_population(state.population), run.image_path("population"))

    status = "stopped" if evolution.stop_requested else "completed"
    summary = {
        "generations_completed": state.generation,
        "initial_fitness": state.initial_fitness,
        "final_fitness": state.final_fitness,
    }
    run.save_results({"fitness_history": list(state.fitness_history), **summary}, summary=summary)
    run.complete(status=status, summary=summary)

    logger.info(f"Generations completed: {state.generation} ({status})")
    logger.info(f"Fitness: {state.initial_fitness:.4f} -> {state.final_fitness:.4f}")
    logger.info(f"Saved to {run.run_dir}")
    return 0


def cmd_step(args: argparse.Namespace) -> int:
    """Advance a saved evolution by one generation (or start one)."""
    from breed_art.evolution.engine import evolve_images_once
    from breed_art.io.images import load_image, save_image
    from breed_art.io.state import load_state, save_state

    config = build_config(args)
    target = load_image(args.target, max_pixels=args.max_pixels, grayscale=args.grayscale)

    state_path = Path(args.state)
    state = load_state(state_path) if state_path.exists() else None

    for _ in range(args.steps):
        state = evolve_images_once(
            target,
            state,
            popsize=config.popsize,
            selection_rate=config.selection_rate,
            mutation_rate=config.mutation_rate,
            mutation_mean=config.mutation_mean,
            mutation_sd=config.mutation_sd,
            workers=config.workers,
            verbose=config.verbose,
            seed=config.seed if state is None else None,
        )

    save_state(state, state_path)
    print(f"Generation {state.generation}: average fitness {state.final_fitness:.4f}")

    if args.image:
        save_image(state.average_image, args.image)
        print(f"Average image saved to {args.image}")

    return 0


def cmd_mutation_sizes(args: argparse.Namespace) -> int:
    """Print (and optionally plot) the mutation size distribution."""
    from breed_art.visualization.mutation_sizes import get_mutation_sizes, plot_mutation_sizes
    from breed_art.visualization.renderer import save_figure

    sizes = get_mutation_sizes(args.mean, args.sd)

    print(f"{'Size':>6} {'Density':>10}")
    for size, density in zip(sizes.size, sizes.density):
        print(f"{size:>6.1f} {density:>10.4f}")

    if args.output:
        save_figure(plot_mutation_sizes(args.mean, args.sd), args.output)
        print(f"\nSaved to {args.output}")

    return 0


def cmd_resize(args: argparse.Namespace) -> int:
    """Shrink an image file to a pixel budget."""
    from breed_art.io.images import load_image, save_image

    image = load_image(args.input, max_pixels=args.max_pixels, grayscale=args.grayscale, verbose=True)
    save_image(image, args.output)

    print(f"Saved {image.shape[0]}x{image.shape[1]} image to {args.output}")
    return 0


def cmd_runs(args: argparse.Namespace) -> int:
    """List previous runs."""
    from breed_art.utils.run_manager import RunManager

    runs = RunManager(args.output_dir).list_runs(run_type=args.type, limit=args.limit)
    if not runs:
        print("No runs found")
        return 0

    print(f"{'Run ID':<50} {'Status':<10} {'Final fitness':>14}")
    print("-" * 76)
    for run in runs:
        summary = run.metadata.summary or {}
        final = summary.get("final_fitness")
        final_text = f"{final:.4f}" if isinstance(final, (int, float)) else "-"
        print(f"{run.metadata.run_id:<50} {run.metadata.status:<10} {final_text:>14}")

    return 0


def add_evolution_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("target", help="Target image file")
    parser.add_argument("--config", default=None, help="JSON file with EvolutionConfig fields")
    parser.add_argument("--popsize", type=int, default=None, help="Images kept each generation (default: 10)")
    parser.add_argument("--selection-rate", type=float, default=None,
                        help="Fraction of children kept (default: 0.1)")
    parser.add_argument("--mutation-rate", type=float, default=None,
                        help="Probability a pixel value mutates (default: 0.1)")
    parser.add_argument("--mutation-mean", type=float, default=None, help="Mean mutation size (default: 0)")
    parser.add_argument("--mutation-sd", type=float, default=None,
                        help="Standard deviation of mutation sizes (default: 0.15)")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: 1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--max-pixels", type=int, default=10000,
                        help="Shrink the target to at most this many pixels")
    parser.add_argument("--grayscale", action="store_true", help="Evolve a single-channel image")
    parser.add_argument("--verbose", "-v", action="store_true", help="Print progress reports")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="breed-art",
        description="Evolve random images toward a target picture",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    evolve_parser = subparsers.add_parser("evolve", help="Run a fixed number of generations")
    add_evolution_arguments(evolve_parser)
    evolve_parser.add_argument("--generations", type=int, default=None,
                               help="Number of generations (default: 1000)")
    evolve_parser.add_argument("--output-dir", default="output", help="Base directory for runs")
    evolve_parser.add_argument("--checkpoint-interval", type=int, default=0,
                               help="Save the state every N generations (0 = only at the end)")
    evolve_parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    step_parser = subparsers.add_parser("step", help="Advance a saved evolution by one generation")
    add_evolution_arguments(step_parser)
    step_parser.add_argument("--state", default="breed_art_state.npz",
                             help="State file, created if missing")
    step_parser.add_argument("--steps", type=int, default=1, help="Generations to advance")
    step_parser.add_argument("--image", default=None, help="Save the average image here")

    sizes_parser = subparsers.add_parser("mutation-sizes", help="Show the mutation size distribution")
    sizes_parser.add_argument("--mean", type=float, default=0.0, help="Mean mutation size")
    sizes_parser.add_argument("--sd", type=float, default=0.15, help="Standard deviation of mutation sizes")
    sizes_parser.add_argument("--output", "-o", default=None, help="Save a bar chart here")

    resize_parser = subparsers.add_parser("resize", help="Shrink an image to a pixel budget")
    resize_parser.add_argument("input", help="Input image file")
    resize_parser.add_argument("--max-pixels", type=int, default=10000, help="Maximum pixel count")
    resize_parser.add_argument("--grayscale", action="store_true", help="Convert to grayscale")
    resize_parser.add_argument("--output", "-o", required=True, help="Output file")

    runs_parser = subparsers.add_parser("runs", help="List previous runs")
    runs_parser.add_argument("--output-dir", default="output", help="Base directory for runs")
    runs_parser.add_argument("--type", default=None, help="Filter by run type")
    runs_parser.add_argument("--limit", type=int, default=20, help="Maximum runs to show")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "step" and args.steps < 1:
        parser.error("--steps must be >= 1")

    commands = {
        "evolve": cmd_evolve,
        "step": cmd_step,
        "mutation-sizes": cmd_mutation_sizes,
        "resize": cmd_resize,
        "runs": cmd_runs,
    }

    try:
        return commands[args.command](args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
