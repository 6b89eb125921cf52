"""Run management utilities for organizing evolution outputs.

Directory Structure:
    output/
        runs/
            YYYYMMDD_HHMMSS_<run_type>_<description>/
                metadata.json     # Run id, status, summary
                config.json       # Full configuration
                results.json      # Final results with metadata
                checkpoints/      # Saved EvolutionState files
                images/           # Average images, plots
                logs/             # run.log
"""

import json
import logging
import sys
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np


@dataclass
class RunMetadata:
    """Metadata for a run."""
    run_id: str
    run_type: str
    description: str
    created_at: str
    completed_at: Optional[str] = None
    status: str = "running"
    config: Optional[Dict[str, Any]] = None
    summary: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'RunMetadata':
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


class RunManager:
    """Creates and finds timestamped run directories."""

    def __init__(self, base_dir: Optional[Path] = None):
        """Initialize run manager.

        Args:
            base_dir: Base directory for outputs. Defaults to ./output
        """
        self.base_dir = Path(base_dir) if base_dir is not None else Path("output")
        self.runs_dir = self.base_dir / "runs"
        self.runs_dir.mkdir(parents=True, exist_ok=True)

    def create_run(
        self,
        run_type: str,
        description: str,
        config: Optional[Dict[str, Any]] = None,
    ) -> 'Run':
        """Create a new run with timestamped directory.

        Args:
            run_type: Type of run (evolve, step)
            description: Short description (used in directory name)
            config: Configuration dictionary to save

        Returns:
            Run object for managing this run
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_desc = description.replace(" ", "_").replace("/", "-")[:30]
        run_id = f"{timestamp}_{run_type}_{safe_desc}"

        # Same-second runs get a numeric suffix
        run_dir = self.runs_dir / run_id
        suffix = 1
        while run_dir.exists():
            suffix += 1
            run_dir = self.runs_dir / f"{run_id}_{suffix}"
        run_id = run_dir.name

        run_dir.mkdir(parents=True)
        for sub in ("checkpoints", "images", "logs"):
            (run_dir / sub).mkdir()

        metadata = RunMetadata(
            run_id=run_id,
            run_type=run_type,
            description=description,
            created_at=datetime.now().isoformat(),
            config=config,
        )

        run = Run(run_dir, metadata)
        run._save_metadata()
        if config:
            run.save_config(config)

        return run

    def get_run(self, run_id: str) -> Optional['Run']:
        """Get an existing run by ID, or None."""
        run_dir = self.runs_dir / run_id
        metadata_file = run_dir / "metadata.json"
        if not metadata_file.exists():
            return None

        with open(metadata_file) as f:
            metadata = RunMetadata.from_dict(json.load(f))
        return Run(run_dir, metadata)

    def list_runs(self, run_type: Optional[str] = None, limit: int = 20) -> List['Run']:
        """List runs, most recent first."""
        runs: List['Run'] = []

        for run_dir in sorted(self.runs_dir.iterdir(), reverse=True):
            if not run_dir.is_dir():
                continue

            run = self.get_run(run_dir.name)
            if run is None:
                continue
            if run_type and run.metadata.run_type != run_type:
                continue

            runs.append(run)
            if len(runs) >= limit:
                break

        return runs


class Run:
    """Represents a single evolution run."""

    def __init__(self, run_dir: Path, metadata: RunMetadata):
        self.run_dir = Path(run_dir)
        self.metadata = metadata

    @property
    def checkpoints_dir(self) -> Path:
        return self.run_dir / "checkpoints"

    @property
    def images_dir(self) -> Path:
        return self.run_dir / "images"

    @property
    def logs_dir(self) -> Path:
        return self.run_dir / "logs"

    def _save_metadata(self):
        with open(self.run_dir / "metadata.json", "w") as f:
            json.dump(self.metadata.to_dict(), f, indent=2)

    def save_config(self, config: Dict[str, Any]):
        """Save configuration to config.json."""
        self.metadata.config = config
        with open(self.run_dir / "config.json", "w") as f:
            json.dump(config, f, indent=2)
        self._save_metadata()

    def save_results(self, results: Dict[str, Any], summary: Optional[Dict[str, Any]] = None):
        """Save results to results.json.

        NaN values are written as null so the file stays valid JSON.
        """
        results = _json_safe(results)
        results["_run_id"] = self.metadata.run_id
        results["_created_at"] = self.metadata.created_at
        results["_completed_at"] = datetime.now().isoformat()

        with open(self.run_dir / "results.json", "w") as f:
            json.dump(results, f, indent=2)

        if summary:
            self.metadata.summary = _json_safe(summary)
            self._save_metadata()

    def checkpoint_path(self, name: str) -> Path:
        return self.checkpoints_dir / f"state_{name}.npz"

    def image_path(self, name: str, format: str = "png") -> Path:
        return self.images_dir / f"{name}.{format}"

    def setup_logger(self, name: str = "breed_art") -> logging.Logger:
        """Logger writing everything to logs/run.log and INFO to stdout."""
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        # Clear handlers left by a previous run
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

        file_handler = logging.FileHandler(self.logs_dir / "run.log", mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        return logger

    def complete(self, status: str = "completed", summary: Optional[Dict[str, Any]] = None):
        """Mark run as complete.

        Args:
            status: Final status (completed, stopped, failed)
            summary: Optional summary of results
        """
        self.metadata.status = status
        self.metadata.completed_at = datetime.now().isoformat()
        if summary:
            self.metadata.summary = _json_safe(summary)
        self._save_metadata()

    def __repr__(self) -> str:
        return f"Run({self.metadata.run_id}, type={self.metadata.run_type}, status={self.metadata.status})"


def _json_safe(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, np.ndarray):
        return _json_safe(value.tolist())
    if isinstance(value, (float, np.floating)):
        value = float(value)
        return value if np.isfinite(value) else None
    if isinstance(value, np.integer):
        return int(value)
    return value


def create_run(
    run_type: str,
    description: str,
    config: Optional[Dict[str, Any]] = None,
    base_dir: Optional[Path] = None,
) -> Run:
    """Create a new run (convenience function)."""
    return RunManager(base_dir).create_run(run_type, description, config)
