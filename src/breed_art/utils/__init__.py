"""Utility modules for breed_art."""

from breed_art.utils.run_manager import (
    RunManager,
    Run,
    RunMetadata,
    create_run,
)

__all__ = [
    "RunManager",
    "Run",
    "RunMetadata",
    "create_run",
]
