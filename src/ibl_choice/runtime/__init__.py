"""Simulation runtime for subjects and batches."""

from .engine import derive_subject_seeds, run_simulation, run_subject

__all__ = ["derive_subject_seeds", "run_simulation", "run_subject"]
