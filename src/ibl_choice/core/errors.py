"""Exception types raised by configuration, simulation, and batch runners."""

from __future__ import annotations


class IBLSimulationError(Exception):
    """Base class for all package-specific errors."""


class InvalidConfigurationError(IBLSimulationError, ValueError):
    """Raised when a configuration value is out of range or malformed.

    Notes
    -----
    Subclasses :class:`ValueError` so callers using plain ``ValueError``
    handling keep working.
    """


class NumericDegeneracyError(IBLSimulationError, ArithmeticError):
    """Raised when a softmax over activations or blended values is undefined."""


class SubjectSimulationError(IBLSimulationError):
    """Raised when one subject's run fails inside a fail-fast batch.

    Parameters
    ----------
    subject : int
        One-based subject index that failed.
    message : str
        Human-readable failure description.
    """

    def __init__(self, subject: int, message: str) -> None:
        super().__init__(f"subject {subject} failed: {message}")
        self.subject = subject


class SimulationCancelledError(IBLSimulationError):
    """Raised when a running batch is cancelled through ``should_stop``."""


__all__ = [
    "IBLSimulationError",
    "InvalidConfigurationError",
    "NumericDegeneracyError",
    "SimulationCancelledError",
    "SubjectSimulationError",
]
