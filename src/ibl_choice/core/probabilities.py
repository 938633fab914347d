"""Probability utilities shared by the trial stepper.

Centralizing softmax, noise, and categorical sampling keeps the numerical
conventions of the model in one place.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy.special import softmax

from .errors import NumericDegeneracyError


def checked_softmax(logits: Sequence[float] | np.ndarray, *, label: str) -> np.ndarray:
    """Softmax that refuses to return NaN.

    Parameters
    ----------
    logits : Sequence[float] | numpy.ndarray
        Unnormalized log-weights. ``-inf`` entries receive zero probability.
    label : str
        Name of the quantity, used in error messages.

    Returns
    -------
    numpy.ndarray
        Probabilities summing to one.

    Raises
    ------
    NumericDegeneracyError
        If any logit is NaN or ``+inf``, or if every logit is ``-inf``.
    """

    values = np.asarray(logits, dtype=float)
    if np.any(np.isnan(values)) or np.any(np.isposinf(values)):
        raise NumericDegeneracyError(f"{label} softmax received non-finite logits: {values.tolist()}")
    if np.all(np.isneginf(values)):
        raise NumericDegeneracyError(f"{label} softmax is undefined: every logit is -inf")
    # scipy subtracts the max logit before exponentiating.
    return softmax(values)


def uniform_open_interval(rng: np.random.Generator, size: int) -> np.ndarray:
    """Draw ``size`` uniforms strictly inside ``(0, 1)``.

    ``Generator.random`` samples ``[0, 1)``; exact zeros are redrawn so the
    logistic noise built from these draws is always finite.
    """

    u = np.asarray(rng.random(size), dtype=float)
    zero = u == 0.0
    while np.any(zero):
        u[zero] = rng.random(int(np.count_nonzero(zero)))
        zero = u == 0.0
    return u


def logistic_noise(uniforms: np.ndarray, sigma: float) -> np.ndarray:
    """Map uniforms to logistic noise ``sigma * ln((1 - u) / u)``."""

    u = np.asarray(uniforms, dtype=float)
    with np.errstate(divide="ignore"):
        return sigma * np.log((1.0 - u) / u)


def normalize_weights(weights: Sequence[float] | np.ndarray) -> np.ndarray:
    """Validate and normalize non-negative sampling weights.

    Raises
    ------
    NumericDegeneracyError
        If a weight is negative or non-finite, or all weights are zero.
    """

    values = np.asarray(weights, dtype=float)
    if not np.all(np.isfinite(values)):
        raise NumericDegeneracyError(f"sampling weights must be finite: {values.tolist()}")
    if np.any(values < 0):
        raise NumericDegeneracyError(f"sampling weights must be non-negative: {values.tolist()}")
    total = float(np.sum(values))
    if total <= 0:
        raise NumericDegeneracyError("sampling weights must have a positive sum")
    return values / total


def sample_index(weights: Sequence[float] | np.ndarray, rng: np.random.Generator) -> int:
    """Sample one index with probability proportional to ``weights``.

    Zero-weight indices are never returned.
    """

    probs = normalize_weights(weights)
    return int(rng.choice(len(probs), p=probs))


__all__ = [
    "checked_softmax",
    "logistic_noise",
    "normalize_weights",
    "sample_index",
    "uniform_open_interval",
]
