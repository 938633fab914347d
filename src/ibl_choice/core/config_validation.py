"""Section and scalar checks for simulation config mappings.

A simulation config is a tree of small sections (``gambles.A``, ``model``,
``simulation`` ...). Each section is checked with :func:`config_section`, and
leaf values are converted with the ``coerce_*`` helpers. Error messages carry
the dotted path of the offending entry.
"""

from __future__ import annotations

import math
from collections.abc import Collection, Mapping
from typing import Any

from .errors import InvalidConfigurationError


def config_section(
    raw: Any,
    *,
    path: str,
    allowed: Collection[str],
    required: Collection[str] = (),
) -> Mapping[str, Any]:
    """Return ``raw`` as a config section after checking its keys.

    Parameters
    ----------
    raw : Any
        Parsed value found at ``path``.
    path : str
        Dotted location of the section, e.g. ``"gambles.A"``.
    allowed : Collection[str]
        Every key the section may contain.
    required : Collection[str], optional
        Keys that must be present. Must be a subset of ``allowed``.

    Returns
    -------
    Mapping[str, Any]
        ``raw`` itself.

    Raises
    ------
    InvalidConfigurationError
        If ``raw`` is not a mapping, has keys outside ``allowed``, or lacks a
        key from ``required``.
    """

    if not isinstance(raw, Mapping):
        raise InvalidConfigurationError(f"{path} must be an object mapping")

    unknown = sorted(str(key) for key in raw if str(key) not in allowed)
    if unknown:
        raise InvalidConfigurationError(f"{path} has unknown keys: {unknown}")

    missing = [key for key in required if key not in raw]
    if missing:
        raise InvalidConfigurationError(f"{path} is missing required keys: {missing}")
    return raw


def coerce_finite_float(raw: Any, *, field_name: str) -> float:
    """Coerce a payoff, probability, or model parameter to a finite float.

    Raises
    ------
    InvalidConfigurationError
        If ``raw`` is missing, boolean, non-numeric, NaN, or infinite.
    """

    if raw is None or isinstance(raw, bool):
        raise InvalidConfigurationError(f"{field_name} must be a finite number")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"{field_name} must be a finite number") from exc
    if not math.isfinite(value):
        raise InvalidConfigurationError(f"{field_name} must be a finite number")
    return value


def coerce_int(raw: Any, *, field_name: str, minimum: int) -> int:
    """Coerce a count or seed bounded below by ``minimum``.

    Floats are accepted only when they hold an integral value, so ``20.0``
    becomes ``20`` while ``20.5`` is rejected.
    """

    if raw is None or isinstance(raw, bool):
        raise InvalidConfigurationError(f"{field_name} must be an integer >= {minimum}")
    if isinstance(raw, float) and not raw.is_integer():
        raise InvalidConfigurationError(f"{field_name} must be an integer >= {minimum}")
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"{field_name} must be an integer >= {minimum}") from exc
    if value < minimum:
        raise InvalidConfigurationError(f"{field_name} must be an integer >= {minimum}")
    return value


__all__ = [
    "coerce_finite_float",
    "coerce_int",
    "config_section",
]
