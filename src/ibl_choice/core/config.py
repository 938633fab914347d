"""Configuration objects for binary-gamble IBL simulations.

All configuration objects are immutable and validate their fields on
construction. Out-of-range values raise
:class:`~ibl_choice.core.errors.InvalidConfigurationError`; nothing is clamped.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .config_loading import load_config_mapping
from .config_validation import (
    coerce_finite_float,
    coerce_int,
    config_section,
)
from .errors import InvalidConfigurationError

GambleWeighting = Literal["double_exponential", "softmax"]
GAMBLE_WEIGHTINGS: tuple[str, ...] = ("double_exponential", "softmax")

MIN_TRIALS = 2


@dataclass(frozen=True, slots=True)
class Gamble:
    """Two-outcome lottery.

    Parameters
    ----------
    outcome_1 : float
        Payoff of the first outcome.
    outcome_2 : float
        Payoff of the second outcome.
    p_outcome_1 : float
        Probability of ``outcome_1`` in ``[0, 1]``. The second outcome occurs
        with probability ``1 - p_outcome_1``.

    Raises
    ------
    InvalidConfigurationError
        If a payoff is not finite or ``p_outcome_1`` is outside ``[0, 1]``.
    """

    outcome_1: float
    outcome_2: float
    p_outcome_1: float

    def __post_init__(self) -> None:
        for name in ("outcome_1", "outcome_2"):
            if not _is_finite_number(getattr(self, name)):
                raise InvalidConfigurationError(f"{name} must be a finite number")
        if not _is_finite_number(self.p_outcome_1) or not 0.0 <= self.p_outcome_1 <= 1.0:
            raise InvalidConfigurationError("p_outcome_1 must be in [0, 1]")

    @property
    def p_outcome_2(self) -> float:
        return 1.0 - self.p_outcome_1

    @property
    def outcomes(self) -> tuple[float, float]:
        return (float(self.outcome_1), float(self.outcome_2))

    @property
    def probabilities(self) -> tuple[float, float]:
        return (float(self.p_outcome_1), float(self.p_outcome_2))

    @property
    def expected_value(self) -> float:
        """Probability-weighted mean payoff."""

        return self.outcome_1 * self.p_outcome_1 + self.outcome_2 * self.p_outcome_2


@dataclass(frozen=True, slots=True)
class IBLParameters:
    """Cognitive parameters of the instance-based learning model.

    Parameters
    ----------
    decay : float
        Memory decay exponent. Traces contribute ``(t - t_j) ** -decay``, so
        positive values fade older instances and negative values amplify them.
    sigma : float
        Logistic activation noise scale, strictly positive. Also sets the
        retrieval temperature ``tau = sigma * sqrt(2)``.

    Raises
    ------
    InvalidConfigurationError
        If ``decay`` is not finite or ``sigma`` is not a positive finite number.
    """

    decay: float = 0.75
    sigma: float = 0.5

    def __post_init__(self) -> None:
        if not _is_finite_number(self.decay):
            raise InvalidConfigurationError("decay must be a finite number")
        if not _is_finite_number(self.sigma) or self.sigma <= 0.0:
            raise InvalidConfigurationError("sigma must be > 0")

    @property
    def tau(self) -> float:
        return self.sigma * math.sqrt(2.0)


@dataclass(frozen=True, slots=True)
class IBLSimulationConfig:
    """Complete description of one batch simulation.

    Parameters
    ----------
    gamble_a : Gamble
        Option A.
    gamble_b : Gamble
        Option B.
    parameters : IBLParameters, optional
        Decay and noise parameters.
    n_subjects : int, optional
        Number of independent simulated subjects, ``>= 1``.
    n_trials : int, optional
        Trials per subject, ``>= 2``. Trial 1 is a fixed seed row.
    gamble_weighting : {"double_exponential", "softmax"}, optional
        Rule used to sample which gamble is played. ``"double_exponential"``
        weights options by ``exp(p)`` of their choice probability ``p``;
        ``"softmax"`` samples directly with ``p``.
    seed : int | None, optional
        Master seed from which per-subject seeds are derived. ``None`` uses
        NumPy's entropy source.

    Raises
    ------
    InvalidConfigurationError
        If any field is out of range.
    """

    gamble_a: Gamble
    gamble_b: Gamble
    parameters: IBLParameters = field(default_factory=IBLParameters)
    n_subjects: int = 10
    n_trials: int = 20
    gamble_weighting: GambleWeighting = "double_exponential"
    seed: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.gamble_a, Gamble) or not isinstance(self.gamble_b, Gamble):
            raise InvalidConfigurationError("gamble_a and gamble_b must be Gamble instances")
        if not isinstance(self.parameters, IBLParameters):
            raise InvalidConfigurationError("parameters must be an IBLParameters instance")
        if not _is_int(self.n_subjects) or self.n_subjects < 1:
            raise InvalidConfigurationError("n_subjects must be an integer >= 1")
        if not _is_int(self.n_trials) or self.n_trials < MIN_TRIALS:
            raise InvalidConfigurationError(f"n_trials must be an integer >= {MIN_TRIALS}")
        if self.gamble_weighting not in GAMBLE_WEIGHTINGS:
            raise InvalidConfigurationError(
                f"gamble_weighting must be one of {list(GAMBLE_WEIGHTINGS)}, got {self.gamble_weighting!r}"
            )
        if self.seed is not None and (not _is_int(self.seed) or self.seed < 0):
            raise InvalidConfigurationError("seed must be a non-negative integer or None")


def default_simulation_config() -> IBLSimulationConfig:
    """Return the stock problem: A = (0, 100, p=.1) against B = (10, 20, p=.5)."""

    return IBLSimulationConfig(
        gamble_a=Gamble(outcome_1=0.0, outcome_2=100.0, p_outcome_1=0.1),
        gamble_b=Gamble(outcome_1=10.0, outcome_2=20.0, p_outcome_1=0.5),
        parameters=IBLParameters(decay=0.75, sigma=0.5),
        n_subjects=10,
        n_trials=20,
    )


def simulation_config_from_mapping(config: Mapping[str, Any]) -> IBLSimulationConfig:
    """Build a simulation config from a declarative mapping.

    Parameters
    ----------
    config : Mapping[str, Any]
        Mapping with required ``gambles`` and optional ``model`` and
        ``simulation`` sections::

            gambles:
              A: {outcomes: [0, 100], p_outcome_1: 0.1}
              B: {outcomes: [10, 20], p_outcome_1: 0.5}
            model: {decay: 0.75, sigma: 0.5}
            simulation: {n_subjects: 10, n_trials: 20, seed: 0}

    Returns
    -------
    IBLSimulationConfig
        Validated configuration.

    Raises
    ------
    InvalidConfigurationError
        If keys are unknown or missing, or values are out of range.
    """

    root = config_section(config, path="config", allowed=("gambles", "model", "simulation"), required=("gambles",))

    gambles = config_section(root["gambles"], path="gambles", allowed=("A", "B"), required=("A", "B"))

    model = config_section(root.get("model", {}), path="model", allowed=("decay", "sigma"))
    defaults = IBLParameters()
    parameters = IBLParameters(
        decay=coerce_finite_float(model.get("decay", defaults.decay), field_name="model.decay"),
        sigma=coerce_finite_float(model.get("sigma", defaults.sigma), field_name="model.sigma"),
    )

    simulation = config_section(
        root.get("simulation", {}),
        path="simulation",
        allowed=("n_subjects", "n_trials", "gamble_weighting", "seed"),
    )
    raw_seed = simulation.get("seed")

    return IBLSimulationConfig(
        gamble_a=_parse_gamble(gambles["A"], field_name="gambles.A"),
        gamble_b=_parse_gamble(gambles["B"], field_name="gambles.B"),
        parameters=parameters,
        n_subjects=coerce_int(simulation.get("n_subjects", 10), field_name="simulation.n_subjects", minimum=1),
        n_trials=coerce_int(
            simulation.get("n_trials", 20),
            field_name="simulation.n_trials",
            minimum=MIN_TRIALS,
        ),
        gamble_weighting=str(simulation.get("gamble_weighting", "double_exponential")),
        seed=None if raw_seed is None else coerce_int(raw_seed, field_name="simulation.seed", minimum=0),
    )


def load_simulation_config(path: str | Path) -> IBLSimulationConfig:
    """Load and validate a JSON/YAML simulation config file."""

    return simulation_config_from_mapping(load_config_mapping(path))


def _parse_gamble(raw: Any, *, field_name: str) -> Gamble:
    """Parse one ``{outcomes: [o1, o2], p_outcome_1: p}`` gamble mapping."""

    fields = ("outcomes", "p_outcome_1")
    mapping = config_section(raw, path=field_name, allowed=fields, required=fields)

    outcomes = mapping["outcomes"]
    if isinstance(outcomes, (str, bytes)) or not hasattr(outcomes, "__len__") or len(outcomes) != 2:
        raise InvalidConfigurationError(f"{field_name}.outcomes must be a list of two numbers")

    return Gamble(
        outcome_1=coerce_finite_float(outcomes[0], field_name=f"{field_name}.outcomes[0]"),
        outcome_2=coerce_finite_float(outcomes[1], field_name=f"{field_name}.outcomes[1]"),
        p_outcome_1=coerce_finite_float(mapping["p_outcome_1"], field_name=f"{field_name}.p_outcome_1"),
    )


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


__all__ = [
    "GAMBLE_WEIGHTINGS",
    "Gamble",
    "GambleWeighting",
    "IBLParameters",
    "IBLSimulationConfig",
    "MIN_TRIALS",
    "default_simulation_config",
    "load_simulation_config",
    "simulation_config_from_mapping",
]
