"""Tests for simulation configuration objects and config-file loading."""

from __future__ import annotations

import dataclasses
import json
import math

import pytest

from ibl_choice.core import (
    Gamble,
    IBLParameters,
    IBLSimulationConfig,
    InvalidConfigurationError,
    default_simulation_config,
    load_config_mapping,
    load_simulation_config,
    simulation_config_from_mapping,
)
from ibl_choice.core.config_validation import config_section


def _mapping() -> dict:
    return {
        "gambles": {
            "A": {"outcomes": [0, 100], "p_outcome_1": 0.1},
            "B": {"outcomes": [10, 20], "p_outcome_1": 0.5},
        },
        "model": {"decay": 0.75, "sigma": 0.5},
        "simulation": {"n_subjects": 3, "n_trials": 5, "seed": 11},
    }


def test_gamble_derives_complement_probability_and_expected_value() -> None:
    """Second-outcome probability and EV should follow from the first outcome."""

    gamble = Gamble(outcome_1=0.0, outcome_2=100.0, p_outcome_1=0.1)

    assert gamble.p_outcome_2 == pytest.approx(0.9)
    assert gamble.expected_value == pytest.approx(90.0)
    assert Gamble(10.0, 20.0, 0.5).expected_value == pytest.approx(15.0)


@pytest.mark.parametrize("probability", [-0.01, 1.01, math.nan])
def test_gamble_rejects_out_of_range_probability(probability: float) -> None:
    """Probabilities outside [0, 1] should be rejected, not clamped."""

    with pytest.raises(InvalidConfigurationError, match="p_outcome_1"):
        Gamble(outcome_1=0.0, outcome_2=1.0, p_outcome_1=probability)


def test_gamble_rejects_non_finite_outcome() -> None:
    """Infinite payoffs would make blended values undefined."""

    with pytest.raises(InvalidConfigurationError, match="outcome_2"):
        Gamble(outcome_1=0.0, outcome_2=math.inf, p_outcome_1=0.5)


def test_parameters_validate_sigma_and_expose_tau() -> None:
    """Sigma must be positive and sets tau = sigma * sqrt(2)."""

    assert IBLParameters(decay=-2.0, sigma=0.5).tau == pytest.approx(0.5 * math.sqrt(2.0))

    with pytest.raises(InvalidConfigurationError, match="sigma"):
        IBLParameters(sigma=0.0)
    with pytest.raises(InvalidConfigurationError, match="decay"):
        IBLParameters(decay=math.inf)


def test_simulation_config_rejects_invalid_counts_and_weighting() -> None:
    """Subjects, trials, and the weighting rule should fail fast when invalid."""

    base = default_simulation_config()

    with pytest.raises(InvalidConfigurationError, match="n_trials"):
        dataclasses.replace(base, n_trials=1)
    with pytest.raises(InvalidConfigurationError, match="n_subjects"):
        dataclasses.replace(base, n_subjects=0)
    with pytest.raises(InvalidConfigurationError, match="n_subjects"):
        dataclasses.replace(base, n_subjects=True)
    with pytest.raises(InvalidConfigurationError, match="gamble_weighting"):
        dataclasses.replace(base, gamble_weighting="triple_exponential")
    with pytest.raises(InvalidConfigurationError, match="seed"):
        dataclasses.replace(base, seed=-1)


def test_invalid_configuration_is_a_value_error() -> None:
    """Callers catching ValueError should also see configuration errors."""

    with pytest.raises(ValueError):
        IBLParameters(sigma=-1.0)


def test_default_config_matches_stock_problem() -> None:
    """The stock problem is A=(0, 100, .1) vs B=(10, 20, .5)."""

    config = default_simulation_config()

    assert config.gamble_a == Gamble(0.0, 100.0, 0.1)
    assert config.gamble_b == Gamble(10.0, 20.0, 0.5)
    assert config.parameters == IBLParameters(decay=0.75, sigma=0.5)
    assert (config.n_subjects, config.n_trials) == (10, 20)
    assert config.gamble_weighting == "double_exponential"


def test_config_from_mapping_parses_all_sections() -> None:
    """Declarative mappings should build an equivalent validated config."""

    config = simulation_config_from_mapping(_mapping())

    assert config == IBLSimulationConfig(
        gamble_a=Gamble(0.0, 100.0, 0.1),
        gamble_b=Gamble(10.0, 20.0, 0.5),
        parameters=IBLParameters(decay=0.75, sigma=0.5),
        n_subjects=3,
        n_trials=5,
        seed=11,
    )


def test_config_from_mapping_uses_defaults_for_optional_sections() -> None:
    """Only the gambles section is required."""

    raw = _mapping()
    del raw["model"]
    del raw["simulation"]

    config = simulation_config_from_mapping(raw)

    assert config.parameters == IBLParameters()
    assert config.n_subjects == 10
    assert config.n_trials == 20
    assert config.seed is None


def test_config_from_mapping_rejects_unknown_and_missing_keys() -> None:
    """Strict schemas should name the offending keys."""

    raw = _mapping()
    raw["model"]["temperature"] = 1.0
    with pytest.raises(InvalidConfigurationError, match="model has unknown keys"):
        simulation_config_from_mapping(raw)

    raw = _mapping()
    del raw["gambles"]["B"]
    with pytest.raises(InvalidConfigurationError, match="gambles is missing required keys"):
        simulation_config_from_mapping(raw)


def test_config_section_reports_dotted_path() -> None:
    """Section checks name the section path and return the mapping unchanged."""

    section = {"outcomes": [0, 1], "p_outcome_1": 0.5}
    assert config_section(section, path="gambles.A", allowed=("outcomes", "p_outcome_1")) is section

    with pytest.raises(InvalidConfigurationError, match="gambles.B must be an object mapping"):
        config_section([0, 1], path="gambles.B", allowed=("outcomes",))
    with pytest.raises(InvalidConfigurationError, match=r"gambles.A is missing required keys: \['p_outcome_1'\]"):
        config_section(
            {"outcomes": [0, 1]},
            path="gambles.A",
            allowed=("outcomes", "p_outcome_1"),
            required=("outcomes", "p_outcome_1"),
        )


def test_config_from_mapping_rejects_bad_values() -> None:
    """Malformed scalars should raise configuration errors with field paths."""

    raw = _mapping()
    raw["gambles"]["A"]["outcomes"] = [1, 2, 3]
    with pytest.raises(InvalidConfigurationError, match="gambles.A.outcomes"):
        simulation_config_from_mapping(raw)

    raw = _mapping()
    raw["simulation"]["n_trials"] = 2.5
    with pytest.raises(InvalidConfigurationError, match="simulation.n_trials"):
        simulation_config_from_mapping(raw)

    raw = _mapping()
    raw["gambles"]["B"]["p_outcome_1"] = 1.5
    with pytest.raises(InvalidConfigurationError, match="p_outcome_1"):
        simulation_config_from_mapping(raw)


def test_load_config_mapping_accepts_json_and_yaml(tmp_path) -> None:
    """Loader should parse JSON and YAML config objects."""

    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"a": 1, "b": {"c": 2}}), encoding="utf-8")
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("a: 1\nb:\n  c: 2\n", encoding="utf-8")

    assert load_config_mapping(json_path) == {"a": 1, "b": {"c": 2}}
    assert load_config_mapping(yaml_path) == {"a": 1, "b": {"c": 2}}


def test_load_config_mapping_rejects_unsupported_extension_and_root(tmp_path) -> None:
    """Loader should fail fast on unknown suffixes and non-mapping roots."""

    toml_path = tmp_path / "config.toml"
    toml_path.write_text("a = 1\n", encoding="utf-8")
    with pytest.raises(InvalidConfigurationError, match="unsupported config file extension"):
        load_config_mapping(toml_path)

    list_path = tmp_path / "config.json"
    list_path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(InvalidConfigurationError, match="config root must be a JSON/YAML object"):
        load_config_mapping(list_path)


def test_load_simulation_config_from_yaml(tmp_path) -> None:
    """YAML files should produce the same config as the equivalent mapping."""

    path = tmp_path / "simulation.yml"
    path.write_text(
        "gambles:\n"
        "  A: {outcomes: [0, 100], p_outcome_1: 0.1}\n"
        "  B: {outcomes: [10, 20], p_outcome_1: 0.5}\n"
        "model: {decay: 0.75, sigma: 0.5}\n"
        "simulation: {n_subjects: 3, n_trials: 5, seed: 11}\n",
        encoding="utf-8",
    )

    assert load_simulation_config(path) == simulation_config_from_mapping(_mapping())
