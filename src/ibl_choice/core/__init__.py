"""Configuration, errors, and result containers."""

from .config import (
    GAMBLE_WEIGHTINGS,
    Gamble,
    IBLParameters,
    IBLSimulationConfig,
    default_simulation_config,
    load_simulation_config,
    simulation_config_from_mapping,
)
from .config_loading import SUPPORTED_CONFIG_SUFFIXES, load_config_mapping
from .data import RECORD_COLUMNS, SimulationResult, TrialRecord
from .errors import (
    IBLSimulationError,
    InvalidConfigurationError,
    NumericDegeneracyError,
    SimulationCancelledError,
    SubjectSimulationError,
)

__all__ = [
    "GAMBLE_WEIGHTINGS",
    "Gamble",
    "IBLParameters",
    "IBLSimulationConfig",
    "IBLSimulationError",
    "InvalidConfigurationError",
    "NumericDegeneracyError",
    "RECORD_COLUMNS",
    "SUPPORTED_CONFIG_SUFFIXES",
    "SimulationCancelledError",
    "SimulationResult",
    "SubjectSimulationError",
    "TrialRecord",
    "default_simulation_config",
    "load_config_mapping",
    "load_simulation_config",
    "simulation_config_from_mapping",
]
