"""Top-level package for ``ibl_choice``.

The package simulates repeated choices between two gambles with an
instance-based learning model:

1. an :class:`~ibl_choice.core.config.IBLSimulationConfig` describes the
   gambles, model parameters, and batch size,
2. :func:`~ibl_choice.runtime.engine.run_simulation` runs every subject with
   its own memory and random stream,
3. each trial the :class:`~ibl_choice.models.ibl.InstanceBasedLearningModel`
   retrieves from memory, reports ``P(A)``, plays a gamble, and stores the
   observed outcome,
4. the resulting :class:`~ibl_choice.core.data.SimulationResult` is handed to
   external analysis, optionally through the CSV writer in ``ibl_choice.io``.
"""

from .core.config import (
    Gamble,
    IBLParameters,
    IBLSimulationConfig,
    default_simulation_config,
    load_simulation_config,
    simulation_config_from_mapping,
)
from .core.data import SimulationResult, TrialRecord
from .core.errors import (
    IBLSimulationError,
    InvalidConfigurationError,
    NumericDegeneracyError,
    SimulationCancelledError,
    SubjectSimulationError,
)
from .models import InstanceBasedLearningModel, InstanceSlot, MemoryStore
from .runtime.engine import derive_subject_seeds, run_simulation, run_subject

__all__ = [
    "Gamble",
    "IBLParameters",
    "IBLSimulationConfig",
    "IBLSimulationError",
    "InstanceBasedLearningModel",
    "InstanceSlot",
    "InvalidConfigurationError",
    "MemoryStore",
    "NumericDegeneracyError",
    "SimulationCancelledError",
    "SimulationResult",
    "SubjectSimulationError",
    "TrialRecord",
    "default_simulation_config",
    "derive_subject_seeds",
    "load_simulation_config",
    "run_simulation",
    "run_subject",
    "simulation_config_from_mapping",
]
