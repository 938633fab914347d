"""Instance-based learning model and its per-subject memory."""

from .ibl import (
    InstanceBasedLearningModel,
    TrialComputation,
    base_activation,
    blended_values,
    choice_probability,
    compute_activations,
    gamble_weights,
    retrieval_probabilities,
)
from .memory import (
    OPTION_A_SLOTS,
    OPTION_B_SLOTS,
    OUTCOME_SLOTS,
    InstanceSlot,
    MemoryStore,
    anchor_value,
    slot_probabilities,
)

__all__ = [
    "InstanceBasedLearningModel",
    "InstanceSlot",
    "MemoryStore",
    "OPTION_A_SLOTS",
    "OPTION_B_SLOTS",
    "OUTCOME_SLOTS",
    "TrialComputation",
    "anchor_value",
    "base_activation",
    "blended_values",
    "choice_probability",
    "compute_activations",
    "gamble_weights",
    "retrieval_probabilities",
    "slot_probabilities",
]
