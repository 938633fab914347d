"""Instance-based learning model for repeated binary gambles."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ibl_choice.core.config import IBLParameters, IBLSimulationConfig
from ibl_choice.core.data import TrialRecord
from ibl_choice.core.errors import NumericDegeneracyError
from ibl_choice.core.probabilities import (
    checked_softmax,
    logistic_noise,
    sample_index,
    uniform_open_interval,
)
from ibl_choice.models.memory import (
    OPTION_A_SLOTS,
    OPTION_B_SLOTS,
    OUTCOME_SLOTS,
    InstanceSlot,
    MemoryStore,
    slot_probabilities,
)


@dataclass(frozen=True, slots=True)
class TrialComputation:
    """Everything the model derives for one trial before sampling.

    Parameters
    ----------
    trial : int
        One-based trial index.
    activations : tuple[float, ...]
        Noisy activation of each slot, indexed by :class:`InstanceSlot`.
    retrieval_probabilities : tuple[float, ...]
        Per-option retrieval probability of each slot, indexed by
        :class:`InstanceSlot`. The three entries of each option sum to one.
    blended_values : tuple[float, float]
        Blended values of options A and B.
    choice_probability : float
        Probability of choosing option A.
    """

    trial: int
    activations: tuple[float, ...]
    retrieval_probabilities: tuple[float, ...]
    blended_values: tuple[float, float]
    choice_probability: float

    def to_record(self, subject: int) -> TrialRecord:
        """Project onto the reported columns; anchor values stay internal."""

        aa_1, aa_2, ab_1, ab_2 = (self.activations[slot] for slot in OUTCOME_SLOTS)
        pa_1, pa_2, pb_1, pb_2 = (self.retrieval_probabilities[slot] for slot in OUTCOME_SLOTS)
        return TrialRecord(
            subject=subject,
            trial=self.trial,
            out=self.choice_probability,
            aa_1=aa_1,
            aa_2=aa_2,
            ab_1=ab_1,
            ab_2=ab_2,
            bv_a=self.blended_values[0],
            bv_b=self.blended_values[1],
            pa_1=pa_1,
            pa_2=pa_2,
            pb_1=pb_1,
            pb_2=pb_2,
        )


def base_activation(trace: Sequence[int], *, trial: int, decay: float) -> float:
    """Return ``ln(sum((trial - t_j) ** -decay))`` over a trace list.

    An empty trace has nothing to retrieve and yields ``-inf``.

    Raises
    ------
    ValueError
        If a trace entry is not strictly earlier than ``trial``.
    """

    if len(trace) == 0:
        return float("-inf")
    ages = trial - np.asarray(trace, dtype=float)
    if np.any(ages <= 0):
        raise ValueError(f"trace entries must precede trial {trial}: {list(trace)}")
    return float(np.log(np.sum(ages ** -decay)))


def compute_activations(
    memory: MemoryStore,
    *,
    trial: int,
    parameters: IBLParameters,
    probabilities: Sequence[float],
    uniforms: np.ndarray,
) -> np.ndarray:
    """Noisy activations of all six slots.

    Parameters
    ----------
    memory : MemoryStore
        Subject memory as of the end of the previous trial.
    trial : int
        Current one-based trial index (``>= 2``).
    parameters : IBLParameters
        Decay and noise parameters.
    probabilities : Sequence[float]
        Occurrence probability of each slot's outcome. Slots whose outcome has
        probability exactly zero are forced to ``-inf``.
    uniforms : numpy.ndarray
        Six uniform draws, one per slot, turned into logistic noise.

    Returns
    -------
    numpy.ndarray
        Activation per slot, indexed by :class:`InstanceSlot`.
    """

    base = np.array(
        [base_activation(memory.traces(slot), trial=trial, decay=parameters.decay) for slot in InstanceSlot],
        dtype=float,
    )
    activations = base + logistic_noise(uniforms, parameters.sigma)
    unreachable = np.asarray(probabilities, dtype=float) == 0.0
    activations[unreachable] = -np.inf
    return activations


def retrieval_probabilities(activations: np.ndarray, *, tau: float) -> np.ndarray:
    """Per-option softmax of ``activation / tau``, never mixing options."""

    probabilities = np.empty(len(InstanceSlot), dtype=float)
    for label, slots in (("option A retrieval", OPTION_A_SLOTS), ("option B retrieval", OPTION_B_SLOTS)):
        index = list(slots)
        probabilities[index] = checked_softmax(activations[index] / tau, label=label)
    return probabilities


def blended_values(probabilities: np.ndarray, values: Sequence[float]) -> tuple[float, float]:
    """Retrieval-weighted value of each option, anchors included."""

    slot_values = np.asarray(values, dtype=float)
    result = []
    for slots in (OPTION_A_SLOTS, OPTION_B_SLOTS):
        index = list(slots)
        result.append(float(np.dot(probabilities[index], slot_values[index])))
    return result[0], result[1]


def choice_probability(values: tuple[float, float]) -> float:
    """Probability of choosing A: ``exp(bv_a) / (exp(bv_a) + exp(bv_b))``.

    Raises
    ------
    NumericDegeneracyError
        If either blended value is not finite.
    """

    if not all(np.isfinite(values)):
        raise NumericDegeneracyError(f"blended values must be finite, got {list(values)}")
    return float(checked_softmax(values, label="choice")[0])


def gamble_weights(p_choose_a: float, *, weighting: str) -> tuple[float, float]:
    """Sampling weights for which gamble is played.

    ``"double_exponential"`` exponentiates the choice probabilities once more,
    ``exp(p) : exp(1 - p)``, which pulls play toward 50/50.
    ``"softmax"`` plays A with probability ``p``.
    """

    if weighting == "double_exponential":
        return float(np.exp(p_choose_a)), float(np.exp(1.0 - p_choose_a))
    if weighting == "softmax":
        return p_choose_a, 1.0 - p_choose_a
    raise ValueError(f"unknown gamble weighting {weighting!r}")


class InstanceBasedLearningModel:
    """IBL agent choosing repeatedly between two gambles.

    Model Contract
    --------------
    Activation
        For slot ``i`` with traces ``T_i`` on trial ``t``:
        ``A_i = ln(sum_j (t - t_j) ** -decay) + sigma * ln((1 - u) / u)``.
        Unreachable outcomes (probability 0) have ``A_i = -inf``.
    Retrieval
        ``P_i = softmax(A_i / tau)`` within each option, ``tau = sigma * sqrt(2)``.
    Decision Rule
        ``V_k = sum_i P_i * value_i`` and ``P(A) = softmax(V)[A]``.
    Update Rule
        One gamble is played, one of its outcomes is drawn from the gamble's
        own probabilities, and the current trial is appended to that outcome's
        trace list. No other slot changes.

    Parameters
    ----------
    config : IBLSimulationConfig
        Gambles, parameters, and gamble-weighting rule.
    """

    def __init__(self, config: IBLSimulationConfig) -> None:
        self.config = config
        self._probabilities = slot_probabilities(config)
        self._memory = MemoryStore.from_config(config)

    @property
    def memory(self) -> MemoryStore:
        return self._memory

    def start_episode(self) -> None:
        """Reset memory to its seeded initial state."""

        self._memory = MemoryStore.from_config(self.config)

    def evaluate(self, trial: int, rng: np.random.Generator) -> TrialComputation:
        """Compute activations, retrieval, blended values, and ``P(A)``.

        Consumes six uniforms from ``rng``. Memory is not modified.
        """

        if trial < 2:
            raise ValueError("evaluate requires trial >= 2; trial 1 is a seeded row")

        uniforms = uniform_open_interval(rng, len(InstanceSlot))
        activations = compute_activations(
            self._memory,
            trial=trial,
            parameters=self.config.parameters,
            probabilities=self._probabilities,
            uniforms=uniforms,
        )
        retrieval = retrieval_probabilities(activations, tau=self.config.parameters.tau)
        values = blended_values(retrieval, self._memory.values)
        return TrialComputation(
            trial=trial,
            activations=tuple(float(a) for a in activations),
            retrieval_probabilities=tuple(float(p) for p in retrieval),
            blended_values=values,
            choice_probability=choice_probability(values),
        )

    def sample_played_slot(self, computation: TrialComputation, rng: np.random.Generator) -> InstanceSlot:
        """Sample which gamble is played and which of its outcomes occurs."""

        weights = gamble_weights(computation.choice_probability, weighting=self.config.gamble_weighting)
        option = sample_index(weights, rng)
        if option == 0:
            gamble, slots = self.config.gamble_a, OPTION_A_SLOTS
        else:
            gamble, slots = self.config.gamble_b, OPTION_B_SLOTS
        outcome = sample_index(gamble.probabilities, rng)
        return slots[outcome]

    def update(self, slot: InstanceSlot, trial: int) -> None:
        self._memory.reinforce(slot, trial)

    def step(self, trial: int, rng: np.random.Generator) -> TrialComputation:
        """Run one full trial: evaluate, sample the outcome, update memory."""

        computation = self.evaluate(trial, rng)
        self.update(self.sample_played_slot(computation, rng), trial)
        return computation


__all__ = [
    "InstanceBasedLearningModel",
    "TrialComputation",
    "base_activation",
    "blended_values",
    "choice_probability",
    "compute_activations",
    "gamble_weights",
    "retrieval_probabilities",
]
