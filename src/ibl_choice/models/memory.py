"""Instance memory for one simulated subject.

Memory holds six instance slots: two outcome instances and one anchor
instance per option. Anchors carry a shared optimistic value and are
pre-seeded with one trace at trial 1 so that every option has something to
retrieve from the first computed trial onward.
"""

from __future__ import annotations

from enum import IntEnum

from ibl_choice.core.config import Gamble, IBLSimulationConfig
from ibl_choice.core.errors import InvalidConfigurationError

ANCHOR_SCALE = 1.1
ANCHOR_SEED_TRIAL = 1


class InstanceSlot(IntEnum):
    """Fixed identifiers of the six memory instances, in storage order."""

    A_OUTCOME_1 = 0
    A_OUTCOME_2 = 1
    A_ANCHOR = 2
    B_OUTCOME_1 = 3
    B_OUTCOME_2 = 4
    B_ANCHOR = 5

    @property
    def is_anchor(self) -> bool:
        return self in (InstanceSlot.A_ANCHOR, InstanceSlot.B_ANCHOR)


OPTION_A_SLOTS: tuple[InstanceSlot, ...] = (
    InstanceSlot.A_OUTCOME_1,
    InstanceSlot.A_OUTCOME_2,
    InstanceSlot.A_ANCHOR,
)
OPTION_B_SLOTS: tuple[InstanceSlot, ...] = (
    InstanceSlot.B_OUTCOME_1,
    InstanceSlot.B_OUTCOME_2,
    InstanceSlot.B_ANCHOR,
)
OUTCOME_SLOTS: tuple[InstanceSlot, ...] = OPTION_A_SLOTS[:2] + OPTION_B_SLOTS[:2]


def anchor_value(gamble_a: Gamble, gamble_b: Gamble) -> float:
    """Return ``1.1 * max`` over every payoff that can actually occur.

    Raises
    ------
    InvalidConfigurationError
        If no outcome has positive probability.
    """

    reachable = [
        value
        for gamble in (gamble_a, gamble_b)
        for value, probability in zip(gamble.outcomes, gamble.probabilities, strict=True)
        if probability > 0.0
    ]
    if not reachable:
        raise InvalidConfigurationError("degenerate gambles: no outcome has positive probability")
    return ANCHOR_SCALE * max(reachable)


def slot_probabilities(config: IBLSimulationConfig) -> tuple[float, ...]:
    """Occurrence probability of each slot's outcome; anchors count as 1."""

    a1, a2 = config.gamble_a.probabilities
    b1, b2 = config.gamble_b.probabilities
    return (a1, a2, 1.0, b1, b2, 1.0)


class MemoryStore:
    """Append-only instance memory for one subject.

    Parameters
    ----------
    values : tuple[float, ...]
        Value of each slot, indexed by :class:`InstanceSlot`.
    traces : tuple[tuple[int, ...], ...] | None, optional
        Initial trace lists. Defaults to empty lists for every slot.

    Notes
    -----
    Trace lists only grow. :meth:`reinforce` rejects trial indices that are
    not strictly greater than the slot's latest trace.
    """

    def __init__(
        self,
        values: tuple[float, ...],
        traces: tuple[tuple[int, ...], ...] | None = None,
    ) -> None:
        if len(values) != len(InstanceSlot):
            raise ValueError(f"values must have {len(InstanceSlot)} entries")
        initial = traces if traces is not None else tuple(() for _ in InstanceSlot)
        if len(initial) != len(InstanceSlot):
            raise ValueError(f"traces must have {len(InstanceSlot)} entries")

        self._values = tuple(float(value) for value in values)
        self._traces: list[list[int]] = [list(trace) for trace in initial]

    @classmethod
    def from_config(cls, config: IBLSimulationConfig) -> MemoryStore:
        """Build a fresh store with seeded anchors for ``config``'s gambles."""

        pp = anchor_value(config.gamble_a, config.gamble_b)
        values = (
            config.gamble_a.outcome_1,
            config.gamble_a.outcome_2,
            pp,
            config.gamble_b.outcome_1,
            config.gamble_b.outcome_2,
            pp,
        )
        traces = tuple(
            (ANCHOR_SEED_TRIAL,) if slot.is_anchor else ()
            for slot in InstanceSlot
        )
        return cls(values=values, traces=traces)

    @property
    def values(self) -> tuple[float, ...]:
        return self._values

    def value(self, slot: InstanceSlot) -> float:
        return self._values[slot]

    def traces(self, slot: InstanceSlot) -> tuple[int, ...]:
        return tuple(self._traces[slot])

    def trace_lengths(self) -> tuple[int, ...]:
        return tuple(len(trace) for trace in self._traces)

    def reinforce(self, slot: InstanceSlot, trial: int) -> None:
        """Append ``trial`` to ``slot``'s trace list.

        Raises
        ------
        ValueError
            If ``trial`` does not come after the slot's latest trace.
        """

        trace = self._traces[slot]
        if trace and trial <= trace[-1]:
            raise ValueError(
                f"trial {trial} must be greater than latest trace {trace[-1]} of {slot.name}"
            )
        trace.append(int(trial))

    def snapshot(self) -> dict[str, tuple[int, ...]]:
        """Return slot-name to trace-list mapping."""

        return {slot.name: tuple(self._traces[slot]) for slot in InstanceSlot}


__all__ = [
    "ANCHOR_SCALE",
    "InstanceSlot",
    "MemoryStore",
    "OPTION_A_SLOTS",
    "OPTION_B_SLOTS",
    "OUTCOME_SLOTS",
    "anchor_value",
    "slot_probabilities",
]
