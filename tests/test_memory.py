"""Tests for per-subject instance memory."""

from __future__ import annotations

import pytest

from ibl_choice.core import Gamble, IBLSimulationConfig, default_simulation_config
from ibl_choice.models import InstanceSlot, MemoryStore, anchor_value, slot_probabilities


def test_anchor_value_is_scaled_max_of_reachable_outcomes() -> None:
    """Anchor value should be 1.1 times the best outcome that can occur."""

    assert anchor_value(Gamble(0.0, 100.0, 0.1), Gamble(10.0, 20.0, 0.5)) == pytest.approx(110.0)


def test_anchor_value_ignores_zero_probability_outcomes() -> None:
    """Unreachable payoffs must not inflate the anchor."""

    # A's 100 never occurs, so the best reachable payoff is B's 20.
    value = anchor_value(Gamble(0.0, 100.0, 1.0), Gamble(10.0, 20.0, 0.5))
    assert value == pytest.approx(22.0)


def test_anchor_value_scales_negative_payoffs_literally() -> None:
    """The 1.1 factor applies to the maximum even when it is negative."""

    value = anchor_value(Gamble(-10.0, -20.0, 0.5), Gamble(-5.0, -30.0, 0.5))
    assert value == pytest.approx(-5.5)


def test_memory_from_config_seeds_anchors_only() -> None:
    """Anchors start with trace [1]; outcome slots start empty."""

    memory = MemoryStore.from_config(default_simulation_config())

    assert memory.values == pytest.approx((0.0, 100.0, 110.0, 10.0, 20.0, 110.0))
    assert memory.traces(InstanceSlot.A_ANCHOR) == (1,)
    assert memory.traces(InstanceSlot.B_ANCHOR) == (1,)
    for slot in (
        InstanceSlot.A_OUTCOME_1,
        InstanceSlot.A_OUTCOME_2,
        InstanceSlot.B_OUTCOME_1,
        InstanceSlot.B_OUTCOME_2,
    ):
        assert memory.traces(slot) == ()
    assert memory.trace_lengths() == (0, 0, 1, 0, 0, 1)


def test_reinforce_appends_in_trial_order() -> None:
    """Traces are append-only and strictly increasing."""

    memory = MemoryStore.from_config(default_simulation_config())

    memory.reinforce(InstanceSlot.A_OUTCOME_2, 2)
    memory.reinforce(InstanceSlot.A_OUTCOME_2, 5)
    memory.reinforce(InstanceSlot.A_ANCHOR, 3)

    assert memory.traces(InstanceSlot.A_OUTCOME_2) == (2, 5)
    assert memory.traces(InstanceSlot.A_ANCHOR) == (1, 3)

    with pytest.raises(ValueError, match="must be greater than latest trace"):
        memory.reinforce(InstanceSlot.A_OUTCOME_2, 5)


def test_traces_are_returned_as_copies() -> None:
    """Callers cannot mutate memory through returned trace tuples."""

    memory = MemoryStore.from_config(default_simulation_config())
    snapshot = memory.snapshot()

    memory.reinforce(InstanceSlot.B_OUTCOME_1, 2)

    assert snapshot["B_OUTCOME_1"] == ()
    assert memory.snapshot()["B_OUTCOME_1"] == (2,)


def test_memory_stores_are_independent() -> None:
    """Two stores built from one config share no state."""

    config = default_simulation_config()
    first = MemoryStore.from_config(config)
    second = MemoryStore.from_config(config)

    first.reinforce(InstanceSlot.A_OUTCOME_1, 2)

    assert second.traces(InstanceSlot.A_OUTCOME_1) == ()


def test_slot_probabilities_treat_anchors_as_certain() -> None:
    """Anchors are always reachable; outcome slots follow their gamble."""

    config = IBLSimulationConfig(gamble_a=Gamble(1.0, 2.0, 0.0), gamble_b=Gamble(3.0, 4.0, 0.25))

    assert slot_probabilities(config) == pytest.approx((0.0, 1.0, 1.0, 0.25, 0.75, 1.0))


def test_memory_rejects_wrong_slot_count() -> None:
    """The store always holds exactly six slots."""

    with pytest.raises(ValueError, match="values must have 6 entries"):
        MemoryStore(values=(1.0, 2.0))
