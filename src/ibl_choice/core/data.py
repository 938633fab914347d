"""Result containers for simulated subjects.

A :class:`SimulationResult` is the table handed to downstream analysis: one
:class:`TrialRecord` per subject per trial, ordered by ``(subject, trial)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from .config import IBLSimulationConfig

RECORD_COLUMNS: tuple[str, ...] = (
    "subject",
    "trial",
    "out",
    "aa_1",
    "aa_2",
    "ab_1",
    "ab_2",
    "bv_a",
    "bv_b",
    "pa_1",
    "pa_2",
    "pb_1",
    "pb_2",
)

# Columns that are undefined on the seeded first trial.
COMPUTED_COLUMNS: tuple[str, ...] = RECORD_COLUMNS[3:]


@dataclass(frozen=True, slots=True)
class TrialRecord:
    """One simulated trial for one subject.

    Parameters
    ----------
    subject : int
        One-based subject index.
    trial : int
        One-based trial index.
    out : float
        Probability of choosing option A.
    aa_1, aa_2, ab_1, ab_2 : float | None
        Activations of the A/B outcome instances. ``-inf`` marks an instance
        that cannot be retrieved. ``None`` on trial 1.
    bv_a, bv_b : float | None
        Blended values of options A and B. ``None`` on trial 1.
    pa_1, pa_2, pb_1, pb_2 : float | None
        Retrieval probabilities of the A/B outcome instances. ``None`` on
        trial 1.

    Raises
    ------
    ValueError
        If indices are not positive.
    """

    subject: int
    trial: int
    out: float
    aa_1: float | None = None
    aa_2: float | None = None
    ab_1: float | None = None
    ab_2: float | None = None
    bv_a: float | None = None
    bv_b: float | None = None
    pa_1: float | None = None
    pa_2: float | None = None
    pb_1: float | None = None
    pb_2: float | None = None

    def __post_init__(self) -> None:
        if self.subject < 1:
            raise ValueError("subject must be >= 1")
        if self.trial < 1:
            raise ValueError("trial must be >= 1")

    @classmethod
    def first_trial(cls, subject: int) -> TrialRecord:
        """Return the seeded trial-1 row with ``out = 0.5``."""

        return cls(subject=subject, trial=1, out=0.5)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Ordered per-subject, per-trial output of a batch simulation.

    Parameters
    ----------
    records : tuple[TrialRecord, ...]
        Trial rows ordered by ``(subject, trial)``.
    config : IBLSimulationConfig
        Configuration that produced the records.
    subject_seeds : tuple[int, ...]
        Seed used for each subject, indexed by ``subject - 1``.
    failures : Mapping[int, str], optional
        Subjects whose runs failed in a non-fail-fast batch, with the failure
        message. Their rows are absent from ``records``.
    """

    records: tuple[TrialRecord, ...]
    config: IBLSimulationConfig
    subject_seeds: tuple[int, ...]
    failures: Mapping[int, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def subjects(self) -> tuple[int, ...]:
        """Subject indices present in ``records``, in order."""

        seen: dict[int, None] = {}
        for record in self.records:
            seen.setdefault(record.subject, None)
        return tuple(seen)

    def subject_records(self, subject: int) -> tuple[TrialRecord, ...]:
        return tuple(record for record in self.records if record.subject == subject)

    def column(self, name: str) -> tuple[Any, ...]:
        """Return one column across all records.

        Raises
        ------
        KeyError
            If ``name`` is not a record column.
        """

        if name not in RECORD_COLUMNS:
            raise KeyError(f"unknown column {name!r}; expected one of {list(RECORD_COLUMNS)}")
        return tuple(getattr(record, name) for record in self.records)

    def to_rows(self) -> list[dict[str, Any]]:
        return [record.as_dict() for record in self.records]


__all__ = ["COMPUTED_COLUMNS", "RECORD_COLUMNS", "SimulationResult", "TrialRecord"]
