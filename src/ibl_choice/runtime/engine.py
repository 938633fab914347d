"""Subject and batch runners for IBL gamble simulations.

This module provides two runtime entry points:

- :func:`run_subject`: one subject, fresh memory, sequential trials.
- :func:`run_simulation`: every subject of a configuration, concatenated into
  one :class:`~ibl_choice.core.data.SimulationResult`.

Each subject draws from its own generator seeded with a per-subject seed that
is fixed before any subject runs, so results do not depend on execution order
or on the number of worker processes.
"""

from __future__ import annotations

import logging
import numbers
import os
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ProcessPoolExecutor

import numpy as np

from ibl_choice.core.config import IBLSimulationConfig
from ibl_choice.core.data import SimulationResult, TrialRecord
from ibl_choice.core.errors import (
    IBLSimulationError,
    InvalidConfigurationError,
    SimulationCancelledError,
    SubjectSimulationError,
)
from ibl_choice.models.ibl import InstanceBasedLearningModel
from ibl_choice.models.memory import anchor_value

logger = logging.getLogger(__name__)

ShouldStop = Callable[[], bool]

_MAX_SEED = 2**31 - 1


def derive_subject_seeds(n_subjects: int, seed: int | None) -> tuple[int, ...]:
    """Derive one independent seed per subject from a master seed.

    Parameters
    ----------
    n_subjects : int
        Number of seeds to draw.
    seed : int | None
        Master seed. ``None`` uses NumPy's entropy source.

    Returns
    -------
    tuple[int, ...]
        Seeds indexed by ``subject - 1``.
    """

    rng = np.random.default_rng(seed)
    return tuple(int(rng.integers(0, _MAX_SEED)) for _ in range(n_subjects))


def run_subject(
    config: IBLSimulationConfig,
    *,
    subject: int,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    should_stop: ShouldStop | None = None,
) -> tuple[TrialRecord, ...]:
    """Simulate one subject across all trials.

    Parameters
    ----------
    config : IBLSimulationConfig
        Validated simulation configuration.
    subject : int
        One-based subject index written to every record.
    seed : int | None, optional
        Seed for this subject's generator. Ignored when ``rng`` is given.
    rng : numpy.random.Generator | None, optional
        Explicit generator to draw from.
    should_stop : Callable[[], bool] | None, optional
        Polled before every computed trial.

    Returns
    -------
    tuple[TrialRecord, ...]
        ``config.n_trials`` records; trial 1 is the seeded ``out = 0.5`` row.

    Raises
    ------
    SimulationCancelledError
        If ``should_stop`` returns true.
    NumericDegeneracyError
        If a softmax becomes undefined.
    """

    generator = rng if rng is not None else np.random.default_rng(seed)
    model = InstanceBasedLearningModel(config)

    records = [TrialRecord.first_trial(subject)]
    for trial in range(2, config.n_trials + 1):
        if should_stop is not None and should_stop():
            raise SimulationCancelledError(f"cancelled before trial {trial} of subject {subject}")
        computation = model.step(trial, generator)
        records.append(computation.to_record(subject))

    logger.debug("subject %d finished %d trials, trace lengths %s", subject, config.n_trials, model.memory.trace_lengths())
    return tuple(records)


def run_simulation(
    config: IBLSimulationConfig,
    *,
    subject_seeds: Sequence[int] | None = None,
    n_jobs: int = 1,
    fail_fast: bool = True,
    should_stop: ShouldStop | None = None,
) -> SimulationResult:
    """Simulate every subject and concatenate their records.

    Parameters
    ----------
    config : IBLSimulationConfig
        Validated simulation configuration.
    subject_seeds : Sequence[int] | None, optional
        Explicit per-subject seeds. When ``None`` they are derived from
        ``config.seed`` with :func:`derive_subject_seeds`.
    n_jobs : int, optional
        Worker processes. ``1`` runs serially, ``-1`` uses every CPU.
    fail_fast : bool, optional
        If true, the first failing subject aborts the batch. Otherwise failing
        subjects are logged, left out of ``records``, and listed in
        :attr:`SimulationResult.failures`.
    should_stop : Callable[[], bool] | None, optional
        Cancellation hook, polled between subjects and, when running serially,
        between trials.

    Returns
    -------
    SimulationResult
        Records ordered by ``(subject, trial)``.

    Raises
    ------
    InvalidConfigurationError
        If seeds or ``n_jobs`` are invalid or the gambles are degenerate. No
        subject runs in that case.
    SubjectSimulationError
        If a subject fails and ``fail_fast`` is true.
    SimulationCancelledError
        If ``should_stop`` returns true.
    """

    anchor_value(config.gamble_a, config.gamble_b)
    seeds = _resolve_subject_seeds(config, subject_seeds)
    workers = _resolve_n_jobs(n_jobs, n_subjects=config.n_subjects)

    logger.info(
        "simulating %d subjects x %d trials (decay=%s, sigma=%s, weighting=%s, workers=%d)",
        config.n_subjects,
        config.n_trials,
        config.parameters.decay,
        config.parameters.sigma,
        config.gamble_weighting,
        workers,
    )

    if workers == 1:
        outcomes = _run_serial(config, seeds, should_stop=should_stop, fail_fast=fail_fast)
    else:
        outcomes = _run_parallel(config, seeds, workers=workers, should_stop=should_stop, fail_fast=fail_fast)

    records: list[TrialRecord] = []
    failures: dict[int, str] = {}
    for subject, outcome in outcomes:
        if isinstance(outcome, BaseException):
            failures[subject] = str(outcome)
        else:
            records.extend(outcome)

    logger.info("simulation produced %d records, %d failed subjects", len(records), len(failures))
    return SimulationResult(
        records=tuple(records),
        config=config,
        subject_seeds=seeds,
        failures=failures,
    )


_SubjectOutcome = tuple[int, "tuple[TrialRecord, ...] | BaseException"]

# Failures that are local to one subject's run.
_SUBJECT_ERRORS = (IBLSimulationError, ArithmeticError, ValueError)


def _run_serial(
    config: IBLSimulationConfig,
    seeds: tuple[int, ...],
    *,
    should_stop: ShouldStop | None,
    fail_fast: bool,
) -> list[_SubjectOutcome]:
    outcomes: list[_SubjectOutcome] = []
    for subject, seed in enumerate(seeds, start=1):
        _check_cancelled(should_stop, subject=subject)
        try:
            records = run_subject(config, subject=subject, seed=seed, should_stop=should_stop)
        except SimulationCancelledError:
            raise
        except _SUBJECT_ERRORS as exc:
            outcomes.append((subject, _handle_subject_failure(subject, exc, fail_fast=fail_fast)))
            continue
        outcomes.append((subject, records))
    return outcomes


def _run_parallel(
    config: IBLSimulationConfig,
    seeds: tuple[int, ...],
    *,
    workers: int,
    should_stop: ShouldStop | None,
    fail_fast: bool,
) -> list[_SubjectOutcome]:
    outcomes: list[_SubjectOutcome] = []
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures: list[Future[tuple[TrialRecord, ...]]] = [
            executor.submit(run_subject, config, subject=subject, seed=seed)
            for subject, seed in enumerate(seeds, start=1)
        ]
        try:
            for subject, future in enumerate(futures, start=1):
                _check_cancelled(should_stop, subject=subject)
                try:
                    records = future.result()
                except _SUBJECT_ERRORS as exc:
                    outcomes.append((subject, _handle_subject_failure(subject, exc, fail_fast=fail_fast)))
                    continue
                outcomes.append((subject, records))
        except BaseException:
            for future in futures:
                future.cancel()
            raise
    return outcomes


def _handle_subject_failure(subject: int, exc: BaseException, *, fail_fast: bool) -> BaseException:
    """Raise in fail-fast mode, otherwise log and return the failure."""

    if fail_fast:
        raise SubjectSimulationError(subject, str(exc)) from exc
    logger.warning("subject %d failed and is excluded from the results: %s", subject, exc)
    return exc


def _check_cancelled(should_stop: ShouldStop | None, *, subject: int) -> None:
    if should_stop is not None and should_stop():
        raise SimulationCancelledError(f"cancelled before subject {subject}")


def _resolve_subject_seeds(
    config: IBLSimulationConfig,
    subject_seeds: Sequence[int] | None,
) -> tuple[int, ...]:
    if subject_seeds is None:
        return derive_subject_seeds(config.n_subjects, config.seed)

    seeds = tuple(subject_seeds)
    if len(seeds) != config.n_subjects:
        raise InvalidConfigurationError(
            f"subject_seeds must have n_subjects={config.n_subjects} entries, got {len(seeds)}"
        )
    for seed in seeds:
        if isinstance(seed, bool) or not isinstance(seed, numbers.Integral) or seed < 0:
            raise InvalidConfigurationError(f"subject seeds must be non-negative integers, got {seed!r}")
    return tuple(int(seed) for seed in seeds)


def _resolve_n_jobs(n_jobs: int, *, n_subjects: int) -> int:
    if n_jobs == -1:
        n_jobs = os.cpu_count() or 1
    elif isinstance(n_jobs, bool) or not isinstance(n_jobs, numbers.Integral) or n_jobs < 1:
        raise InvalidConfigurationError("n_jobs must be a positive integer or -1")
    return max(1, min(int(n_jobs), n_subjects))


__all__ = ["derive_subject_seeds", "run_simulation", "run_subject"]
