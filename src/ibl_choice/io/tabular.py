"""Tabular CSV export of simulated trial records.

The CSV file is a hand-off to external analysis tools. Columns follow
:data:`~ibl_choice.core.data.RECORD_COLUMNS`; values that are undefined on the
seeded first trial are written as empty cells, and unretrievable activations
as ``-inf``.
"""

from __future__ import annotations

import csv
import json
import math
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ibl_choice.core.data import COMPUTED_COLUMNS, RECORD_COLUMNS, SimulationResult, TrialRecord


def trial_record_rows(records: SimulationResult | Iterable[TrialRecord]) -> list[dict[str, Any]]:
    """Flatten records into CSV-ready row mappings in column order."""

    source = records.records if isinstance(records, SimulationResult) else records
    return [
        {column: _format_cell(getattr(record, column)) for column in RECORD_COLUMNS}
        for record in source
    ]


def write_trial_records_csv(
    records: SimulationResult | Iterable[TrialRecord],
    path: str | Path,
) -> Path:
    """Write trial records to a CSV file.

    Parameters
    ----------
    records : SimulationResult | Iterable[TrialRecord]
        Rows to write, in order.
    path : str | pathlib.Path
        Destination CSV path. Parent directories are created.

    Returns
    -------
    pathlib.Path
        Output CSV path.

    Raises
    ------
    ValueError
        If no records are provided.
    """

    rows = trial_record_rows(records)
    if not rows:
        raise ValueError("records must not be empty")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(RECORD_COLUMNS))
        writer.writeheader()
        writer.writerows(rows)
    return output_path


def read_trial_records_csv(path: str | Path) -> tuple[TrialRecord, ...]:
    """Read a CSV written by :func:`write_trial_records_csv`.

    Raises
    ------
    ValueError
        If required columns are missing or a cell cannot be parsed.
    """

    input_path = Path(path)
    with input_path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        _require_columns(reader.fieldnames, required=RECORD_COLUMNS)
        return tuple(_record_from_row(raw, row_index=index) for index, raw in enumerate(reader))


def write_summary_json(result: SimulationResult, path: str | Path) -> Path:
    """Write a small JSON summary describing a simulation run."""

    config = result.config
    payload = {
        "n_subjects": config.n_subjects,
        "n_trials": config.n_trials,
        "n_records": len(result),
        "decay": config.parameters.decay,
        "sigma": config.parameters.sigma,
        "gamble_weighting": config.gamble_weighting,
        "expected_value_a": config.gamble_a.expected_value,
        "expected_value_b": config.gamble_b.expected_value,
        "subject_seeds": list(result.subject_seeds),
        "failures": {str(subject): message for subject, message in result.failures.items()},
    }
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    return output_path


def _format_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def _record_from_row(raw: Mapping[str, str | None], *, row_index: int) -> TrialRecord:
    try:
        kwargs: dict[str, Any] = {
            "subject": int(raw["subject"] or ""),
            "trial": int(raw["trial"] or ""),
            "out": float(raw["out"] or ""),
        }
        for column in COMPUTED_COLUMNS:
            cell = raw.get(column)
            kwargs[column] = None if cell in (None, "") else float(cell)
    except ValueError as exc:
        raise ValueError(f"row {row_index}: {exc}") from exc
    return TrialRecord(**kwargs)


def _require_columns(fieldnames: list[str] | None, *, required: tuple[str, ...]) -> None:
    present = set(fieldnames or ())
    missing = [column for column in required if column not in present]
    if missing:
        raise ValueError(f"CSV is missing required columns: {missing}")


__all__ = [
    "read_trial_records_csv",
    "trial_record_rows",
    "write_summary_json",
    "write_trial_records_csv",
]
