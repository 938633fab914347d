"""Tests for CSV export of trial records."""

from __future__ import annotations

import csv
import json
import math

import pytest

from ibl_choice.core import Gamble, IBLSimulationConfig, RECORD_COLUMNS, TrialRecord
from ibl_choice.io import (
    read_trial_records_csv,
    trial_record_rows,
    write_summary_json,
    write_trial_records_csv,
)
from ibl_choice.runtime import run_simulation


def _result():
    config = IBLSimulationConfig(
        gamble_a=Gamble(0.0, 100.0, 0.0),
        gamble_b=Gamble(10.0, 20.0, 0.5),
        n_subjects=2,
        n_trials=4,
        seed=5,
    )
    return run_simulation(config)


def test_csv_has_record_columns_and_blank_first_trial_cells(tmp_path) -> None:
    """Header follows RECORD_COLUMNS; trial-1 model columns are empty."""

    path = write_trial_records_csv(_result(), tmp_path / "out" / "records.csv")

    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        rows = list(reader)
        assert tuple(reader.fieldnames) == RECORD_COLUMNS

    assert len(rows) == 8
    first = rows[0]
    assert (first["subject"], first["trial"], first["out"]) == ("1", "1", "0.5")
    assert first["aa_1"] == ""
    assert rows[1]["aa_1"] == "-inf"


def test_csv_reader_restores_records_exactly(tmp_path) -> None:
    """Reading the export gives back equal records, infinities included."""

    result = _result()
    path = write_trial_records_csv(result, tmp_path / "records.csv")

    loaded = read_trial_records_csv(path)

    assert loaded == result.records
    assert loaded[1].aa_1 == -math.inf
    assert loaded[0].bv_a is None


def test_rows_accept_plain_record_iterables() -> None:
    """Row flattening works on any sequence of records."""

    rows = trial_record_rows([TrialRecord.first_trial(subject=2)])

    assert rows == [{column: "" for column in RECORD_COLUMNS} | {"subject": 2, "trial": 1, "out": 0.5}]


def test_writer_rejects_empty_input(tmp_path) -> None:
    """Empty exports are refused."""

    with pytest.raises(ValueError, match="records must not be empty"):
        write_trial_records_csv([], tmp_path / "empty.csv")


def test_reader_requires_all_columns(tmp_path) -> None:
    """Missing columns are reported by name."""

    path = tmp_path / "partial.csv"
    path.write_text("subject,trial\n1,1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="missing required columns"):
        read_trial_records_csv(path)


def test_summary_json_describes_run(tmp_path) -> None:
    """Summary includes sizes, parameters, and expected values."""

    result = _result()
    path = write_summary_json(result, tmp_path / "summary.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["n_records"] == 8
    assert payload["expected_value_a"] == pytest.approx(100.0)
    assert payload["expected_value_b"] == pytest.approx(15.0)
    assert payload["subject_seeds"] == list(result.subject_seeds)
    assert payload["failures"] == {}
