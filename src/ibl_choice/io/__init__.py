"""I/O helpers for exporting simulation results."""

from .tabular import (
    read_trial_records_csv,
    trial_record_rows,
    write_summary_json,
    write_trial_records_csv,
)

__all__ = [
    "read_trial_records_csv",
    "trial_record_rows",
    "write_summary_json",
    "write_trial_records_csv",
]
