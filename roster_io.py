"""Reading the semicolon roster and writing the pass/fail report."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd

from grade_calculator import FINAL_GRADE_FIELD, NAME_FIELD, SURNAME_FIELD, is_blank

FIELD_SEPARATOR = ";"

PASSING_HEADING = "Aprobados:"
FAILING_HEADING = "Suspensos:"
QUALITY_COLUMNS = ["student", "field", "value", "issue"]


def parse_roster(lines: Iterable[str]) -> pd.DataFrame:
    """Build a record frame from header + data lines.

    Fields are matched to the header by position. Surplus fields are dropped
    and missing trailing fields stay absent (NaN).
    """

    rows = iter(lines)
    header_line = next(rows, None)
    if header_line is None:
        raise ValueError("Roster is empty: no header line found")

    headers = header_line.rstrip("\r\n").split(FIELD_SEPARATOR)
    records: List[Dict[str, str]] = []
    for line in rows:
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        fields = line.split(FIELD_SEPARATOR)
        records.append(dict(zip(headers, fields)))

    return pd.DataFrame(records, columns=headers, dtype=object)


def sort_by_surname(frame: pd.DataFrame) -> pd.DataFrame:
    if SURNAME_FIELD not in frame.columns:
        return frame.reset_index(drop=True)
    return frame.sort_values(
        SURNAME_FIELD, kind="stable", na_position="first"
    ).reset_index(drop=True)


def read_roster(path: Path, encoding: str = "utf-8") -> pd.DataFrame:
    """Read the roster at *path* and return its records sorted by surname."""

    with open(path, "r", encoding=encoding) as f:
        lines = f.readlines()
    return sort_by_surname(parse_roster(lines))


def _text(value) -> str:
    return "" if is_blank(value) else str(value)


def format_student_line(record) -> str:
    return "{}, {} - Nota Final: {}".format(
        _text(record.get(SURNAME_FIELD)),
        _text(record.get(NAME_FIELD)),
        _text(record.get(FINAL_GRADE_FIELD)),
    )


def render_report(passing: pd.DataFrame, failing: pd.DataFrame) -> str:
    lines = [PASSING_HEADING]
    lines.extend(format_student_line(row) for _, row in passing.iterrows())
    lines.append("")
    lines.append(FAILING_HEADING)
    lines.extend(format_student_line(row) for _, row in failing.iterrows())
    return "\n".join(lines) + "\n"


def _prepare_destination(destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)


def write_report(passing: pd.DataFrame, failing: pd.DataFrame, destination: Path, encoding: str = "utf-8") -> None:
    report = render_report(passing, failing)
    _prepare_destination(destination)
    with open(destination, "w", encoding=encoding, newline="") as f:
        f.write(report)


def write_workbook(passing: pd.DataFrame, failing: pd.DataFrame, destination: Path) -> None:
    _prepare_destination(destination)
    with pd.ExcelWriter(destination, engine="openpyxl") as w:
        passing.to_excel(w, index=False, sheet_name="Aprobados")
        failing.to_excel(w, index=False, sheet_name="Suspensos")


def write_quality_report(issues: List[Dict[str, str]], destination: Path) -> None:
    _prepare_destination(destination)
    dq_df = pd.DataFrame(issues, columns=QUALITY_COLUMNS)
    dq_df.to_csv(destination, index=False)
