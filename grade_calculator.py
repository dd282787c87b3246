"""Final grade computation and pass/fail classification for a student roster."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

SURNAME_FIELD = "Apellidos"
NAME_FIELD = "Nombre"
ATTENDANCE_FIELD = "Asistencia"
FINAL_GRADE_FIELD = "NotaFinal"

# (component, original field, resit field)
COMPONENT_FIELDS: Tuple[Tuple[str, str, str], ...] = (
    ("partial1", "Parcial1", "Ordinario1"),
    ("partial2", "Parcial2", "Ordinario2"),
    ("practical", "Practicas", "OrdinarioPracticas"),
)

PARTIAL_WEIGHT = 0.3
PRACTICAL_WEIGHT = 0.4

MIN_ATTENDANCE = 75
MIN_COMPONENT = 4
MIN_FINAL_GRADE = 5

GRADE_QUANTUM = Decimal("0.01")


def is_blank(value) -> bool:
    """Return True for None, NaN and whitespace-only text."""

    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return str(value).strip() == ""


def _parse_decimal(value) -> Optional[float]:
    try:
        number = float(str(value).replace(",", "."))
    except ValueError:
        return None
    if not np.isfinite(number):
        return None
    return number


def to_number(value) -> float:
    """Coerce a comma- or point-decimal text value to float, 0.0 on failure."""

    if is_blank(value):
        return 0.0
    number = _parse_decimal(value)
    return 0.0 if number is None else number


def is_number(value) -> bool:
    return is_blank(value) or _parse_decimal(value) is not None


def strip_percent(value):
    if is_blank(value):
        return value
    return str(value).replace("%", "")


def resolve_score(record: Mapping, original: str, resit: str) -> float:
    """Return the resit score when it was sat, otherwise the original one."""

    resit_value = record.get(resit)
    if is_blank(resit_value):
        return to_number(record.get(original))
    return to_number(resit_value)


def _column(frame: pd.DataFrame, field: str) -> pd.Series:
    if field in frame.columns:
        return frame[field]
    return pd.Series([None] * len(frame.index), index=frame.index, dtype=object)


def resolve_component(frame: pd.DataFrame, original: str, resit: str) -> pd.Series:
    resit_raw = _column(frame, resit)
    overridden = ~resit_raw.map(is_blank).astype(bool)
    resit_scores = resit_raw.map(to_number).astype(float)
    original_scores = _column(frame, original).map(to_number).astype(float)
    return resit_scores.where(overridden, original_scores)


def resolve_components(frame: pd.DataFrame) -> pd.DataFrame:
    """Return the resolved partial1/partial2/practical scores for every row."""

    return pd.DataFrame(
        {
            name: resolve_component(frame, original, resit)
            for name, original, resit in COMPONENT_FIELDS
        },
        index=frame.index,
        columns=[name for name, _, _ in COMPONENT_FIELDS],
    )


def weighted_grade(partial1: float, partial2: float, practical: float) -> float:
    return partial1 * PARTIAL_WEIGHT + partial2 * PARTIAL_WEIGHT + practical * PRACTICAL_WEIGHT


def format_grade(value: float) -> str:
    """Round half-up to two decimals and trim trailing zeros (6.90 -> 6.9)."""

    rounded = Decimal(repr(float(value))).quantize(GRADE_QUANTUM, rounding=ROUND_HALF_UP)
    if rounded.is_zero():
        return "0"
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def aggregate_grade(partial1: float, partial2: float, practical: float) -> str:
    return format_grade(weighted_grade(partial1, partial2, practical))


def add_final_grades(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *frame* with the formatted final grade as ``NotaFinal``.

    Resit overrides replace the matching original score before weighting. All
    other fields are carried through unchanged and ``NotaFinal`` is appended as
    the last column.
    """

    enriched = frame.copy()
    scores = resolve_components(frame)
    finals = weighted_grade(scores["partial1"], scores["partial2"], scores["practical"])
    enriched[FINAL_GRADE_FIELD] = finals.map(format_grade).astype(object)
    return enriched


def attendance(frame: pd.DataFrame) -> pd.Series:
    return _column(frame, ATTENDANCE_FIELD).map(strip_percent).map(to_number).astype(float)


def eligibility_mask(enriched: pd.DataFrame) -> pd.Series:
    """Return a boolean Series that is True for students who pass.

    A student passes only with attendance of at least 75, every resolved
    component at 4 or above and a final grade of at least 5.
    """

    scores = resolve_components(enriched)
    final = _column(enriched, FINAL_GRADE_FIELD).map(to_number).astype(float)

    mask = attendance(enriched) >= MIN_ATTENDANCE
    for name, _, _ in COMPONENT_FIELDS:
        mask &= scores[name] >= MIN_COMPONENT
    mask &= final >= MIN_FINAL_GRADE
    return mask.astype(bool)


def partition_students(enriched: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split *enriched* into (passing, failing), keeping the row order of each."""

    mask = eligibility_mask(enriched)
    passing = enriched.loc[mask].reset_index(drop=True)
    failing = enriched.loc[~mask].reset_index(drop=True)
    return passing, failing


def _numeric_fields() -> Iterable[str]:
    for _, original, resit in COMPONENT_FIELDS:
        yield original
        yield resit


def collect_coercion_issues(frame: pd.DataFrame) -> List[Dict[str, str]]:
    """List non-blank numeric values that fall back to 0.0.

    Used only for reporting; the fallback itself is applied regardless.
    """

    issues: List[Dict[str, str]] = []
    for _, row in frame.iterrows():
        student = ", ".join(
            str(row.get(field)) for field in (SURNAME_FIELD, NAME_FIELD) if not is_blank(row.get(field))
        )
        checks = [(field, row.get(field)) for field in _numeric_fields()]
        checks.append((ATTENDANCE_FIELD, strip_percent(row.get(ATTENDANCE_FIELD))))
        for field, value in checks:
            if is_number(value):
                continue
            issues.append({
                "student": student,
                "field": field,
                "value": str(value),
                "issue": "Unparseable number treated as 0",
            })
    return issues
