#!/usr/bin/env python3
"""Compute final grades from a semicolon roster and write the pass/fail report."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Dict, List

from grade_calculator import add_final_grades, collect_coercion_issues, partition_students
from roster_io import read_roster, write_quality_report, write_report, write_workbook

HERE = os.path.dirname(os.path.abspath(__file__))

DEFAULT_INPUT_PATH = Path("calificaciones.csv")
DEFAULT_OUTPUT_PATH = Path("notasFinales.csv")
DEFAULT_ENCODING = "utf-8"


def load_config(path: Path) -> Dict:
    if not path.is_file():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(HERE) / "config.json",
        help="JSON file with default paths and encoding (default: config.json next to this script)",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Semicolon-separated roster with a header row (default: calificaciones.csv)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination path for the Aprobados/Suspensos report (default: notasFinales.csv)",
    )
    parser.add_argument(
        "--encoding",
        default=None,
        help="Text encoding of the roster and the report (default: utf-8)",
    )
    parser.add_argument(
        "--quality-report",
        type=Path,
        default=None,
        help="Optional CSV listing values that could not be read as numbers",
    )
    parser.add_argument(
        "--excel",
        type=Path,
        default=None,
        help="Optional workbook with Aprobados and Suspensos sheets",
    )
    return parser.parse_args(argv)


def _optional_path(value) -> Path | None:
    if value in (None, ""):
        return None
    return Path(value)


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.config)

    input_path = args.input or Path(cfg.get("input", DEFAULT_INPUT_PATH))
    output_path = args.output or Path(cfg.get("output", DEFAULT_OUTPUT_PATH))
    encoding = args.encoding or cfg.get("encoding", DEFAULT_ENCODING)
    quality_path = args.quality_report or _optional_path(cfg.get("quality_report"))
    excel_path = args.excel or _optional_path(cfg.get("excel"))

    if not input_path.is_file():
        raise SystemExit(f"Roster file not found: {input_path}")

    try:
        students = read_roster(input_path, encoding=encoding)
    except ValueError as exc:
        raise SystemExit(f"Unable to read roster {input_path}: {exc}") from exc

    enriched = add_final_grades(students)
    passing, failing = partition_students(enriched)
    print(f"[INFO] {len(passing)} passing, {len(failing)} failing out of {len(enriched)} students")

    write_report(passing, failing, output_path, encoding=encoding)

    if quality_path is not None:
        issues = collect_coercion_issues(students)
        write_quality_report(issues, quality_path)
        print(f"[INFO] Wrote {len(issues)} data-quality issues to: {quality_path}")

    if excel_path is not None:
        write_workbook(passing, failing, excel_path)
        print(f"[INFO] Wrote workbook to: {excel_path}")

    print(f"Wrote final grades report to: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
