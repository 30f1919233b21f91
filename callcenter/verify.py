"""Verification CLI for call center sweep results.

This module inspects a sweep results table, performs per-row consistency checks,
writes a Markdown report next to the table and exits with a machine-friendly
status code (0 on success, non-zero on failures). Utilization above 100% is
reported as a failure rather than clamped.

Example:
    python -m callcenter.verify --input simulation_results.csv
"""

from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
from dataclasses import dataclass
from typing import List, Sequence

import pandas as pd

from .run_sweeps import RESULT_COLUMNS

REPORT_FILENAME = "verification_report.md"


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------
@dataclass
class CheckResult:
    """Represents a single verification check."""

    name: str
    passed: bool
    details: str


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify sweep results and generate a report.")
    parser.add_argument("--input", required=True, help="Path to a sweep results CSV.")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=1e-6,
        help="Tolerance for floating-point comparisons.",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------
def _describe_rows(df: pd.DataFrame, mask: pd.Series, limit: int = 5) -> str:
    bad = df.index[mask].tolist()
    shown = ", ".join(str(idx) for idx in bad[:limit])
    more = f" (+{len(bad) - limit} more)" if len(bad) > limit else ""
    return f"Rows {shown}{more}"


def _columns_check(df: pd.DataFrame) -> CheckResult:
    missing = [col for col in RESULT_COLUMNS if col not in df.columns]
    if missing:
        return CheckResult("Required columns", False, f"Missing: {', '.join(missing)}")
    return CheckResult("Required columns", True, f"All {len(RESULT_COLUMNS)} columns present.")


def _non_negative_counts_check(df: pd.DataFrame) -> CheckResult:
    mask = (df["TotalCalls"] < 0) | (df["AbandonedCalls"] < 0)
    if mask.any():
        return CheckResult("Non-negative counts", False, _describe_rows(df, mask) + " have negative counts.")
    return CheckResult("Non-negative counts", True, f"{len(df)} rows checked.")


def _abandoned_within_total_check(df: pd.DataFrame) -> CheckResult:
    mask = df["AbandonedCalls"] > df["TotalCalls"]
    if mask.any():
        return CheckResult("Abandoned <= total", False, _describe_rows(df, mask) + " abandon more calls than arrived.")
    return CheckResult("Abandoned <= total", True, f"{len(df)} rows checked.")


def _utilization_bounds_check(df: pd.DataFrame, tolerance: float) -> CheckResult:
    util = df["Utilization"].astype(float)
    mask = (util < -tolerance) | (util > 100.0 + tolerance)
    if mask.any():
        worst = util[mask].max()
        return CheckResult(
            "Utilization within [0, 100]%",
            False,
            _describe_rows(df, mask) + f" out of bounds (max {worst:.2f}%).",
        )
    return CheckResult("Utilization within [0, 100]%", True, f"Range {util.min():.2f}%–{util.max():.2f}%.")


def verify_results(path: str, tolerance: float) -> List[CheckResult]:
    if not os.path.isfile(path):
        return [CheckResult("Results file present", False, f"File not found: {path}")]
    try:
        df = pd.read_csv(path)
    except Exception as exc:  # noqa: BLE001 - explicit failure reporting required
        return [CheckResult("Results file readable", False, f"Failed to parse {path}: {exc}")]

    results = [CheckResult("Results file present", True, f"{len(df)} rows in {os.path.basename(path)}.")]
    columns = _columns_check(df)
    results.append(columns)
    if not columns.passed:
        return results
    results.append(_non_negative_counts_check(df))
    results.append(_abandoned_within_total_check(df))
    results.append(_utilization_bounds_check(df, tolerance))
    return results


# ---------------------------------------------------------------------------
# Report assembly
# ---------------------------------------------------------------------------
def _render_table(results: List[CheckResult]) -> List[str]:
    lines = ["| Status | Check | Details |", "| --- | --- | --- |"]
    for result in results:
        status = "✅" if result.passed else "❌"
        lines.append(f"| {status} | {result.name} | {result.details} |")
    return lines


def build_report(input_path: str, tolerance: float, results: Sequence[CheckResult]) -> str:
    overall_passed = all(r.passed for r in results)
    lines: List[str] = [
        "# Verification Report",
        f"*Generated: {dt.datetime.now(dt.timezone.utc).isoformat()}*",
        "",
        f"- Input: `{input_path}`",
        f"- Tolerance: {tolerance}",
        "",
        f"## Overall Status: {'✅ PASS' if overall_passed else '❌ FAIL'}",
        "",
    ]
    lines.extend(_render_table(list(results)))
    lines.append("")
    return "\n".join(lines)


def write_report(input_path: str, content: str) -> str:
    report_dir = os.path.dirname(os.path.abspath(input_path))
    os.makedirs(report_dir, exist_ok=True)
    report_path = os.path.join(report_dir, REPORT_FILENAME)
    with open(report_path, "w", encoding="utf-8") as handle:
        handle.write(content)
    return report_path


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    results = verify_results(args.input, args.tolerance)
    report_path = write_report(args.input, build_report(args.input, args.tolerance, results))
    print(f"Verification report written to {report_path}")
    return 0 if all(r.passed for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
