"""Flattening of Xero report payloads into account/period lines."""
from __future__ import annotations

import re
from typing import Any

from hr_backend.core.schema import ReportLine

_NUMBER_PREFIX = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def parse_amount(value: Any) -> float:
    """Parse a report cell such as ``"1,234.50"`` or ``"(500)"`` into a signed number."""

    if value is None or value == "":
        return 0.0
    text = str(value)
    cleaned = text.replace(",", "").replace("(", "").replace(")", "")
    # Mirrors parseFloat: leading numeric prefix wins, trailing text is ignored.
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(0))
    return -number if "(" in text else number


def first_report(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    reports = payload.get("Reports") or []
    if not reports or not isinstance(reports[0], dict):
        return None
    return reports[0]


def report_periods(report: dict[str, Any]) -> list[str]:
    for row in report.get("Rows") or []:
        if row.get("RowType") == "Header":
            cells = row.get("Cells") or []
            return [str(cell.get("Value") or "") for cell in cells[1:]]
    return ["Current"]


def flatten_report(report: dict[str, Any]) -> list[ReportLine]:
    """Return one line per non-zero (section, account, period) value."""

    periods = report_periods(report)
    lines: list[ReportLine] = []

    for section in report.get("Rows") or []:
        if section.get("RowType") != "Section":
            continue
        title = section.get("Title") or "Other"
        for row in section.get("Rows") or []:
            cells = row.get("Cells") or []
            if len(cells) < 2:
                continue
            account_name = cells[0].get("Value")
            if not account_name:
                continue
            for index in range(1, len(cells)):
                value = parse_amount(cells[index].get("Value"))
                if value == 0:
                    continue
                period = periods[index - 1] if index - 1 < len(periods) else ""
                lines.append(
                    ReportLine(
                        section=title,
                        account_name=str(account_name),
                        value=value,
                        period=period or f"Period {index}",
                    )
                )
    return lines
