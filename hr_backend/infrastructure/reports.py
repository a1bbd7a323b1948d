"""Persistence for Xero tokens and append-only report snapshots."""
from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import duckdb

from hr_backend.core.schema import ReportLine
from hr_backend.domain import XeroTokens


class ReportRepository(Protocol):
    """Persistence contract for the accounting mirror."""

    def save_tokens(self, tokens: XeroTokens) -> None: ...

    def load_tokens(self) -> XeroTokens | None: ...

    def add_balance_sheet(self, report_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int: ...

    def add_profit_loss(self, from_date: str, to_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int: ...

    def list_balance_sheet_rows(self, report_id: int) -> list[dict[str, Any]]: ...

    def list_profit_loss_rows(self, report_id: int) -> list[dict[str, Any]]: ...

    def reset(self) -> None: ...


@dataclass
class _StoredReport:
    id: int
    meta: dict[str, Any]
    raw: dict[str, Any]
    rows: list[ReportLine] = field(default_factory=list)


class InMemoryReportRepository:
    """Process-local repository used when no database path is configured."""

    def __init__(self) -> None:
        self._tokens: XeroTokens | None = None
        self._balance_sheets: list[_StoredReport] = []
        self._profit_losses: list[_StoredReport] = []
        self._lock = threading.Lock()

    def save_tokens(self, tokens: XeroTokens) -> None:
        with self._lock:
            self._tokens = XeroTokens(
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at=tokens.expires_at,
                tenant_id=tokens.tenant_id,
            )

    def load_tokens(self) -> XeroTokens | None:
        return self._tokens

    def add_balance_sheet(self, report_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int:
        with self._lock:
            report_id = len(self._balance_sheets) + 1
            self._balance_sheets.append(
                _StoredReport(id=report_id, meta={"report_date": report_date}, raw=raw, rows=list(rows))
            )
            return report_id

    def add_profit_loss(self, from_date: str, to_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int:
        with self._lock:
            report_id = len(self._profit_losses) + 1
            self._profit_losses.append(
                _StoredReport(
                    id=report_id,
                    meta={"from_date": from_date, "to_date": to_date},
                    raw=raw,
                    rows=list(rows),
                )
            )
            return report_id

    @staticmethod
    def _rows_for(reports: list[_StoredReport], report_id: int) -> list[dict[str, Any]]:
        for report in reports:
            if report.id == report_id:
                return [dict(row.model_dump(), report_id=report_id) for row in report.rows]
        return []

    def list_balance_sheet_rows(self, report_id: int) -> list[dict[str, Any]]:
        return self._rows_for(self._balance_sheets, report_id)

    def list_profit_loss_rows(self, report_id: int) -> list[dict[str, Any]]:
        return self._rows_for(self._profit_losses, report_id)

    def reset(self) -> None:
        with self._lock:
            self._tokens = None
            self._balance_sheets.clear()
            self._profit_losses.clear()


_SCHEMA = [
    "CREATE SEQUENCE IF NOT EXISTS balance_sheet_report_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS balance_sheet_row_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS profit_loss_report_seq START 1",
    "CREATE SEQUENCE IF NOT EXISTS profit_loss_row_seq START 1",
    """
    CREATE TABLE IF NOT EXISTS xero_token (
        id INTEGER PRIMARY KEY,
        access_token VARCHAR NOT NULL,
        refresh_token VARCHAR NOT NULL,
        expires_at TIMESTAMP NOT NULL,
        tenant_id VARCHAR,
        updated_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS balance_sheet_report (
        id INTEGER PRIMARY KEY DEFAULT nextval('balance_sheet_report_seq'),
        report_date VARCHAR NOT NULL,
        raw_json VARCHAR NOT NULL,
        created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS balance_sheet_row (
        id INTEGER PRIMARY KEY DEFAULT nextval('balance_sheet_row_seq'),
        report_id INTEGER NOT NULL,
        section VARCHAR NOT NULL,
        account_name VARCHAR NOT NULL,
        value DOUBLE NOT NULL,
        period VARCHAR NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profit_loss_report (
        id INTEGER PRIMARY KEY DEFAULT nextval('profit_loss_report_seq'),
        from_date VARCHAR NOT NULL,
        to_date VARCHAR NOT NULL,
        raw_json VARCHAR NOT NULL,
        created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profit_loss_row (
        id INTEGER PRIMARY KEY DEFAULT nextval('profit_loss_row_seq'),
        report_id INTEGER NOT NULL,
        section VARCHAR NOT NULL,
        account_name VARCHAR NOT NULL,
        value DOUBLE NOT NULL,
        period VARCHAR NOT NULL
    )
    """,
]


def _to_db_time(epoch: float) -> datetime:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).replace(tzinfo=None)


def _from_db_time(value: datetime) -> float:
    return value.replace(tzinfo=timezone.utc).timestamp()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DuckDBReportRepository:
    """Relational mirror stored in a duckdb database file."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        database = str(path)
        if database != ":memory:":
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        self._con = duckdb.connect(database)
        # One connection shared across worker threads; duckdb connections are not thread safe.
        self._lock = threading.Lock()
        with self._lock:
            for statement in _SCHEMA:
                self._con.execute(statement)

    def save_tokens(self, tokens: XeroTokens) -> None:
        with self._lock:
            self._con.execute(
                """
                INSERT OR REPLACE INTO xero_token
                    (id, access_token, refresh_token, expires_at, tenant_id, updated_at)
                VALUES (1, ?, ?, ?, ?, ?)
                """,
                [
                    tokens.access_token,
                    tokens.refresh_token,
                    _to_db_time(tokens.expires_at),
                    tokens.tenant_id,
                    _utcnow(),
                ],
            )

    def load_tokens(self) -> XeroTokens | None:
        with self._lock:
            row = self._con.execute(
                "SELECT access_token, refresh_token, expires_at, tenant_id FROM xero_token WHERE id = 1"
            ).fetchone()
        if row is None or not row[1]:
            return None
        return XeroTokens(
            access_token=row[0],
            refresh_token=row[1],
            expires_at=_from_db_time(row[2]),
            tenant_id=row[3],
        )

    def _insert_rows(self, table: str, report_id: int, rows: list[ReportLine]) -> None:
        if not rows:
            return
        self._con.executemany(
            f"INSERT INTO {table} (report_id, section, account_name, value, period) VALUES (?, ?, ?, ?, ?)",
            [[report_id, row.section, row.account_name, row.value, row.period] for row in rows],
        )

    def add_balance_sheet(self, report_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int:
        with self._lock:
            report_id = self._con.execute(
                "INSERT INTO balance_sheet_report (report_date, raw_json, created_at) VALUES (?, ?, ?) RETURNING id",
                [report_date, json.dumps(raw), _utcnow()],
            ).fetchone()[0]
            self._insert_rows("balance_sheet_row", report_id, rows)
            return int(report_id)

    def add_profit_loss(self, from_date: str, to_date: str, raw: dict[str, Any], rows: list[ReportLine]) -> int:
        with self._lock:
            report_id = self._con.execute(
                "INSERT INTO profit_loss_report (from_date, to_date, raw_json, created_at) "
                "VALUES (?, ?, ?, ?) RETURNING id",
                [from_date, to_date, json.dumps(raw), _utcnow()],
            ).fetchone()[0]
            self._insert_rows("profit_loss_row", report_id, rows)
            return int(report_id)

    def _list_rows(self, table: str, report_id: int) -> list[dict[str, Any]]:
        with self._lock:
            result = self._con.execute(
                f"SELECT report_id, section, account_name, value, period FROM {table} WHERE report_id = ? ORDER BY id",
                [report_id],
            ).fetchall()
        return [
            {"report_id": row[0], "section": row[1], "account_name": row[2], "value": row[3], "period": row[4]}
            for row in result
        ]

    def list_balance_sheet_rows(self, report_id: int) -> list[dict[str, Any]]:
        return self._list_rows("balance_sheet_row", report_id)

    def list_profit_loss_rows(self, report_id: int) -> list[dict[str, Any]]:
        return self._list_rows("profit_loss_row", report_id)

    def reset(self) -> None:
        with self._lock:
            for table in ("xero_token", "balance_sheet_row", "balance_sheet_report", "profit_loss_row", "profit_loss_report"):
                self._con.execute(f"DELETE FROM {table}")

    def close(self) -> None:
        self._con.close()
