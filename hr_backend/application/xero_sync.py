"""Token persistence and one-shot report sync for the Xero integration."""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Callable

from hr_backend.core.config import get_settings
from hr_backend.core.reports import first_report, flatten_report
from hr_backend.core.schema import SyncSummary
from hr_backend.infrastructure import (
    DuckDBReportRepository,
    InMemoryReportRepository,
    ReportRepository,
    XeroAuthError,
    XeroClient,
    get_xero_client,
)

logger = logging.getLogger("hr.xero")

DEFAULT_FROM_DATE = "2025-02-01"
DEFAULT_TO_DATE = "2025-03-31"


class XeroSyncService:
    """Coordinates the Xero client with the report mirror."""

    def __init__(
        self,
        repository: ReportRepository,
        client_provider: Callable[[], XeroClient] = get_xero_client,
    ) -> None:
        self._repository = repository
        self._client_provider = client_provider

    @property
    def repository(self) -> ReportRepository:
        return self._repository

    @property
    def client(self) -> XeroClient:
        return self._client_provider()

    # ------------------------------------------------------------------
    # tokens
    # ------------------------------------------------------------------
    def persist_tokens(self) -> bool:
        tokens = self.client.tokens
        if tokens is None:
            return False
        self._repository.save_tokens(tokens)
        return True

    def restore_tokens(self) -> bool:
        """Load the stored token set into the client; ``False`` when none is stored."""

        stored = self._repository.load_tokens()
        if stored is None or not stored.refresh_token:
            return False
        self.client.set_tokens(
            access_token=stored.access_token,
            refresh_token=stored.refresh_token,
            expires_at=stored.expires_at,
            tenant_id=stored.tenant_id,
        )
        logger.info("Restored Xero tokens from the report store")
        return True

    def ensure_authenticated(self) -> None:
        if not self.client.is_authenticated() and not self.restore_tokens():
            raise XeroAuthError("Not authenticated. Connect Xero first.")

    # ------------------------------------------------------------------
    # sync
    # ------------------------------------------------------------------
    def sync_balance_sheet(self, report_date: str | None = None) -> SyncSummary:
        data: dict[str, Any] = self.client.balance_sheet(report_date)
        report = first_report(data)
        if report is None:
            return SyncSummary(synced=0)

        rows = flatten_report(report)
        stored_date = report.get("ReportDate") or report_date or date.today().isoformat()
        report_id = self._repository.add_balance_sheet(stored_date, data, rows)
        return SyncSummary(reportId=report_id, synced=len(rows))

    def sync_profit_loss(self, from_date: str | None = None, to_date: str | None = None) -> SyncSummary:
        data: dict[str, Any] = self.client.profit_and_loss(from_date, to_date)
        report = first_report(data)
        if report is None:
            return SyncSummary(synced=0)

        rows = flatten_report(report)
        report_id = self._repository.add_profit_loss(
            from_date or "",
            to_date or report.get("ReportDate") or "",
            data,
            rows,
        )
        return SyncSummary(reportId=report_id, synced=len(rows))

    async def sync(self, from_date: str | None = None, to_date: str | None = None) -> dict[str, Any]:
        self.ensure_authenticated()
        from_date = from_date or DEFAULT_FROM_DATE
        to_date = to_date or DEFAULT_TO_DATE

        balance_sheet, profit_loss = await asyncio.gather(
            asyncio.to_thread(self.sync_balance_sheet, to_date),
            asyncio.to_thread(self.sync_profit_loss, from_date, to_date),
        )
        self.persist_tokens()

        logger.info(
            "Synced %d balance sheet rows and %d P&L rows",
            balance_sheet.synced,
            profit_loss.synced,
        )
        return {
            "success": True,
            "balanceSheet": balance_sheet.model_dump(exclude_none=True),
            "profitLoss": profit_loss.model_dump(exclude_none=True),
            "message": (
                f"Synced {balance_sheet.synced} balance sheet rows and "
                f"{profit_loss.synced} P&L rows to database"
            ),
        }

    def reset(self) -> None:
        self._repository.reset()


def build_report_repository(path: str | None) -> ReportRepository:
    if path:
        return DuckDBReportRepository(path)
    return InMemoryReportRepository()


_service: XeroSyncService | None = None


def configure_xero_sync_service(service: XeroSyncService | None) -> None:
    global _service
    _service = service


def get_xero_sync_service() -> XeroSyncService:
    """Return the singleton sync service, building its repository from settings."""

    global _service
    if _service is None:
        _service = XeroSyncService(build_report_repository(get_settings().xero_database_path))
    return _service
