"""Infrastructure layer exports."""

from .lark import LarkClient, LarkError, configure_lark_client, get_lark_client
from .reports import DuckDBReportRepository, InMemoryReportRepository, ReportRepository
from .xero import XeroAuthError, XeroClient, XeroError, configure_xero_client, get_xero_client

__all__ = [
    "DuckDBReportRepository",
    "InMemoryReportRepository",
    "LarkClient",
    "LarkError",
    "ReportRepository",
    "XeroAuthError",
    "XeroClient",
    "XeroError",
    "configure_lark_client",
    "configure_xero_client",
    "get_lark_client",
    "get_xero_client",
]
