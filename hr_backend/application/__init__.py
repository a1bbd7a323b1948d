"""Application services."""

from .pipeline import compute_pipeline_stats
from .records import RESOURCES, RecordService, ResourceDefinition, get_record_service
from .xero_sync import (
    XeroSyncService,
    build_report_repository,
    configure_xero_sync_service,
    get_xero_sync_service,
)

__all__ = [
    "RESOURCES",
    "RecordService",
    "ResourceDefinition",
    "XeroSyncService",
    "build_report_repository",
    "compute_pipeline_stats",
    "configure_xero_sync_service",
    "get_record_service",
    "get_xero_sync_service",
]
