"""Pipeline overview: fan out over all six tables, then count."""
from __future__ import annotations

import asyncio
import logging

from hr_backend.application.records import RecordService, get_record_service
from hr_backend.core.pipeline_stats import summarise_pipeline
from hr_backend.core.schema import PipelineStats

logger = logging.getLogger("hr.pipeline")

PIPELINE_TABLES = ("manpower", "recruitment", "candidate", "onboarding", "employee", "offboarding")


async def compute_pipeline_stats(service: RecordService | None = None) -> PipelineStats:
    service = service or get_record_service()
    results = await asyncio.gather(
        *(asyncio.to_thread(service.fetch_table, table) for table in PIPELINE_TABLES)
    )
    tables = dict(zip(PIPELINE_TABLES, results))
    logger.debug("Pipeline fetched %s", {name: len(rows) for name, rows in tables.items()})
    return summarise_pipeline(
        manpower=tables["manpower"],
        recruitment=tables["recruitment"],
        candidates=tables["candidate"],
        onboarding=tables["onboarding"],
        employees=tables["employee"],
        offboarding=tables["offboarding"],
    )
