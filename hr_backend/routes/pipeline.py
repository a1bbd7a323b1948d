from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from hr_backend.application import compute_pipeline_stats
from hr_backend.routes.records import CACHE_CONTROL, REMOTE_ERRORS, failure

router = APIRouter(tags=["pipeline"])


@router.get("/pipeline")
async def get_pipeline_summary() -> JSONResponse:
    """Counters per HR stage, computed from a full read of every table."""
    try:
        stats = await compute_pipeline_stats()
    except REMOTE_ERRORS as exc:
        return failure("fetch pipeline summary", exc)
    return JSONResponse(stats.model_dump(), headers={"Cache-Control": CACHE_CONTROL})
