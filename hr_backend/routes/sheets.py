from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse, Response

from hr_backend.core.schema import SheetExportRequest
from hr_backend.core.sheets import ParsedSheet, SheetError, encode_sheets, parse_workbook

router = APIRouter(prefix="/sheets", tags=["sheets"])


@router.post("/parse")
async def parse_sheet(file: UploadFile = File(...)) -> JSONResponse:
    """Read an uploaded CSV/Excel file into headers and string rows per sheet."""
    try:
        if not file.filename:
            return JSONResponse({"error": "Uploaded file must have a filename"}, status_code=400)
        safe_name = Path(file.filename).name
        content = await file.read()
    finally:
        await file.close()

    try:
        parsed = await asyncio.to_thread(parse_workbook, content, safe_name)
    except SheetError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    return JSONResponse(parsed.to_dict())


@router.post("/export")
async def export_sheet(payload: SheetExportRequest) -> Response:
    sheets = [ParsedSheet(name=item.name, headers=item.headers, rows=item.rows) for item in payload.sheets]
    content, media_type = await asyncio.to_thread(encode_sheets, sheets, payload.fileName, payload.format)

    file_name = Path(payload.fileName).name or "export.xlsx"
    if media_type.startswith("text/csv") and not file_name.lower().endswith(".csv"):
        file_name = f"{Path(file_name).stem}.csv"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )
