from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from hr_backend.application import RESOURCES, ResourceDefinition, get_record_service
from hr_backend.core.config import ConfigurationError
from hr_backend.infrastructure import LarkError

logger = logging.getLogger("hr.api")

CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=120"

REMOTE_ERRORS = (LarkError, ConfigurationError, httpx.HTTPError)


def failure(action: str, exc: Exception) -> JSONResponse:
    logger.exception("Failed to %s", action)
    return JSONResponse({"error": f"Failed to {action}", "message": str(exc)}, status_code=500)


def build_router(definition: ResourceDefinition) -> APIRouter:
    """Create the list/get/create/update/delete routes for one resource."""

    router = APIRouter(prefix=f"/{definition.name}", tags=[definition.name])
    resource = definition.name
    not_found = f"{definition.label[0].upper()}{definition.label[1:]} not found"

    @router.get("")
    async def list_records() -> JSONResponse:
        service = get_record_service()
        try:
            items = await asyncio.to_thread(service.list_records, resource)
        except REMOTE_ERRORS as exc:
            return failure(f"fetch {definition.plural}", exc)

        payload: dict[str, Any] = {"data": items, "total": len(items)}
        if resource == "employees":
            payload["active_count"] = sum(1 for item in items if item.get("status", "").lower() == "active")
        return JSONResponse(payload, headers={"Cache-Control": CACHE_CONTROL})

    @router.get("/{record_id}")
    async def get_record(record_id: str) -> JSONResponse:
        service = get_record_service()
        try:
            item = await asyncio.to_thread(service.get_record, resource, record_id)
        except REMOTE_ERRORS as exc:
            return failure(f"fetch {definition.label}", exc)
        if item is None:
            return JSONResponse({"error": not_found}, status_code=404)
        return JSONResponse({"data": item})

    @router.post("")
    async def create_record(payload: dict[str, Any] = Body(...)) -> JSONResponse:
        service = get_record_service()
        try:
            record_id = await asyncio.to_thread(service.create_record, resource, payload)
        except REMOTE_ERRORS as exc:
            return failure(f"create {definition.label}", exc)
        return JSONResponse({"record_id": record_id}, status_code=201)

    @router.put("/{record_id}")
    async def update_record(record_id: str, payload: dict[str, Any] = Body(...)) -> JSONResponse:
        service = get_record_service()
        try:
            await asyncio.to_thread(service.update_record, resource, record_id, payload)
        except REMOTE_ERRORS as exc:
            return failure(f"update {definition.label}", exc)
        return JSONResponse({"success": True, "record_id": record_id})

    @router.delete("/{record_id}")
    async def delete_record(record_id: str) -> JSONResponse:
        service = get_record_service()
        try:
            await asyncio.to_thread(service.delete_record, resource, record_id)
        except REMOTE_ERRORS as exc:
            return failure(f"delete {definition.label}", exc)
        return JSONResponse({"success": True, "record_id": record_id})

    return router


routers = [build_router(definition) for definition in RESOURCES.values()]
