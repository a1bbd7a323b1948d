from __future__ import annotations

import asyncio
import logging
from typing import Any

import duckdb
import httpx
from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse, RedirectResponse

from hr_backend.application import get_xero_sync_service
from hr_backend.core.config import get_settings
from hr_backend.infrastructure import XeroAuthError, XeroClient, XeroError, get_xero_client
from hr_backend.routes.records import failure

logger = logging.getLogger("hr.api")

router = APIRouter(prefix="/xero", tags=["xero"])

NOT_AUTHENTICATED = {"error": "Not authenticated. Connect Xero first."}
XERO_ERRORS = (XeroError, httpx.HTTPError, OSError, duckdb.Error)


def _dashboard_url(query: str) -> str:
    return f"{get_settings().app_base_url}/dashboard/xero?{query}"


def _authenticated_client(token: str | None = None, refresh: str | None = None) -> XeroClient:
    """Return the Xero client, seeded from query tokens or the report store."""
    client = get_xero_client()
    if token and refresh:
        client.set_tokens(access_token=token, refresh_token=refresh)
    elif not client.is_authenticated():
        get_xero_sync_service().restore_tokens()
    return client


@router.get("/status")
async def xero_status():
    try:
        client = _authenticated_client()
    except XERO_ERRORS as exc:
        return failure("fetch Xero status", exc)
    tokens = client.tokens
    return {
        "authenticated": client.is_authenticated(),
        "authUrl": client.authorization_url(),
        "hasTenant": bool(tokens and tokens.tenant_id),
    }


@router.get("/callback")
async def xero_callback(code: str | None = Query(default=None), error: str | None = Query(default=None)):
    if error:
        return RedirectResponse(_dashboard_url(f"error={error}"))
    if not code:
        return RedirectResponse(_dashboard_url("error=no_code"))

    service = get_xero_sync_service()
    try:
        await asyncio.to_thread(service.client.exchange_code, code)
        service.persist_tokens()
    except XERO_ERRORS:
        logger.exception("Xero OAuth error")
        return RedirectResponse(_dashboard_url("error=exchange_failed"))
    return RedirectResponse(_dashboard_url("connected=true"))


@router.post("/init")
async def xero_init(payload: dict[str, Any] = Body(...)) -> JSONResponse:
    """Seed tokens from an OAuth response obtained out of band."""
    access_token = payload.get("access_token")
    refresh_token = payload.get("refresh_token")
    if not access_token or not refresh_token:
        return JSONResponse({"error": "access_token and refresh_token required"}, status_code=400)

    service = get_xero_sync_service()
    try:
        service.client.set_tokens(
            access_token=str(access_token),
            refresh_token=str(refresh_token),
            expires_in=float(payload.get("expires_in") or 0) or None,
        )
        service.persist_tokens()
    except (TypeError, ValueError, *XERO_ERRORS) as exc:
        return failure("set tokens", exc)
    return JSONResponse({"success": True, "persistent": True})


@router.get("/balance-sheet")
async def balance_sheet(
    date: str | None = Query(default=None),
    token: str | None = Query(default=None),
    refresh: str | None = Query(default=None),
) -> JSONResponse:
    try:
        client = _authenticated_client(token, refresh)
        if not client.is_authenticated():
            return JSONResponse(NOT_AUTHENTICATED, status_code=401)
        data = await asyncio.to_thread(client.balance_sheet, date or None)
    except XeroAuthError:
        return JSONResponse(NOT_AUTHENTICATED, status_code=401)
    except XERO_ERRORS as exc:
        return failure("fetch balance sheet", exc)
    return JSONResponse(data)


@router.get("/profit-loss")
async def profit_loss(
    from_date: str | None = Query(default=None, alias="from"),
    to_date: str | None = Query(default=None, alias="to"),
    token: str | None = Query(default=None),
    refresh: str | None = Query(default=None),
) -> JSONResponse:
    try:
        client = _authenticated_client(token, refresh)
        if not client.is_authenticated():
            return JSONResponse(NOT_AUTHENTICATED, status_code=401)
        data = await asyncio.to_thread(client.profit_and_loss, from_date or None, to_date or None)
    except XeroAuthError:
        return JSONResponse(NOT_AUTHENTICATED, status_code=401)
    except XERO_ERRORS as exc:
        return failure("fetch profit & loss", exc)
    return JSONResponse(data)


@router.post("/sync")
async def xero_sync(payload: dict[str, Any] | None = Body(default=None)) -> JSONResponse:
    payload = payload or {}
    service = get_xero_sync_service()
    try:
        result = await service.sync(payload.get("fromDate"), payload.get("toDate"))
    except XeroAuthError:
        return JSONResponse(NOT_AUTHENTICATED, status_code=401)
    except XERO_ERRORS as exc:
        return failure("sync Xero reports", exc)
    return JSONResponse(result)
