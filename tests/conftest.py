from __future__ import annotations

import json
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import httpx
import pytest

from hr_backend.application import XeroSyncService, configure_xero_sync_service
from hr_backend.core.config import Settings, configure_settings
from hr_backend.infrastructure import (
    InMemoryReportRepository,
    LarkClient,
    configure_lark_client,
    configure_xero_client,
)

LARK_BASE = "https://lark.test/open-apis"

TABLE_IDS = {
    "manpower": "tblManpower",
    "recruitment": "tblRecruitment",
    "candidate": "tblCandidate",
    "onboarding": "tblOnboarding",
    "employee": "tblEmployee",
    "offboarding": "tblOffboarding",
}


class FakeLarkBase:
    """In-process stand-in for the bitable records API."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict]] = {table_id: {} for table_id in TABLE_IDS.values()}
        self.token_requests = 0
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None
        self.raw_body: str | None = None
        self._next_id = 1

    def seed(self, table: str, fields: dict, record_id: str | None = None) -> str:
        record_id = record_id or self._new_id()
        self.tables[TABLE_IDS[table]][record_id] = dict(fields)
        return record_id

    def _new_id(self) -> str:
        record_id = f"rec{self._next_id:04d}"
        self._next_id += 1
        return record_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/auth/v3/tenant_access_token/internal"):
            self.token_requests += 1
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t-token", "expire": 7200})

        assert request.headers["Authorization"] == "Bearer t-token"
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="upstream unavailable")
        if self.raw_body is not None:
            return httpx.Response(200, text=self.raw_body)

        parts = path.split("/tables/", 1)[1].split("/")
        table = self.tables[parts[0]]
        record_id = parts[2] if len(parts) > 2 else None

        if request.method == "GET" and record_id is None:
            page_size = int(request.url.params.get("page_size", "100"))
            offset = int(request.url.params.get("page_token") or 0)
            items = list(table.items())
            chunk = items[offset : offset + page_size]
            has_more = offset + page_size < len(items)
            body = {
                "items": [{"record_id": rid, "fields": fields} for rid, fields in chunk],
                "has_more": has_more,
                "total": len(items),
            }
            if has_more:
                body["page_token"] = str(offset + page_size)
            return httpx.Response(200, json={"code": 0, "data": body})

        if request.method == "GET":
            if record_id not in table:
                return httpx.Response(200, json={"code": 1254043, "msg": "RecordIdNotFound"})
            return httpx.Response(
                200,
                json={"code": 0, "data": {"record": {"record_id": record_id, "fields": table[record_id]}}},
            )

        if request.method == "POST":
            fields = json.loads(request.content)["fields"]
            new_id = self._new_id()
            table[new_id] = fields
            return httpx.Response(
                200, json={"code": 0, "data": {"record": {"record_id": new_id, "fields": fields}}}
            )

        if request.method == "PUT":
            fields = json.loads(request.content)["fields"]
            table.setdefault(record_id, {}).update(fields)
            return httpx.Response(200, json={"code": 0, "data": {"record": {"record_id": record_id}}})

        if request.method == "DELETE":
            table.pop(record_id, None)
            return httpx.Response(200, json={"code": 0, "data": {"deleted": True, "record_id": record_id}})

        return httpx.Response(405)


@pytest.fixture
def fake_lark() -> FakeLarkBase:
    return FakeLarkBase()


@pytest.fixture
def lark_client(fake_lark: FakeLarkBase) -> LarkClient:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_lark.handler))
    return LarkClient("app-id", "app-secret", "bascnApp", api_base=LARK_BASE, http_client=http_client)


@pytest.fixture(autouse=True)
def isolated_state():
    configure_settings(Settings(tables=dict(TABLE_IDS)))
    configure_lark_client(None)
    configure_xero_client(None)
    configure_xero_sync_service(XeroSyncService(InMemoryReportRepository()))
    yield
    configure_settings(None)
    configure_lark_client(None)
    configure_xero_client(None)
    configure_xero_sync_service(None)
