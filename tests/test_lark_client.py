from __future__ import annotations

import json
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import httpx
import pytest

from hr_backend.infrastructure import LarkClient, LarkError


def test_tenant_token_is_cached_until_margin(fake_lark):
    now = [1000.0]
    http_client = httpx.Client(transport=httpx.MockTransport(fake_lark.handler))
    client = LarkClient(
        "app-id",
        "app-secret",
        "bascnApp",
        api_base="https://lark.test/open-apis",
        http_client=http_client,
        clock=lambda: now[0],
    )

    assert client.tenant_token() == "t-token"
    now[0] += 7200 - 301
    client.tenant_token()
    assert fake_lark.token_requests == 1

    now[0] += 2
    client.tenant_token()
    assert fake_lark.token_requests == 2


def test_token_request_sends_app_credentials(fake_lark, lark_client):
    lark_client.tenant_token()

    request = fake_lark.requests[0]
    assert str(request.url) == "https://lark.test/open-apis/auth/v3/tenant_access_token/internal"
    assert json.loads(request.read()) == {"app_id": "app-id", "app_secret": "app-secret"}


def test_get_all_records_walks_every_page(fake_lark, lark_client):
    for index in range(250):
        fake_lark.seed("manpower", {"Request No": f"MP-{index}"})

    records = lark_client.get_all_records("tblManpower")

    assert len(records) == 250
    assert records[0].fields == {"Request No": "MP-0"}
    list_requests = [req for req in fake_lark.requests if req.method == "GET"]
    assert len(list_requests) == 3
    assert list_requests[0].url.params["page_size"] == "100"
    assert "page_token" not in list_requests[0].url.params
    assert list_requests[2].url.params["page_token"] == "200"


def test_list_records_exposes_page_metadata(fake_lark, lark_client):
    for index in range(3):
        fake_lark.seed("candidate", {"Candidate ID": str(index)})

    page = lark_client.list_records("tblCandidate", page_size=2)

    assert [item.fields["Candidate ID"] for item in page.items] == ["0", "1"]
    assert page.has_more is True
    assert page.page_token == "2"
    assert page.total == 3


def test_get_record_returns_none_when_missing(fake_lark, lark_client):
    assert lark_client.get_record("tblEmployee", "recMissing") is None


def test_get_record_returns_none_on_http_404():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("tenant_access_token/internal"):
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t", "expire": 7200})
        return httpx.Response(404, json={"code": 404, "msg": "not found"})

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    assert client.get_record("tbl", "rec") is None


def test_create_update_delete_round_trip(fake_lark, lark_client):
    record_id = lark_client.create_record("tblOnboarding", {"Full Name": "Ali"})
    lark_client.update_record("tblOnboarding", record_id, {"Offer Letter": "Yes"})

    record = lark_client.get_record("tblOnboarding", record_id)
    assert record is not None
    assert record.fields == {"Full Name": "Ali", "Offer Letter": "Yes"}

    lark_client.delete_record("tblOnboarding", record_id)
    assert lark_client.get_record("tblOnboarding", record_id) is None


def test_business_error_code_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("tenant_access_token/internal"):
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t", "expire": 7200})
        return httpx.Response(200, json={"code": 1254001, "msg": "WrongRequestBody"})

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(LarkError, match="WrongRequestBody"):
        client.create_record("tbl", {"Status": "x"})


def test_auth_failure_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 10003, "msg": "invalid app_secret"})

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(LarkError, match="invalid app_secret"):
        client.get_all_records("tbl")


def test_non_json_body_raises_lark_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("tenant_access_token/internal"):
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t", "expire": 7200})
        return httpx.Response(200, text="<html>gateway timeout</html>")

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(LarkError, match="non-JSON"):
        client.get_all_records("tbl")
    with pytest.raises(LarkError, match="non-JSON"):
        client.get_record("tbl", "rec1")


def test_auth_response_without_token_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": 0, "expire": 7200})

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(LarkError, match="no tenant_access_token"):
        client.get_all_records("tbl")


def test_create_response_without_record_id_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("tenant_access_token/internal"):
            return httpx.Response(200, json={"code": 0, "tenant_access_token": "t", "expire": 7200})
        return httpx.Response(200, json={"code": 0, "data": {}})

    client = LarkClient("a", "b", "c", http_client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(LarkError, match="no record_id"):
        client.create_record("tbl", {"Status": "x"})
