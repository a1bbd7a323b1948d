"""Client for the Lark Base (bitable) records API."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

import httpx

from hr_backend.domain import LarkPage, LarkRecord

logger = logging.getLogger("hr.lark")

# Lark reports a missing record as HTTP 200 with this business code.
RECORD_NOT_FOUND_CODE = 1254043


class LarkError(RuntimeError):
    """Raised when the Lark API rejects a request."""


class LarkClient:
    """Thin wrapper around the tenant-token auth and bitable record endpoints."""

    TOKEN_SAFETY_MARGIN = 300

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        app_token: str,
        *,
        api_base: str = "https://open.larksuite.com/open-apis",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._app_id = app_id
        self._app_secret = app_secret
        self._app_token = app_token
        self._api_base = api_base.rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None
        self._clock = clock

        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _records_url(self, table_id: str, record_id: str | None = None) -> str:
        url = f"{self._api_base}/bitable/v1/apps/{self._app_token}/tables/{table_id}/records"
        if record_id:
            url = f"{url}/{record_id}"
        return url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.tenant_token()}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise LarkError(f"Lark returned a non-JSON body ({response.status_code}): {response.text[:200]}") from exc
        if not isinstance(data, dict):
            raise LarkError(f"Unexpected Lark response: {data!r}")
        return data

    @classmethod
    def _check_body(cls, response: httpx.Response) -> dict[str, Any]:
        data = cls._json(response)
        if data.get("code") != 0:
            raise LarkError(f"Lark API error: {data.get('msg')}")
        return data

    def _send(self, method: str, url: str, action: str, **kwargs: Any) -> dict[str, Any]:
        logger.debug("%s %s", method, url)
        response = self._client.request(method, url, headers=self._headers(), **kwargs)
        if response.is_error:
            raise LarkError(f"Failed to {action} ({response.status_code}): {response.text}")
        return self._check_body(response)

    # ------------------------------------------------------------------
    # auth
    # ------------------------------------------------------------------
    def tenant_token(self) -> str:
        """Return a cached tenant access token, fetching a new one near expiry."""

        with self._token_lock:
            now = self._clock()
            if self._token and now < self._token_expires_at:
                return self._token

            response = self._client.post(
                f"{self._api_base}/auth/v3/tenant_access_token/internal",
                json={"app_id": self._app_id, "app_secret": self._app_secret},
            )
            if response.is_error:
                raise LarkError(f"Failed to get tenant token: {response.status_code}")
            data = self._json(response)
            if data.get("code") != 0:
                raise LarkError(f"Lark auth error: {data.get('msg')}")

            token = data.get("tenant_access_token")
            if not token:
                raise LarkError("Lark auth response has no tenant_access_token")
            self._token = str(token)
            expire = float(data.get("expire") or 7200)
            self._token_expires_at = now + expire - self.TOKEN_SAFETY_MARGIN
            logger.info("Fetched Lark tenant token, valid for %ss", int(expire))
            return self._token

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def list_records(self, table_id: str, page_size: int = 100, page_token: str | None = None) -> LarkPage:
        params: dict[str, str | int] = {"page_size": page_size}
        if page_token:
            params["page_token"] = page_token
        data = self._send("GET", self._records_url(table_id), "fetch records", params=params)
        body = data.get("data") or {}
        items = [LarkRecord.from_payload(item) for item in body.get("items") or []]
        return LarkPage(
            items=items,
            has_more=bool(body.get("has_more")),
            page_token=body.get("page_token"),
            total=int(body.get("total") or 0),
        )

    def get_all_records(self, table_id: str) -> list[LarkRecord]:
        records: list[LarkRecord] = []
        page_token: str | None = None
        while True:
            page = self.list_records(table_id, 100, page_token)
            records.extend(page.items)
            page_token = page.page_token if page.has_more else None
            if not page_token:
                break
        logger.debug("Fetched %d records from table %s", len(records), table_id)
        return records

    def get_record(self, table_id: str, record_id: str) -> LarkRecord | None:
        response = self._client.get(self._records_url(table_id, record_id), headers=self._headers())
        if response.status_code == 404:
            return None
        if response.is_error:
            raise LarkError(f"Failed to fetch record: {response.status_code}")
        data = self._json(response)
        if data.get("code") == RECORD_NOT_FOUND_CODE:
            return None
        if data.get("code") != 0:
            raise LarkError(f"Lark API error: {data.get('msg')}")
        return LarkRecord.from_payload((data.get("data") or {}).get("record") or {})

    def create_record(self, table_id: str, fields: dict[str, Any]) -> str:
        data = self._send("POST", self._records_url(table_id), "create record", json={"fields": fields})
        record_id = ((data.get("data") or {}).get("record") or {}).get("record_id")
        if not record_id:
            raise LarkError(f"Lark create response has no record_id: {data!r}")
        return str(record_id)

    def update_record(self, table_id: str, record_id: str, fields: dict[str, Any]) -> None:
        self._send("PUT", self._records_url(table_id, record_id), "update record", json={"fields": fields})

    def delete_record(self, table_id: str, record_id: str) -> None:
        self._send("DELETE", self._records_url(table_id, record_id), "delete record")

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


_client: LarkClient | None = None


def configure_lark_client(client: LarkClient | None) -> None:
    """Install the Lark client used by the record endpoints."""

    global _client
    _client = client


def get_lark_client() -> LarkClient:
    """Return the configured Lark client."""

    if _client is None:
        raise LarkError("Lark client is not configured; set LARK_APP_ID, LARK_APP_SECRET and LARK_BASE_APP_TOKEN")
    return _client


__all__ = ["LarkClient", "LarkError", "configure_lark_client", "get_lark_client"]
