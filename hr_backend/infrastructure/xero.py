"""Xero OAuth2 and accounting report client."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable
from urllib.parse import urlencode

import httpx

from hr_backend.domain import XeroTokens

logger = logging.getLogger("hr.xero")

XERO_AUTHORIZE_URL = "https://login.xero.com/identity/connect/authorize"
XERO_TOKEN_URL = "https://identity.xero.com/connect/token"
XERO_API_BASE = "https://api.xero.com/api.xro/2.0"
XERO_CONNECTIONS_URL = "https://api.xero.com/connections"
XERO_SCOPES = "openid profile email accounting.reports.read accounting.settings offline_access"


class XeroError(RuntimeError):
    """Raised when Xero or its identity server rejects a request."""


class XeroAuthError(XeroError):
    """Raised when no usable tokens are available."""


class XeroClient:
    """Holds the process token set and wraps the report endpoints."""

    REFRESH_WINDOW = 60
    DEFAULT_EXPIRES_IN = 1800

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        *,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None
        self._clock = clock
        self._tokens: XeroTokens | None = None
        # Reentrant: refresh is reached both directly and through access_token().
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # token store
    # ------------------------------------------------------------------
    def set_tokens(
        self,
        access_token: str = "",
        refresh_token: str = "",
        expires_at: float | None = None,
        tenant_id: str | None = None,
        expires_in: float | None = None,
    ) -> XeroTokens:
        with self._lock:
            previous_tenant = self._tokens.tenant_id if self._tokens else None
            if not expires_at:
                expires_at = self._clock() + (expires_in or self.DEFAULT_EXPIRES_IN)
            self._tokens = XeroTokens(
                access_token=access_token or "",
                refresh_token=refresh_token or "",
                expires_at=expires_at,
                tenant_id=tenant_id or previous_tenant,
            )
            return self._tokens

    @property
    def tokens(self) -> XeroTokens | None:
        return self._tokens

    def is_authenticated(self) -> bool:
        return bool(self._tokens and self._tokens.refresh_token)

    def clear(self) -> None:
        with self._lock:
            self._tokens = None

    # ------------------------------------------------------------------
    # OAuth2
    # ------------------------------------------------------------------
    def authorization_url(self, state: str = "xero_auth") -> str:
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self._client_id,
                "redirect_uri": self._redirect_uri,
                "scope": XERO_SCOPES,
                "state": state,
            }
        )
        return f"{XERO_AUTHORIZE_URL}?{query}"

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise XeroError(f"{action}: non-JSON response ({response.status_code})") from exc

    def _token_set(self, data: Any, action: str, tenant_id: str | None = None) -> XeroTokens:
        if not isinstance(data, dict) or not data.get("access_token") or not data.get("refresh_token"):
            raise XeroError(f"{action}: response carries no tokens")
        try:
            expires_in = float(data.get("expires_in") or self.DEFAULT_EXPIRES_IN)
        except (TypeError, ValueError) as exc:
            raise XeroError(f"{action}: invalid expires_in {data.get('expires_in')!r}") from exc
        return XeroTokens(
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=self._clock() + expires_in,
            tenant_id=tenant_id,
        )

    def _token_request(self, form: dict[str, str], action: str) -> Any:
        response = self._client.post(
            XERO_TOKEN_URL,
            data=form,
            auth=(self._client_id, self._client_secret),
        )
        if response.is_error:
            raise XeroError(f"{action}: {response.status_code} {response.text}")
        return self._json(response, action)

    def exchange_code(self, code: str) -> XeroTokens:
        action = "Token exchange failed"
        data = self._token_request(
            {"grant_type": "authorization_code", "code": code, "redirect_uri": self._redirect_uri},
            action,
        )
        tokens = self._token_set(data, action)
        with self._lock:
            self._tokens = tokens
        logger.info("Exchanged Xero authorization code for tokens")
        self.tenant_id()
        return self._tokens

    def refresh_access_token(self) -> str:
        with self._lock:
            if not self._tokens or not self._tokens.refresh_token:
                raise XeroAuthError("No refresh token available. Please re-authenticate with Xero.")
            action = "Failed to refresh Xero token"
            data = self._token_request(
                {"grant_type": "refresh_token", "refresh_token": self._tokens.refresh_token},
                action,
            )
            self._tokens = self._token_set(data, action, tenant_id=self._tokens.tenant_id)
            logger.info("Refreshed Xero access token")
            return self._tokens.access_token

    def access_token(self) -> str:
        with self._lock:
            if not self._tokens:
                raise XeroAuthError("Not authenticated with Xero. Please connect first.")
            if self._tokens.expires_within(self.REFRESH_WINDOW, self._clock()):
                return self.refresh_access_token()
            return self._tokens.access_token

    def tenant_id(self) -> str:
        if self._tokens and self._tokens.tenant_id:
            return self._tokens.tenant_id

        token = self.access_token()
        response = self._client.get(XERO_CONNECTIONS_URL, headers={"Authorization": f"Bearer {token}"})
        if response.is_error:
            raise XeroError("Failed to get Xero connections")
        connections = self._json(response, "Failed to get Xero connections")
        if not connections:
            raise XeroError("No Xero organizations connected")
        first = connections[0] if isinstance(connections, list) else None
        if not isinstance(first, dict) or not first.get("tenantId"):
            raise XeroError(f"Unexpected Xero connections payload: {connections!r}")

        tenant_id = str(first["tenantId"])
        with self._lock:
            if self._tokens:
                self._tokens.tenant_id = tenant_id
        return tenant_id

    # ------------------------------------------------------------------
    # reports
    # ------------------------------------------------------------------
    def _get_report(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        token = self.access_token()
        tenant_id = self.tenant_id()
        url = f"{XERO_API_BASE}/{path}"

        def send(bearer: str) -> httpx.Response:
            logger.debug("GET %s %s", url, params)
            return self._client.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {bearer}",
                    "Xero-Tenant-Id": tenant_id,
                    "Accept": "application/json",
                },
            )

        response = send(token)
        if response.status_code == 401:
            logger.info("Xero rejected the access token, refreshing and retrying once")
            response = send(self.refresh_access_token())
        if response.is_error:
            raise XeroError(f"Xero API error: {response.status_code}")
        return self._json(response, f"Xero {path}")

    def balance_sheet(self, date: str | None = None) -> dict[str, Any]:
        params: dict[str, str] = {}
        if date:
            params["date"] = date
        params["periods"] = "2"
        params["timeframe"] = "MONTH"
        return self._get_report("Reports/BalanceSheet", params)

    def profit_and_loss(self, from_date: str | None = None, to_date: str | None = None) -> dict[str, Any]:
        params: dict[str, str] = {}
        if from_date:
            params["fromDate"] = from_date
        if to_date:
            params["toDate"] = to_date
        params["periods"] = "2"
        params["timeframe"] = "MONTH"
        return self._get_report("Reports/ProfitAndLoss", params)

    def close(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            self._client.close()


_client: XeroClient | None = None


def configure_xero_client(client: XeroClient | None) -> None:
    """Install the Xero client used by the accounting endpoints."""

    global _client
    _client = client


def get_xero_client() -> XeroClient:
    global _client
    if _client is None:
        # Unconfigured installs still answer /status; calls fail at the token endpoint.
        _client = XeroClient("", "", "")
    return _client


__all__ = [
    "XeroAuthError",
    "XeroClient",
    "XeroError",
    "configure_xero_client",
    "get_xero_client",
]
