"""Token set for the Xero OAuth2 integration."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class XeroTokens:
    access_token: str
    refresh_token: str
    expires_at: float
    tenant_id: str | None = None

    def expires_within(self, seconds: float, now: float) -> bool:
        return now > self.expires_at - seconds
