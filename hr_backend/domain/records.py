"""Records as returned by the Lark Base (bitable) API."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class LarkRecord:
    """A single row: an opaque id assigned by Lark plus its raw field map."""

    record_id: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "LarkRecord":
        return cls(record_id=str(payload.get("record_id") or ""), fields=dict(payload.get("fields") or {}))


@dataclass(slots=True)
class LarkPage:
    items: list[LarkRecord]
    has_more: bool = False
    page_token: str | None = None
    total: int = 0
