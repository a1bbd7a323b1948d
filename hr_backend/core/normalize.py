"""Conversions between Lark Base field values and flat display strings."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from hr_backend.core.field_mappings import FieldMapping

DONE_VALUES = frozenset({"yes", "done", "completed", "true", "✓", "✔"})


def normalize_field_value(value: Any) -> str:
    """Collapse the store's field representations into one display string.

    Handles plain scalars, formula/lookup arrays (``[{"text": ...}]``),
    linked-record arrays (``[{"text_arr": [...]}]``), URL objects
    (``{"link", "text"}``) and person objects (``{"name"}``).
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return _format_number(value)

    if isinstance(value, list):
        if value and isinstance(value[0], dict) and "text" in value[0]:
            values = (item.get("text") for item in value if isinstance(item, dict))
            return ", ".join("" if text is None else str(text) for text in values)
        if value and isinstance(value[0], dict) and value[0].get("text_arr"):
            texts: list[str] = []
            for item in value:
                if isinstance(item, dict):
                    texts.extend(str(text) for text in item.get("text_arr") or [])
            return ", ".join(texts)
        return ", ".join(item if isinstance(item, str) else _stringify(item) for item in value)

    if isinstance(value, dict):
        if value.get("link"):
            return str(value.get("text") or value["link"])
        if value.get("name"):
            return str(value["name"])

    return json.dumps(value, ensure_ascii=False)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _stringify(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _format_number(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def format_timestamp(value: Any) -> str:
    """Render an epoch timestamp (seconds or milliseconds) as ``YYYY-MM-DD``."""

    if value is None or (isinstance(value, (str, int, float)) and not value):
        return ""

    if isinstance(value, bool):
        return normalize_field_value(value)
    if isinstance(value, (int, float)):
        ts = float(value)
    elif isinstance(value, str):
        try:
            ts = float(value.strip())
        except ValueError:
            return value
    else:
        return normalize_field_value(value)

    # Lark returns milliseconds; anything below 1e12 is treated as seconds.
    if ts < 1e12:
        ts *= 1000
    try:
        moment = datetime.fromtimestamp(ts / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return str(value)
    return moment.date().isoformat()


def transform_record(record_id: str, fields: Mapping[str, Any], mappings: Iterable[FieldMapping]) -> dict[str, str]:
    result: dict[str, str] = {"record_id": record_id}
    for mapping in mappings:
        raw_value = fields.get(mapping.lark_field)
        if mapping.is_date:
            result[mapping.our_field] = format_timestamp(raw_value)
        else:
            result[mapping.our_field] = normalize_field_value(raw_value)
    return result


def reverse_transform(data: Mapping[str, Any], mappings: Iterable[FieldMapping]) -> dict[str, Any]:
    """Map API keys back to Lark column names, keeping only keys present in ``data``."""

    result: dict[str, Any] = {}
    for mapping in mappings:
        if mapping.our_field in data:
            result[mapping.lark_field] = data[mapping.our_field]
    return result


def is_done(value: Any) -> bool:
    if not value:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in DONE_VALUES


def checklist_progress(record: Mapping[str, Any], keys: Iterable[str]) -> dict[str, int]:
    keys = list(keys)
    completed = sum(1 for key in keys if is_done(record.get(key)))
    return {"completed": completed, "total": len(keys)}
