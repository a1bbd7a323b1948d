from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from hr_backend.application import RESOURCES, RecordService
from hr_backend.core.field_mappings import (
    CANDIDATE_FIELDS,
    EMPLOYEE_FIELDS,
    MANPOWER_FIELDS,
    OFFBOARDING_CHECKLIST,
    OFFBOARDING_FIELDS,
    ONBOARDING_CHECKLIST,
    ONBOARDING_FIELDS,
    RECRUITMENT_FIELDS,
    our_fields,
)
from hr_backend.core.normalize import (
    checklist_progress,
    format_timestamp,
    is_done,
    normalize_field_value,
    reverse_transform,
    transform_record,
)


def test_normalize_field_value_shapes():
    assert normalize_field_value(None) == ""
    assert normalize_field_value("plain") == "plain"
    assert normalize_field_value(True) == "Yes"
    assert normalize_field_value(False) == "No"
    assert normalize_field_value(3.0) == "3"
    assert normalize_field_value(2.5) == "2.5"
    assert normalize_field_value([{"text": "a"}, {"text": "b"}]) == "a, b"
    assert normalize_field_value([{"text": None}, {"text": "b"}]) == ", b"
    assert normalize_field_value([{"text_arr": ["x", "y"]}, {"text_arr": ["z"]}]) == "x, y, z"
    assert normalize_field_value(["Finance", "HR"]) == "Finance, HR"
    assert normalize_field_value({"link": "https://x.test", "text": "Profile"}) == "Profile"
    assert normalize_field_value({"link": "https://x.test"}) == "https://x.test"
    assert normalize_field_value({"name": "Lim", "id": "ou_1"}) == "Lim"
    assert normalize_field_value({"other": 1}) == '{"other": 1}'


def test_format_timestamp_handles_seconds_and_milliseconds():
    assert format_timestamp(1735689600000) == "2025-01-01"
    assert format_timestamp(1735689600) == "2025-01-01"
    assert format_timestamp("1735689600000") == "2025-01-01"
    assert format_timestamp(None) == ""
    assert format_timestamp("") == ""
    assert format_timestamp(0) == ""
    assert format_timestamp("next Monday") == "next Monday"


def test_transform_then_reverse_restores_mapped_fields():
    fields = {"Request No": "MP-9", "Status": "Approved", "Department": "Ops", "Untracked": "x"}

    transformed = transform_record("rec1", fields, MANPOWER_FIELDS)
    assert transformed["record_id"] == "rec1"
    assert set(transformed) == {"record_id", *our_fields(MANPOWER_FIELDS)}
    assert transformed["title"] == ""

    populated = {key: value for key, value in transformed.items() if value and key != "record_id"}
    assert reverse_transform(populated, MANPOWER_FIELDS) == {
        "Request No": "MP-9",
        "Status": "Approved",
        "Department": "Ops",
    }


@pytest.mark.parametrize(
    "mappings",
    [MANPOWER_FIELDS, RECRUITMENT_FIELDS, CANDIDATE_FIELDS, ONBOARDING_FIELDS, OFFBOARDING_FIELDS, EMPLOYEE_FIELDS],
    ids=["manpower", "recruitment", "candidate", "onboarding", "offboarding", "employee"],
)
def test_every_table_round_trips_text_columns(mappings):
    fields = {mapping.lark_field: f"value of {mapping.lark_field}" for mapping in mappings if not mapping.is_date}

    transformed = transform_record("rec1", fields, mappings)
    text_keys = {mapping.our_field for mapping in mappings if not mapping.is_date}
    api_values = {key: value for key, value in transformed.items() if key in text_keys}

    assert reverse_transform(api_values, mappings) == fields


@pytest.mark.parametrize("value", ["abc", "", "  padded ", 3, 2.5, 3.0, -1, True, None, ["a", 2]])
def test_normalize_field_value_is_idempotent(value):
    once = normalize_field_value(value)

    assert normalize_field_value(once) == once


def test_reverse_transform_ignores_unknown_keys_and_keeps_raw_values():
    result = reverse_transform({"full_name": "Aida", "seats": 2, "bogus": "x"}, EMPLOYEE_FIELDS)
    assert result == {"Full Name": "Aida", "Seats": 2}


def test_is_done_and_checklist_progress():
    assert is_done("Yes")
    assert is_done(" completed ")
    assert is_done("✓")
    assert is_done(True)
    assert not is_done("No")
    assert not is_done("")
    assert not is_done(None)

    record = {"offerLetter": "Yes", "rankChart": "Done", "orgChart": "Pending"}
    assert checklist_progress(record, ONBOARDING_CHECKLIST) == {"completed": 2, "total": 12}
    assert checklist_progress({}, OFFBOARDING_CHECKLIST) == {"completed": 0, "total": 9}


def test_employee_lark_fields_drop_read_only_columns():
    definition = RESOURCES["employees"]
    body = {"full_name": "Farah", "uuid": "E-1", "nationality": "MY", "work_email": "f@x.io", "city": "KL"}

    assert RecordService.to_lark_fields(definition, body) == {"Full Name": "Farah", "City": "KL"}
    assert RecordService.to_lark_fields(RESOURCES["manpower"], {"status": "Pending"}) == {"Status": "Pending"}
