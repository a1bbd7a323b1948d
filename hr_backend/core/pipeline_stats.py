"""Keyword counters behind the HR pipeline overview."""
from __future__ import annotations

from typing import Iterable, Mapping

from hr_backend.core.normalize import normalize_field_value
from hr_backend.core.schema import (
    CandidateCounts,
    EmployeeCounts,
    ManpowerCounts,
    PipelineStats,
    RecruitmentCounts,
    StageCounts,
)
from hr_backend.domain import LarkRecord

MANPOWER_MATCHERS: dict[str, list[str]] = {
    "pending": ["pending"],
    "approved": ["approved"],
}
RECRUITMENT_MATCHERS: dict[str, list[str]] = {
    "in_progress": ["active", "open", "in progress"],
    "completed": ["closed", "completed", "filled"],
}
CANDIDATE_MATCHERS: dict[str, list[str]] = {
    "shortlisted": ["shortlisted", "shortlist"],
    "offered": ["offered", "offer sent", "offer"],
}
COMPLETION_MATCHERS: dict[str, list[str]] = {
    "completed": ["yes", "completed", "done"],
}
EMPLOYEE_MATCHERS: dict[str, list[str]] = {
    "active": ["active"],
}


def count_by_field(
    records: Iterable[LarkRecord],
    field_name: str,
    matchers: Mapping[str, list[str]],
) -> dict[str, int]:
    """Count records whose field contains any keyword of each bucket.

    Buckets are independent: a value matching two keyword lists is counted in both.
    """

    counts = {key: 0 for key in matchers}
    for record in records:
        value = normalize_field_value(record.fields.get(field_name)).lower()
        for key, keywords in matchers.items():
            if any(keyword.lower() in value for keyword in keywords):
                counts[key] += 1
    return counts


def summarise_pipeline(
    manpower: list[LarkRecord],
    recruitment: list[LarkRecord],
    candidates: list[LarkRecord],
    onboarding: list[LarkRecord],
    employees: list[LarkRecord],
    offboarding: list[LarkRecord],
) -> PipelineStats:
    manpower_counts = count_by_field(manpower, "Status", MANPOWER_MATCHERS)
    recruitment_counts = count_by_field(recruitment, "Status", RECRUITMENT_MATCHERS)
    candidate_counts = count_by_field(candidates, "Status", CANDIDATE_MATCHERS)
    onboarding_counts = count_by_field(onboarding, "Completed", COMPLETION_MATCHERS)
    employee_counts = count_by_field(employees, "Status", EMPLOYEE_MATCHERS)
    offboarding_counts = count_by_field(offboarding, "Offboarded", COMPLETION_MATCHERS)

    return PipelineStats(
        manpower=ManpowerCounts(total=len(manpower), **manpower_counts),
        recruitment=RecruitmentCounts(total=len(recruitment), **recruitment_counts),
        candidates=CandidateCounts(total=len(candidates), **candidate_counts),
        onboarding=StageCounts(
            total=len(onboarding),
            in_progress=len(onboarding) - onboarding_counts["completed"],
            completed=onboarding_counts["completed"],
        ),
        employees=EmployeeCounts(total=len(employees), **employee_counts),
        offboarding=StageCounts(
            total=len(offboarding),
            in_progress=len(offboarding) - offboarding_counts["completed"],
            completed=offboarding_counts["completed"],
        ),
    )
