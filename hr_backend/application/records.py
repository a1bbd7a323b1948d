"""Application service for the six Lark-backed HR resources."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel

from hr_backend.core.config import Settings, get_settings
from hr_backend.core.field_mappings import (
    CANDIDATE_FIELDS,
    EMPLOYEE_FIELDS,
    EMPLOYEE_READ_ONLY_FIELDS,
    MANPOWER_FIELDS,
    OFFBOARDING_CHECKLIST,
    OFFBOARDING_FIELDS,
    ONBOARDING_CHECKLIST,
    ONBOARDING_FIELDS,
    RECRUITMENT_FIELDS,
    FieldMapping,
)
from hr_backend.core.normalize import checklist_progress, reverse_transform, transform_record
from hr_backend.core.schema import (
    Candidate,
    Employee,
    ManpowerRequest,
    OffboardingRecord,
    OnboardingRecord,
    RecruitmentProgress,
)
from hr_backend.domain import LarkRecord
from hr_backend.infrastructure import LarkClient, get_lark_client

logger = logging.getLogger("hr.records")


@dataclass(frozen=True)
class ResourceDefinition:
    """Binds an API resource to its Lark table, field table and response model."""

    name: str
    table: str
    fields: list[FieldMapping]
    model: type[BaseModel]
    label: str
    plural: str
    checklist: tuple[str, ...] = ()
    read_only: tuple[str, ...] = field(default_factory=tuple)


RESOURCES: dict[str, ResourceDefinition] = {
    "manpower": ResourceDefinition(
        name="manpower",
        table="manpower",
        fields=MANPOWER_FIELDS,
        model=ManpowerRequest,
        label="manpower request",
        plural="manpower requests",
    ),
    "recruitment": ResourceDefinition(
        name="recruitment",
        table="recruitment",
        fields=RECRUITMENT_FIELDS,
        model=RecruitmentProgress,
        label="recruitment record",
        plural="recruitment records",
    ),
    "candidates": ResourceDefinition(
        name="candidates",
        table="candidate",
        fields=CANDIDATE_FIELDS,
        model=Candidate,
        label="candidate",
        plural="candidates",
    ),
    "onboarding": ResourceDefinition(
        name="onboarding",
        table="onboarding",
        fields=ONBOARDING_FIELDS,
        model=OnboardingRecord,
        label="onboarding record",
        plural="onboarding records",
        checklist=ONBOARDING_CHECKLIST,
    ),
    "employees": ResourceDefinition(
        name="employees",
        table="employee",
        fields=EMPLOYEE_FIELDS,
        model=Employee,
        label="employee",
        plural="employees",
        read_only=EMPLOYEE_READ_ONLY_FIELDS,
    ),
    "offboarding": ResourceDefinition(
        name="offboarding",
        table="offboarding",
        fields=OFFBOARDING_FIELDS,
        model=OffboardingRecord,
        label="offboarding record",
        plural="offboarding records",
        checklist=OFFBOARDING_CHECKLIST,
    ),
}


class RecordService:
    """List/get/create/update/delete against Lark Base with field remapping."""

    def __init__(
        self,
        client_provider: Callable[[], LarkClient] = get_lark_client,
        settings_provider: Callable[[], Settings] = get_settings,
    ) -> None:
        self._client_provider = client_provider
        self._settings_provider = settings_provider

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def definition(resource: str) -> ResourceDefinition:
        return RESOURCES[resource]

    def _client(self) -> LarkClient:
        return self._client_provider()

    def table_id(self, table: str) -> str:
        return self._settings_provider().table_id(table)

    @staticmethod
    def serialise(definition: ResourceDefinition, record: LarkRecord) -> dict[str, Any]:
        transformed = transform_record(record.record_id, record.fields, definition.fields)
        payload: dict[str, Any] = {"id": record.record_id, **transformed}
        if definition.checklist:
            payload["checklist"] = checklist_progress(transformed, definition.checklist)
        return definition.model(**payload).model_dump()

    @staticmethod
    def to_lark_fields(definition: ResourceDefinition, body: dict[str, Any]) -> dict[str, Any]:
        fields = reverse_transform(body, definition.fields)
        for name in definition.read_only:
            fields.pop(name, None)
        return fields

    # ------------------------------------------------------------------
    # use cases
    # ------------------------------------------------------------------
    def fetch_table(self, table: str) -> list[LarkRecord]:
        return self._client().get_all_records(self.table_id(table))

    def list_records(self, resource: str) -> list[dict[str, Any]]:
        definition = self.definition(resource)
        records = self.fetch_table(definition.table)
        return [self.serialise(definition, record) for record in records]

    def get_record(self, resource: str, record_id: str) -> dict[str, Any] | None:
        definition = self.definition(resource)
        record = self._client().get_record(self.table_id(definition.table), record_id)
        if record is None:
            return None
        return self.serialise(definition, record)

    def create_record(self, resource: str, body: dict[str, Any]) -> str:
        definition = self.definition(resource)
        fields = self.to_lark_fields(definition, body)
        record_id = self._client().create_record(self.table_id(definition.table), fields)
        logger.info("Created %s %s", definition.label, record_id)
        return record_id

    def update_record(self, resource: str, record_id: str, body: dict[str, Any]) -> None:
        definition = self.definition(resource)
        fields = self.to_lark_fields(definition, body)
        self._client().update_record(self.table_id(definition.table), record_id, fields)
        logger.info("Updated %s %s (%d fields)", definition.label, record_id, len(fields))

    def delete_record(self, resource: str, record_id: str) -> None:
        definition = self.definition(resource)
        self._client().delete_record(self.table_id(definition.table), record_id)
        logger.info("Deleted %s %s", definition.label, record_id)


_service = RecordService()


def get_record_service() -> RecordService:
    """Return the singleton record service for the process."""

    return _service
