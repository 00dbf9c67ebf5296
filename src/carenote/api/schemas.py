"""Request and response bodies for the CareNote API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from ..generation.base import IncidentDetails, StatementDetails
from ..security.rate_limiter import format_timestamp


def _utc_timestamp(value: datetime) -> str:
    """Stored timestamps are naive UTC; emit them in the same form as quota reset times."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_timestamp(value.timestamp())


UtcDatetime = Annotated[datetime, PlainSerializer(_utc_timestamp, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while exposing snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class IncidentReportRequest(CamelModel):
    cna_name: str = Field(min_length=1)
    shift_time: str = Field(min_length=1)
    floor: str = Field(min_length=1)
    supervisor_on_duty: str = Field(min_length=1)
    patient_name: str = Field(min_length=1)
    patient_room: str = Field(min_length=1)
    incident_time: str = Field(min_length=1)
    incident_nature: str = Field(min_length=1)
    incident_description: str = Field(min_length=1)
    patient_able_to_state: str = Field(min_length=1, description="'yes' or 'no'.")
    patient_statement: Optional[str] = None
    cna_actions: str = Field(min_length=1)
    supervisor_notified: str = Field(min_length=1)

    def to_details(self) -> IncidentDetails:
        return IncidentDetails(**self.model_dump())


class ReportOut(CamelModel):
    id: int
    cna_name: str
    shift_time: str
    floor: str
    supervisor_on_duty: str
    patient_name: str
    patient_room: str
    incident_time: str
    incident_nature: str
    incident_description: str
    patient_able_to_state: str
    patient_statement: Optional[str]
    cna_actions: str
    supervisor_notified: str
    generated_report: str
    created_at: UtcDatetime


class TranslateRequest(CamelModel):
    report_text: str = Field(min_length=1)
    target_language: str = Field(min_length=1)


class GeneralStatementRequest(CamelModel):
    resident_name: str = Field(min_length=1)
    room_number: str = Field(min_length=1)
    raw_statement: str = Field(min_length=1)

    def to_details(self) -> StatementDetails:
        return StatementDetails(**self.model_dump())


class GeneralStatementOut(CamelModel):
    id: int
    resident_name: str
    room_number: str
    raw_statement: str
    processed_statement: str
    created_at: UtcDatetime


class FeedbackRequest(CamelModel):
    usefulness: int = Field(ge=1, le=5)
    ease_of_use: int = Field(ge=1, le=5)
    overall_satisfaction: int = Field(ge=1, le=5)
    most_helpful_feature: str
    suggested_improvements: str
    additional_comments: Optional[str] = None


class FeedbackOut(CamelModel):
    id: int
    usefulness: int
    ease_of_use: int
    overall_satisfaction: int
    most_helpful_feature: str
    suggested_improvements: str
    additional_comments: Optional[str]
    ip_address: str
    submitted_at: UtcDatetime


class FeedbackEventRequest(CamelModel):
    event_type: Literal["view", "submit"]
    form_type: str = Field(default="feedback", min_length=1)
