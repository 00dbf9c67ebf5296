"""Shared abstractions for CareNote text generation."""
from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class IncidentDetails:
    """Structured incident data collected from a CNA."""

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
    cna_actions: str
    supervisor_notified: str
    patient_statement: Optional[str] = None


@dataclass(slots=True)
class StatementDetails:
    """A CNA's free-form statement about a resident."""

    resident_name: str
    room_number: str
    raw_statement: str


class TextGenerationError(RuntimeError):
    """Raised when the text generation service cannot produce a result."""


class BaseTextGenerator(abc.ABC):
    """Turns structured documentation into formal prose."""

    @abc.abstractmethod
    async def generate_incident_report(self, details: IncidentDetails) -> str:
        """Write a formal incident report."""

    @abc.abstractmethod
    async def translate_report(self, report_text: str, target_language: str) -> str:
        """Translate a generated report, keeping its structure."""

    @abc.abstractmethod
    async def process_general_statement(self, details: StatementDetails) -> str:
        """Rewrite a raw statement as a professional narrative."""
