"""Prompt templates for the chat completion API."""
from __future__ import annotations

from typing import Dict, List

from .base import IncidentDetails, StatementDetails

Message = Dict[str, str]

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "zh": "Chinese",
    "ht": "Haitian Kreyol",
    "tl": "Tagalog",
}

INCIDENT_SYSTEM_PROMPT = (
    "You are a medical report assistant that helps CNAs (Certified Nursing Assistants) generate "
    "incident reports. Generate a formal, grammatically correct incident report based on the provided "
    "information. The report should be professional and suitable for medical documentation."
)

STATEMENT_SYSTEM_PROMPT = (
    "You are a documentation assistant for CNAs (Certified Nursing Assistants) in long-term care. "
    "Rewrite the statement you are given as a clear, objective, professional narrative suitable for a "
    "resident's record. Keep every fact, do not invent details, and write in the first person."
)


def language_name(code: str) -> str:
    """Return the display name for a language code, or the code itself when unknown."""

    return LANGUAGE_NAMES.get(code.lower(), code)


def incident_report_messages(details: IncidentDetails) -> List[Message]:
    lines = [
        "Please generate a formal incident report with the following information:",
        "",
        f"CNA Name: {details.cna_name}",
        f"Shift Time: {details.shift_time}",
        f"Floor: {details.floor}",
        f"Supervisor on Duty: {details.supervisor_on_duty}",
        f"Patient Name: {details.patient_name}",
        f"Patient Room: {details.patient_room}",
        f"Time of Incident: {details.incident_time}",
        f"Nature of Incident: {details.incident_nature}",
        f"Description of Incident: {details.incident_description}",
        f"Was patient able to state what happened: {details.patient_able_to_state}",
    ]
    if details.patient_able_to_state.strip().lower() == "yes" and details.patient_statement:
        lines.append(f"Patient's statement: {details.patient_statement}")
    lines.extend(
        [
            f"Actions taken by CNA: {details.cna_actions}",
            f"Supervisor notified: {details.supervisor_notified}",
            "",
            "The report should be structured with sections for introduction (stating name, shift details), "
            "incident description, patient's response, actions taken, and conclusion with current date and "
            "time. Keep it formal, accurate, and professional.",
        ]
    )
    return [
        {"role": "system", "content": INCIDENT_SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]


def translation_messages(report_text: str, target_language: str) -> List[Message]:
    system = (
        "You are a medical translator that specializes in translating incident reports for healthcare "
        f"facilities. Translate the provided text into {language_name(target_language)} while maintaining "
        "the formal tone, structure, and all medical information. Ensure the translation is grammatically "
        "correct and uses appropriate medical terminology in the target language."
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": report_text},
    ]


def general_statement_messages(details: StatementDetails) -> List[Message]:
    user = (
        f"Resident Name: {details.resident_name}\n"
        f"Room Number: {details.room_number}\n"
        f"Statement: {details.raw_statement}"
    )
    return [
        {"role": "system", "content": STATEMENT_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]
