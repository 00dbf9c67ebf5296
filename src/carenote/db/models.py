"""Database models for CareNote."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from .session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ReportRecord(Base):
    """A generated incident report and the form data it was written from."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True)
    cna_name = Column(String(255), nullable=False)
    shift_time = Column(String(64), nullable=False)
    floor = Column(String(64), nullable=False)
    supervisor_on_duty = Column(String(255), nullable=False)
    patient_name = Column(String(255), nullable=False)
    patient_room = Column(String(64), nullable=False)
    incident_time = Column(String(64), nullable=False)
    incident_nature = Column(String(255), nullable=False)
    incident_description = Column(Text, nullable=False)
    patient_able_to_state = Column(String(16), nullable=False)
    patient_statement = Column(Text, nullable=True)
    cna_actions = Column(Text, nullable=False)
    supervisor_notified = Column(String(255), nullable=False)
    generated_report = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class GeneralStatementRecord(Base):
    """A raw CNA statement and its processed narrative."""

    __tablename__ = "general_statements"

    id = Column(Integer, primary_key=True)
    resident_name = Column(String(255), nullable=False)
    room_number = Column(String(64), nullable=False)
    raw_statement = Column(Text, nullable=False)
    processed_statement = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class FeedbackRecord(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True)
    usefulness = Column(Integer, nullable=False)
    ease_of_use = Column(Integer, nullable=False)
    overall_satisfaction = Column(Integer, nullable=False)
    most_helpful_feature = Column(Text, nullable=False)
    suggested_improvements = Column(Text, nullable=False)
    additional_comments = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=False)
    submitted_at = Column(DateTime, default=_utcnow, nullable=False)


class FeedbackEventRecord(Base):
    """A view or submit interaction with a feedback form."""

    __tablename__ = "feedback_events"

    id = Column(Integer, primary_key=True)
    event_type = Column(String(16), nullable=False)
    form_type = Column(String(64), nullable=False)
    ip_address = Column(String(64), nullable=False)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
