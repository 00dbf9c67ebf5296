"""Database repository helpers."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..generation.base import IncidentDetails, StatementDetails
from .models import FeedbackEventRecord, FeedbackRecord, GeneralStatementRecord, ReportRecord

logger = logging.getLogger("carenote.repository")


def create_report(session: Session, details: IncidentDetails, generated_report: str) -> ReportRecord:
    """Persist an incident report together with its generated text."""

    record = ReportRecord(**asdict(details), generated_report=generated_report)
    session.add(record)
    session.flush()
    logger.info("Stored report %s for room %s", record.id, record.patient_room)
    return record


def create_general_statement(
    session: Session, details: StatementDetails, processed_statement: str
) -> GeneralStatementRecord:
    record = GeneralStatementRecord(**asdict(details), processed_statement=processed_statement)
    session.add(record)
    session.flush()
    return record


def list_general_statements(session: Session) -> List[GeneralStatementRecord]:
    stmt = select(GeneralStatementRecord).order_by(GeneralStatementRecord.created_at, GeneralStatementRecord.id)
    return list(session.execute(stmt).scalars().all())


def get_general_statement(session: Session, statement_id: int) -> Optional[GeneralStatementRecord]:
    return session.get(GeneralStatementRecord, statement_id)


def create_feedback(
    session: Session,
    *,
    usefulness: int,
    ease_of_use: int,
    overall_satisfaction: int,
    most_helpful_feature: str,
    suggested_improvements: str,
    additional_comments: Optional[str],
    ip_address: str,
) -> FeedbackRecord:
    """Store one feedback form submission."""

    record = FeedbackRecord(
        usefulness=usefulness,
        ease_of_use=ease_of_use,
        overall_satisfaction=overall_satisfaction,
        most_helpful_feature=most_helpful_feature,
        suggested_improvements=suggested_improvements,
        additional_comments=additional_comments,
        ip_address=ip_address,
    )
    session.add(record)
    session.flush()
    return record


def list_feedback(session: Session) -> List[FeedbackRecord]:
    stmt = select(FeedbackRecord).order_by(FeedbackRecord.submitted_at, FeedbackRecord.id)
    return list(session.execute(stmt).scalars().all())


def track_feedback_event(
    session: Session,
    *,
    event_type: str,
    form_type: str,
    ip_address: str,
    user_agent: Optional[str],
) -> FeedbackEventRecord:
    record = FeedbackEventRecord(
        event_type=event_type,
        form_type=form_type,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    session.add(record)
    session.flush()
    return record


def list_feedback_events(session: Session) -> List[FeedbackEventRecord]:
    stmt = select(FeedbackEventRecord).order_by(FeedbackEventRecord.created_at, FeedbackEventRecord.id)
    return list(session.execute(stmt).scalars().all())
