"""Aggregate statistics over stored feedback."""
from __future__ import annotations

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from ..db.models import FeedbackEventRecord, FeedbackRecord

RECENT_WINDOW = timedelta(days=7)


def _round1(value: float) -> float:
    """Round half up to one decimal place."""

    return math.floor(value * 10 + 0.5) / 10


def _top_terms(texts: Iterable[str], limit: int = 5) -> List[dict]:
    words = Counter(
        word for text in texts for word in text.lower().split() if len(word) > 3
    )
    return [{"feature": word, "count": count} for word, count in words.most_common(limit)]


def summarize_feedback(records: Sequence[FeedbackRecord]) -> dict:
    """Average ratings, satisfaction distribution and most frequent terms."""

    if not records:
        return {
            "totalResponses": 0,
            "averageUsefulness": 0,
            "averageEaseOfUse": 0,
            "averageSatisfaction": 0,
            "ratingDistribution": [],
            "topFeatures": [],
            "commonSuggestions": [],
        }
    total = len(records)
    satisfaction = Counter(record.overall_satisfaction for record in records)
    return {
        "totalResponses": total,
        "averageUsefulness": _round1(sum(record.usefulness for record in records) / total),
        "averageEaseOfUse": _round1(sum(record.ease_of_use for record in records) / total),
        "averageSatisfaction": _round1(sum(record.overall_satisfaction for record in records) / total),
        "ratingDistribution": [{"rating": rating, "count": satisfaction[rating]} for rating in range(1, 6)],
        "topFeatures": _top_terms(record.most_helpful_feature for record in records),
        "commonSuggestions": _top_terms(record.suggested_improvements for record in records),
    }


def _conversion(views: int, submissions: int) -> float:
    return _round1(submissions / views * 100) if views else 0


def summarize_feedback_events(records: Sequence[FeedbackEventRecord], *, now: datetime) -> dict:
    """View/submit conversion overall and over the last seven days."""

    cutoff = now - RECENT_WINDOW
    recent = [record for record in records if record.created_at >= cutoff]
    views = sum(1 for record in records if record.event_type == "view")
    submissions = sum(1 for record in records if record.event_type == "submit")
    recent_views = sum(1 for record in recent if record.event_type == "view")
    recent_submissions = sum(1 for record in recent if record.event_type == "submit")
    return {
        "totalViews": views,
        "totalSubmissions": submissions,
        "conversionRate": _conversion(views, submissions),
        "recentViews": recent_views,
        "recentSubmissions": recent_submissions,
        "recentConversionRate": _conversion(recent_views, recent_submissions),
    }
