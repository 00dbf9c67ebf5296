from __future__ import annotations

from datetime import datetime, timedelta
from types import SimpleNamespace

from carenote.services.feedback import summarize_feedback, summarize_feedback_events


def feedback(usefulness, ease, satisfaction, feature="", improvements=""):
    return SimpleNamespace(
        usefulness=usefulness,
        ease_of_use=ease,
        overall_satisfaction=satisfaction,
        most_helpful_feature=feature,
        suggested_improvements=improvements,
    )


def event(kind, created_at):
    return SimpleNamespace(event_type=kind, created_at=created_at)


def test_summary_of_no_feedback_is_all_zero():
    summary = summarize_feedback([])
    assert summary["totalResponses"] == 0
    assert summary["ratingDistribution"] == []
    assert summary["topFeatures"] == []


def test_summary_rounds_half_up_and_counts_ratings():
    records = [
        feedback(5, 5, 5, "Fast reports", "Dark mode please"),
        feedback(4, 3, 5, "fast translation", "more more more languages"),
        feedback(3, 4, 2, "the app", "none"),
        feedback(4, 4, 4),
    ]

    summary = summarize_feedback(records)

    assert summary["averageUsefulness"] == 4.0
    assert summary["averageEaseOfUse"] == 4.0
    assert summary["averageSatisfaction"] == 4.0
    assert summary["ratingDistribution"] == [
        {"rating": 1, "count": 0},
        {"rating": 2, "count": 1},
        {"rating": 3, "count": 0},
        {"rating": 4, "count": 1},
        {"rating": 5, "count": 2},
    ]
    assert summary["topFeatures"][0] == {"feature": "fast", "count": 2}
    assert {"feature": "the", "count": 1} not in summary["topFeatures"]
    assert summary["commonSuggestions"][0] == {"feature": "more", "count": 3}
    assert summarize_feedback([feedback(1, 1, 1), feedback(1, 1, 1), feedback(1, 1, 2), feedback(1, 1, 2)])[
        "averageSatisfaction"
    ] == 1.5


def test_top_terms_are_limited_to_five():
    records = [feedback(1, 1, 1, "alpha bravo charlie delta echoes foxtrot")]
    assert len(summarize_feedback(records)["topFeatures"]) == 5


def test_event_summary_separates_recent_activity():
    now = datetime(2024, 5, 20, 12, 0)
    records = [
        event("view", now - timedelta(days=30)),
        event("view", now - timedelta(days=30)),
        event("submit", now - timedelta(days=30)),
        event("view", now - timedelta(days=1)),
        event("view", now - timedelta(days=2)),
        event("submit", now - timedelta(hours=3)),
    ]

    summary = summarize_feedback_events(records, now=now)

    assert summary == {
        "totalViews": 4,
        "totalSubmissions": 2,
        "conversionRate": 50.0,
        "recentViews": 2,
        "recentSubmissions": 1,
        "recentConversionRate": 50.0,
    }


def test_event_summary_without_views_has_zero_conversion():
    summary = summarize_feedback_events([event("submit", datetime(2024, 1, 1))], now=datetime(2024, 1, 2))
    assert summary["conversionRate"] == 0
    assert summary["recentSubmissions"] == 1
