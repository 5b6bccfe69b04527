"""Dashboard summary figures and display labels."""
from typing import Optional

from smart_study.alerts import get_unresolved_count
from smart_study.db import Repository
from smart_study.models import now_ms
from smart_study.performance import PerformanceTrend
from smart_study.review import suggest_topics


def get_trend_label(trend: PerformanceTrend) -> str:
    if trend == PerformanceTrend.IMPROVING:
        return "IMPROVING"
    elif trend == PerformanceTrend.DECLINING:
        return "DECLINING"
    return "STABLE"


def get_trend_color(trend: PerformanceTrend) -> str:
    if trend == PerformanceTrend.IMPROVING:
        return "green"
    elif trend == PerformanceTrend.DECLINING:
        return "red"
    return "yellow"


def get_completion_color(percentage: float) -> str:
    if percentage >= 80:
        return "green"
    elif percentage >= 50:
        return "yellow"
    elif percentage >= 25:
        return "dark_orange"
    return "red"


def get_severity_color(severity: int) -> str:
    return {3: "red", 2: "dark_orange"}.get(severity, "yellow")


def _average_grade(repo: Repository) -> float:
    grades = repo.get_grades()
    if not grades:
        return 0.0
    return round(sum(g.percentage for g in grades) / len(grades), 1)


def get_dashboard_summary(repo: Repository, now: Optional[int] = None) -> dict:
    now = now_ms() if now is None else now
    sessions = [s for s in repo.get_study_sessions() if s.end_time is not None]
    suggestions = suggest_topics(repo, limit=1, now=now)
    return {
        "subjects": len(repo.get_subjects()),
        "topics": len(repo.get_topics()),
        "study_minutes": sum(s.duration_minutes for s in sessions),
        "sessions_completed": len(sessions),
        "average_grade": _average_grade(repo),
        "unresolved_alerts": get_unresolved_count(repo),
        "next_topic": suggestions[0].topic.name if suggestions else None,
    }
