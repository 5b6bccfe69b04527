"""Grade trends and performance summaries per subject."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from smart_study.db import Repository
from smart_study.models import DAY_MS, now_ms

TREND_WINDOW = 5
TREND_THRESHOLD = 5.0
HISTORY_DAYS = 30


class PerformanceTrend(Enum):
    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


@dataclass
class GradeDataPoint:
    date: int
    score: float  # percentage
    type: str


@dataclass
class HistoricalComparison:
    current_average: float
    previous_average: float
    change: float


@dataclass
class SubjectPerformance:
    subject_id: str
    average_grade: Optional[float]
    status: PerformanceTrend


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def get_average_grade(repo: Repository, subject_id: str) -> Optional[float]:
    grades = [g for g in repo.get_grades() if g.subject_id == subject_id]
    if not grades:
        return None
    return _mean([g.percentage for g in grades])


def get_grade_trends(repo: Repository, subject_id: str, limit: int = 10) -> list[GradeDataPoint]:
    """The last `limit` grades for a subject in date order, as percentages."""
    grades = sorted((g for g in repo.get_grades() if g.subject_id == subject_id), key=lambda g: g.date)
    return [GradeDataPoint(date=g.date, score=g.percentage, type=g.type) for g in grades[-limit:]]


def get_performance_trend(repo: Repository, subject_id: str) -> PerformanceTrend:
    """Compare the mean of the last 3 grades with the mean of the first 2.

    Both halves come from the same window of up to 5 grades, so with 2-4
    grades they overlap.
    """
    trends = get_grade_trends(repo, subject_id, TREND_WINDOW)
    if len(trends) < 2:
        return PerformanceTrend.STABLE

    recent = _mean([p.score for p in trends[-3:]])
    earlier = _mean([p.score for p in trends[:2]])
    change = recent - earlier
    if change > TREND_THRESHOLD:
        return PerformanceTrend.IMPROVING
    if change < -TREND_THRESHOLD:
        return PerformanceTrend.DECLINING
    return PerformanceTrend.STABLE


def compare_with_historical(
    repo: Repository, subject_id: str, now: Optional[int] = None
) -> Optional[HistoricalComparison]:
    grades = [g for g in repo.get_grades() if g.subject_id == subject_id]
    if len(grades) < 2:
        return None
    now = now_ms() if now is None else now
    cutoff = now - HISTORY_DAYS * DAY_MS

    recent = [g.percentage for g in grades if g.date >= cutoff]
    older = [g.percentage for g in grades if g.date < cutoff]
    if not recent or not older:
        return None
    current, previous = _mean(recent), _mean(older)
    return HistoricalComparison(current_average=current, previous_average=previous, change=current - previous)


def get_all_subject_performance(repo: Repository) -> list[SubjectPerformance]:
    return [
        SubjectPerformance(
            subject_id=subject.id,
            average_grade=get_average_grade(repo, subject.id),
            status=get_performance_trend(repo, subject.id),
        )
        for subject in repo.get_subjects()
    ]
