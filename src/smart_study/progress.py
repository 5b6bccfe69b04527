"""Study goal completion and weekly progress tracking."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from smart_study.db import Repository
from smart_study.models import now_ms

WEAK_THRESHOLD = 50.0


@dataclass
class WeeklyData:
    week_start: int
    minutes: int


@dataclass
class SubjectProgress:
    subject_id: str
    completion_percentage: float
    total_minutes: int
    this_week_minutes: int
    weekly_trends: list[WeeklyData] = field(default_factory=list)


@dataclass
class OverallStatistics:
    total_study_minutes: int
    average_completion: float
    improving_subjects: int
    total_subjects: int


def week_start(now: int, weeks_back: int = 0) -> datetime:
    """Local Monday 00:00 of the week containing `now`, shifted back by whole weeks."""
    current = datetime.fromtimestamp(now / 1000)
    monday = (current - timedelta(days=current.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    return monday - timedelta(weeks=weeks_back)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _finished_sessions(repo: Repository, subject_id: str) -> list:
    return [s for s in repo.get_study_sessions() if s.subject_id == subject_id and s.end_time is not None]


def get_weekly_trends(
    repo: Repository, subject_id: str, weeks: int = 4, now: Optional[int] = None
) -> list[WeeklyData]:
    """Minutes studied per Monday-Sunday week, oldest week first."""
    now = now_ms() if now is None else now
    sessions = _finished_sessions(repo, subject_id)
    trends = []
    for offset in range(weeks):
        start = week_start(now, offset)
        start_ms, end_ms = _to_ms(start), _to_ms(start + timedelta(weeks=1))
        minutes = sum(s.duration_minutes for s in sessions if start_ms <= s.start_time < end_ms)
        trends.append(WeeklyData(week_start=start_ms, minutes=minutes))
    return list(reversed(trends))


def get_subject_progress(repo: Repository, subject_id: str, now: Optional[int] = None) -> SubjectProgress:
    """Completion against the weekly target.

    The completed total is all-time, not limited to the current week.
    """
    subject = repo.get("subjects", subject_id)
    if subject is None:
        return SubjectProgress(subject_id, 0.0, 0, 0, [])
    now = now_ms() if now is None else now

    sessions = _finished_sessions(repo, subject_id)
    total_minutes = sum(s.duration_minutes for s in sessions)
    target_minutes = subject.target_hours_per_week * 60
    if target_minutes > 0:
        completion = min(100.0, total_minutes / target_minutes * 100)
    else:
        completion = 0.0

    this_week_start = _to_ms(week_start(now))
    this_week = sum(s.duration_minutes for s in sessions if s.start_time >= this_week_start)

    return SubjectProgress(
        subject_id=subject_id,
        completion_percentage=completion,
        total_minutes=total_minutes,
        this_week_minutes=this_week,
        weekly_trends=get_weekly_trends(repo, subject_id, 4, now),
    )


def get_all_subject_progress(repo: Repository, now: Optional[int] = None) -> list[SubjectProgress]:
    return [get_subject_progress(repo, s.id, now) for s in repo.get_subjects()]


def identify_weak_areas(repo: Repository, threshold: float = WEAK_THRESHOLD, now: Optional[int] = None) -> list[str]:
    return [p.subject_id for p in get_all_subject_progress(repo, now) if p.completion_percentage < threshold]


def get_overall_statistics(repo: Repository, now: Optional[int] = None) -> OverallStatistics:
    progress = get_all_subject_progress(repo, now)
    total = sum(p.total_minutes for p in progress)
    average = sum(p.completion_percentage for p in progress) / len(progress) if progress else 0.0
    improving = sum(
        1 for p in progress
        if len(p.weekly_trends) >= 2 and p.weekly_trends[-1].minutes > p.weekly_trends[-2].minutes
    )
    return OverallStatistics(
        total_study_minutes=total,
        average_completion=average,
        improving_subjects=improving,
        total_subjects=len(progress),
    )
