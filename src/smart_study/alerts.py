"""Performance alert generation and resolution."""
import logging
from dataclasses import replace
from typing import Optional

from smart_study.db import Repository
from smart_study.models import AlertType, PerformanceAlert, Subject, new_id, now_ms
from smart_study.performance import PerformanceTrend, get_grade_trends, get_performance_trend
from smart_study.progress import get_all_subject_progress

logger = logging.getLogger(__name__)

GRADE_DROP_THRESHOLD = 10.0
SEVERE_DROP_THRESHOLD = 20.0
GOAL_THRESHOLD = 50.0


def find_unresolved(repo: Repository, alert_type: AlertType, subject_id: Optional[str]) -> Optional[PerformanceAlert]:
    return next(
        (a for a in repo.get_alerts()
         if a.type == alert_type and a.subject_id == subject_id and not a.resolved),
        None,
    )


def _raise_alert(
    repo: Repository, alert_type: AlertType, subject: Subject, message: str, severity: int, now: int
) -> Optional[PerformanceAlert]:
    """Insert an alert unless an unresolved one of the same type and subject exists."""
    if find_unresolved(repo, alert_type, subject.id) is not None:
        return None
    alert = PerformanceAlert(
        id=new_id(),
        type=alert_type,
        subject_id=subject.id,
        message=message,
        date=now,
        resolved=False,
        severity=severity,
    )
    repo.add_alert(alert)
    logger.info("%s alert raised for %s (severity %d)", alert_type.name, subject.name, severity)
    return alert


def check_grade_drops(repo: Repository, now: int) -> list[PerformanceAlert]:
    created = []
    for subject in repo.get_subjects():
        trends = get_grade_trends(repo, subject.id, 3)
        if len(trends) < 2:
            continue
        drop = trends[-2].score - trends[-1].score
        if drop <= GRADE_DROP_THRESHOLD:
            continue
        alert = _raise_alert(
            repo, AlertType.GRADE_DROP, subject,
            f"Grade dropped by {drop:.1f}% in {subject.name}. "
            "Consider reviewing recent topics and seeking help.",
            3 if drop > SEVERE_DROP_THRESHOLD else 2,
            now,
        )
        if alert:
            created.append(alert)
    return created


def check_missed_study_goals(repo: Repository, now: int) -> list[PerformanceAlert]:
    created = []
    subjects = {s.id: s for s in repo.get_subjects()}
    for progress in get_all_subject_progress(repo, now):
        if progress.completion_percentage >= GOAL_THRESHOLD:
            continue
        subject = subjects.get(progress.subject_id)
        if subject is None:
            continue
        alert = _raise_alert(
            repo, AlertType.MISSED_STUDY_GOAL, subject,
            f"Study goal completion is {progress.completion_percentage:.1f}% "
            f"for {subject.name}. Consider adjusting your schedule.",
            2,
            now,
        )
        if alert:
            created.append(alert)
    return created


def check_performance_decline(repo: Repository, now: int) -> list[PerformanceAlert]:
    created = []
    for subject in repo.get_subjects():
        if get_performance_trend(repo, subject.id) != PerformanceTrend.DECLINING:
            continue
        alert = _raise_alert(
            repo, AlertType.PERFORMANCE_DECLINE, subject,
            f"Performance trend is declining in {subject.name}. "
            "Review recent topics and consider additional study time.",
            2,
            now,
        )
        if alert:
            created.append(alert)
    return created


def check_and_generate_alerts(repo: Repository, now: Optional[int] = None) -> list[PerformanceAlert]:
    """Run every alert check and return the alerts that were newly created."""
    now = now_ms() if now is None else now
    created = check_grade_drops(repo, now)
    created += check_missed_study_goals(repo, now)
    created += check_performance_decline(repo, now)
    return created


def get_unresolved_alerts(repo: Repository) -> list[PerformanceAlert]:
    return sorted((a for a in repo.get_alerts() if not a.resolved), key=lambda a: a.date, reverse=True)


def get_alerts_by_severity(repo: Repository, severity: int) -> list[PerformanceAlert]:
    return [a for a in get_unresolved_alerts(repo) if a.severity == severity]


def get_unresolved_count(repo: Repository) -> int:
    return sum(1 for a in repo.get_alerts() if not a.resolved)


def resolve_alert(repo: Repository, alert_id: str) -> bool:
    """Mark an alert resolved. Returns True only if something changed."""
    alert = repo.get("alerts", alert_id)
    if alert is None or alert.resolved:
        return False
    repo.update_alert(replace(alert, resolved=True))
    return True
