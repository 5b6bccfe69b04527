"""Study time tracking: live sessions, manual entries and statistics."""
import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from smart_study.db import Repository
from smart_study.models import MINUTE_MS, StudySession, new_id, now_ms

logger = logging.getLogger(__name__)


@dataclass
class StudyStatistics:
    total_minutes: int
    total_sessions: int
    average_session_length: int
    most_active_day: Optional[int]  # 0 = Sunday ... 6 = Saturday


def _in_range(session: StudySession, start: Optional[int], end: Optional[int]) -> bool:
    if start is not None and session.start_time < start:
        return False
    if end is not None and session.start_time > end:
        return False
    return True


class TimeTracker:
    """Owns at most one active session at a time."""

    def __init__(self, repo: Repository):
        self.repo = repo
        self.active_session: Optional[StudySession] = None

    def start_session(self, subject_id: str, topic: str = "", now: Optional[int] = None) -> StudySession:
        now = now_ms() if now is None else now
        if self.active_session is not None:
            self.end_session(self.active_session.id, now=now)

        session = StudySession(
            id=new_id(),
            subject_id=subject_id,
            topic=topic,
            start_time=now,
            end_time=None,
            duration_minutes=0,
        )
        self.active_session = session
        self.repo.add_study_session(session)
        return session

    def end_session(self, session_id: Optional[str] = None, now: Optional[int] = None) -> Optional[StudySession]:
        """Finish the given (or active) session. Returns None if nothing was running."""
        session = None
        if session_id is not None:
            session = self.repo.get("study_sessions", session_id)
        if session is None:
            session = self.active_session
        if session is None or session.end_time is not None:
            return None

        now = now_ms() if now is None else now
        updated = replace(
            session,
            end_time=now,
            duration_minutes=(now - session.start_time) // MINUTE_MS,
        )
        self.repo.update_study_session(updated)
        if self.active_session is not None and self.active_session.id == updated.id:
            self.active_session = None
        logger.debug("Session %s ended after %d min", updated.id, updated.duration_minutes)
        return updated

    def add_manual_session(
        self,
        subject_id: str,
        start_time: int,
        duration_minutes: int,
        topic: str = "",
        notes: str = "",
    ) -> StudySession:
        session = StudySession(
            id=new_id(),
            subject_id=subject_id,
            topic=topic,
            start_time=start_time,
            end_time=start_time + duration_minutes * MINUTE_MS,
            duration_minutes=duration_minutes,
            notes=notes,
        )
        self.repo.add_study_session(session)
        return session

    def get_total_study_time(
        self, subject_id: str, start_date: Optional[int] = None, end_date: Optional[int] = None
    ) -> int:
        return sum(
            s.duration_minutes for s in self.repo.get_study_sessions()
            if s.subject_id == subject_id and s.end_time is not None and _in_range(s, start_date, end_date)
        )

    def get_sessions(
        self,
        subject_id: Optional[str] = None,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
    ) -> list[StudySession]:
        sessions = [
            s for s in self.repo.get_study_sessions()
            if (subject_id is None or s.subject_id == subject_id) and _in_range(s, start_date, end_date)
        ]
        return sorted(sessions, key=lambda s: s.start_time, reverse=True)

    def get_statistics(self, subject_id: Optional[str] = None) -> StudyStatistics:
        sessions = [s for s in self.get_sessions(subject_id) if s.end_time is not None]
        total = sum(s.duration_minutes for s in sessions)
        average = total // len(sessions) if sessions else 0

        days = Counter(
            (datetime.fromtimestamp(s.start_time / 1000).weekday() + 1) % 7 for s in sessions
        )
        most_active = days.most_common(1)[0][0] if days else None
        return StudyStatistics(
            total_minutes=total,
            total_sessions=len(sessions),
            average_session_length=average,
            most_active_day=most_active,
        )
