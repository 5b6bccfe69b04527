# tests/test_tracking.py
from smart_study.models import DAY_MS, MINUTE_MS
from smart_study.tracking import TimeTracker


def test_start_and_end_session(repo, now):
    tracker = TimeTracker(repo)
    session = tracker.start_session("s1", topic="Limits", now=now)
    assert tracker.active_session == session
    assert repo.get("study_sessions", session.id).is_active

    ended = tracker.end_session(now=now + 25 * MINUTE_MS + 59_000)
    assert ended.duration_minutes == 25
    assert ended.end_time == now + 25 * MINUTE_MS + 59_000
    assert tracker.active_session is None
    assert repo.get("study_sessions", session.id).duration_minutes == 25


def test_starting_new_session_ends_previous(repo, now):
    tracker = TimeTracker(repo)
    first = tracker.start_session("s1", now=now)
    second = tracker.start_session("s2", now=now + 30 * MINUTE_MS)
    assert repo.get("study_sessions", first.id).duration_minutes == 30
    assert tracker.active_session.id == second.id
    assert len([s for s in repo.get_study_sessions() if s.is_active]) == 1


def test_end_without_active_session(repo, now):
    assert TimeTracker(repo).end_session(now=now) is None


def test_end_finished_session_is_noop(repo, now):
    tracker = TimeTracker(repo)
    session = tracker.add_manual_session("s1", now, 40)
    assert tracker.end_session(session.id, now=now + DAY_MS) is None
    assert repo.get("study_sessions", session.id).duration_minutes == 40


def test_manual_session(repo, now):
    session = TimeTracker(repo).add_manual_session("s1", now, 45, topic="Eigenvalues", notes="library")
    assert session.end_time == now + 45 * MINUTE_MS
    assert repo.get("study_sessions", session.id).notes == "library"


def test_total_study_time_respects_range(repo, now):
    tracker = TimeTracker(repo)
    tracker.add_manual_session("s1", now - 10 * DAY_MS, 30)
    tracker.add_manual_session("s1", now, 45)
    tracker.add_manual_session("s2", now, 60)
    tracker.start_session("s1", now=now + MINUTE_MS)
    assert tracker.get_total_study_time("s1") == 75
    assert tracker.get_total_study_time("s1", start_date=now - DAY_MS) == 45
    assert tracker.get_total_study_time("s1", end_date=now - DAY_MS) == 30


def test_sessions_newest_first(repo, now):
    tracker = TimeTracker(repo)
    tracker.add_manual_session("s1", now - DAY_MS, 30)
    tracker.add_manual_session("s1", now, 30)
    tracker.add_manual_session("s2", now - 2 * DAY_MS, 30)
    assert [s.start_time for s in tracker.get_sessions()] == [now, now - DAY_MS, now - 2 * DAY_MS]
    assert len(tracker.get_sessions("s1")) == 2


def test_statistics(repo, now):
    tracker = TimeTracker(repo)
    tracker.add_manual_session("s1", now, 30)
    tracker.add_manual_session("s1", now + MINUTE_MS * 60, 45)
    tracker.add_manual_session("s1", now - DAY_MS, 20)
    tracker.start_session("s1", now=now + DAY_MS)
    stats = tracker.get_statistics("s1")
    assert stats.total_minutes == 95
    assert stats.total_sessions == 3
    assert stats.average_session_length == 31
    # now is a Wednesday, Sunday-based index 3
    assert stats.most_active_day == 3


def test_statistics_empty(repo):
    stats = TimeTracker(repo).get_statistics()
    assert stats.total_sessions == 0
    assert stats.average_session_length == 0
    assert stats.most_active_day is None
