# tests/test_performance.py
from smart_study.models import DAY_MS, Grade, Subject
from smart_study.performance import (
    PerformanceTrend, compare_with_historical, get_all_subject_performance, get_average_grade,
    get_grade_trends, get_performance_trend,
)


def add_grades(repo, subject_id, percentages, start=0):
    for i, pct in enumerate(percentages):
        repo.add_grade(Grade(id=f"{subject_id}-{i}", subject_id=subject_id, type=f"Test {i}", score=pct, date=start + i * DAY_MS))


def test_trend_stable_with_no_grades(repo):
    assert get_performance_trend(repo, "s1") == PerformanceTrend.STABLE


def test_trend_stable_with_one_grade(repo):
    add_grades(repo, "s1", [40])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.STABLE


def test_trend_declining(repo):
    add_grades(repo, "s1", [90, 90, 70, 70, 70])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.DECLINING


def test_trend_improving(repo):
    add_grades(repo, "s1", [60, 60, 80, 80, 80])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.IMPROVING


def test_trend_within_five_points_is_stable(repo):
    add_grades(repo, "s1", [80, 84, 86])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.STABLE


def test_trend_windows_overlap_with_two_grades(repo):
    # last 3 and first 2 are the same two grades
    add_grades(repo, "s1", [90, 70])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.STABLE


def test_trend_only_looks_at_last_five(repo):
    add_grades(repo, "s1", [10, 90, 90, 70, 70, 70])
    assert get_performance_trend(repo, "s1") == PerformanceTrend.DECLINING


def test_grade_trends_sorted_by_date_and_normalized(repo, now):
    repo.add_grade(Grade(id="late", subject_id="s1", type="B", score=30, max_score=40, date=now))
    repo.add_grade(Grade(id="early", subject_id="s1", type="A", score=45, max_score=50, date=now - DAY_MS))
    trends = get_grade_trends(repo, "s1")
    assert [p.type for p in trends] == ["A", "B"]
    assert [p.score for p in trends] == [90.0, 75.0]


def test_grade_trends_limit_keeps_most_recent(repo):
    add_grades(repo, "s1", [10, 20, 30, 40])
    assert [p.score for p in get_grade_trends(repo, "s1", 2)] == [30, 40]


def test_average_grade(repo, now):
    assert get_average_grade(repo, "s1") is None
    repo.add_grade(Grade(id="g1", subject_id="s1", type="A", score=8, max_score=10, date=now))
    repo.add_grade(Grade(id="g2", subject_id="s1", type="B", score=60, date=now))
    assert get_average_grade(repo, "s1") == 70.0


def test_compare_with_historical(repo, now):
    repo.add_grade(Grade(id="old", subject_id="s1", type="A", score=60, date=now - 60 * DAY_MS))
    repo.add_grade(Grade(id="new", subject_id="s1", type="B", score=80, date=now - DAY_MS))
    comparison = compare_with_historical(repo, "s1", now=now)
    assert comparison.current_average == 80
    assert comparison.previous_average == 60
    assert comparison.change == 20


def test_compare_with_historical_needs_both_periods(repo, now):
    add_grades(repo, "s1", [60, 70], start=now - 2 * DAY_MS)
    assert compare_with_historical(repo, "s1", now=now) is None


def test_all_subject_performance(repo):
    repo.add_subject(Subject(id="s1", name="Math"))
    repo.add_subject(Subject(id="s2", name="Art"))
    add_grades(repo, "s1", [90, 90, 70, 70, 70])
    result = {p.subject_id: p for p in get_all_subject_performance(repo)}
    assert result["s1"].status == PerformanceTrend.DECLINING
    assert result["s1"].average_grade == 78.0
    assert result["s2"].average_grade is None
    assert result["s2"].status == PerformanceTrend.STABLE
