# tests/test_review.py
from smart_study.models import DAY_MS, Topic
from smart_study.review import (
    NEVER_REVIEWED, calculate_review_score, get_topics_by_difficulty, mark_reviewed,
    skip_topic, suggest_topics,
)


def add_topic(repo, topic_id, **kwargs):
    kwargs.setdefault("subject_id", "s1")
    topic = Topic(id=topic_id, name=topic_id, **kwargs)
    repo.add_topic(topic)
    return topic


def test_never_reviewed_hard_topic_score():
    topic = Topic(id="t", subject_id="s", name="t", difficulty=10, review_count=0)
    # 30*2 + 10*1.5 + 10*1 + 50
    assert calculate_review_score(topic, NEVER_REVIEWED) == 135.0


def test_manual_priority_overrides_score(repo, now):
    add_topic(repo, "manual", manual_priority=7.5, difficulty=10, review_count=0)
    add_topic(repo, "manual_reviewed", manual_priority=2.0, last_reviewed=now - 90 * DAY_MS)
    scores = {s.topic.id: s.priority_score for s in suggest_topics(repo, now=now)}
    assert scores["manual"] == 75.0
    assert scores["manual_reviewed"] == 20.0


def test_score_from_days_reviews_and_difficulty(repo, now):
    add_topic(repo, "t1", last_reviewed=now - 3 * DAY_MS - 1000, review_count=1, difficulty=2)
    [suggestion] = suggest_topics(repo, now=now)
    assert suggestion.days_since_review == 3
    assert suggestion.priority_score == 3 * 2.0 + 9 * 1.5 + 2


def test_days_and_review_count_are_capped(repo, now):
    add_topic(repo, "old", last_reviewed=now - 100 * DAY_MS, review_count=25, difficulty=1)
    [suggestion] = suggest_topics(repo, now=now)
    assert suggestion.days_since_review == 100
    assert suggestion.priority_score == 30 * 2.0 + 0 + 1


def test_future_last_reviewed_is_excluded(repo, now):
    add_topic(repo, "skipped", last_reviewed=now + 1)
    add_topic(repo, "due", last_reviewed=now - DAY_MS)
    assert [s.topic.id for s in suggest_topics(repo, now=now)] == ["due"]


def test_sorted_descending_with_stable_ties(repo, now):
    add_topic(repo, "a", last_reviewed=now, review_count=10, difficulty=1)
    add_topic(repo, "b", difficulty=5)
    add_topic(repo, "c", last_reviewed=now, review_count=10, difficulty=1)
    add_topic(repo, "d", difficulty=5)
    ids = [s.topic.id for s in suggest_topics(repo, now=now)]
    assert ids == ["b", "d", "a", "c"]


def test_limit_and_subject_filter(repo, now):
    for i in range(5):
        add_topic(repo, f"m{i}", subject_id="math")
    add_topic(repo, "art", subject_id="art")
    assert len(suggest_topics(repo, limit=3, now=now)) == 3
    assert [s.topic.id for s in suggest_topics(repo, subject_id="art", now=now)] == ["art"]


def test_mark_reviewed_bumps_count_and_resets_days(repo, now):
    add_topic(repo, "t1", last_reviewed=now - 10 * DAY_MS, review_count=2)
    assert mark_reviewed(repo, "t1", now=now)
    topic = repo.get("topics", "t1")
    assert topic.review_count == 3
    assert topic.last_reviewed == now
    [suggestion] = suggest_topics(repo, now=now)
    assert suggestion.days_since_review == 0


def test_mark_reviewed_unknown_topic_returns_false(repo, caplog, now):
    assert mark_reviewed(repo, "missing", now=now) is False
    assert "missing not found" in caplog.text


def test_skip_hides_topic_and_keeps_count(repo, now):
    add_topic(repo, "t1", review_count=4)
    assert skip_topic(repo, "t1", now=now)
    assert suggest_topics(repo, now=now) == []
    topic = repo.get("topics", "t1")
    assert topic.review_count == 4
    assert topic.last_reviewed == now + 7 * DAY_MS


def test_skipped_topic_returns_after_a_week(repo, now):
    add_topic(repo, "t1")
    skip_topic(repo, "t1", now=now)
    assert suggest_topics(repo, now=now + 7 * DAY_MS - 1) == []
    [suggestion] = suggest_topics(repo, now=now + 7 * DAY_MS)
    assert suggestion.days_since_review == 0


def test_skip_unknown_topic_returns_false(repo, now):
    assert skip_topic(repo, "missing", now=now) is False


def test_get_topics_by_difficulty(repo):
    add_topic(repo, "easy", difficulty=1)
    add_topic(repo, "hard", difficulty=9)
    add_topic(repo, "hard_art", subject_id="art", difficulty=9)
    assert [t.id for t in get_topics_by_difficulty(repo, 9)] == ["hard", "hard_art"]
    assert [t.id for t in get_topics_by_difficulty(repo, 9, subject_id="art")] == ["hard_art"]
