"""Topic review prioritization: urgency scoring, mark-reviewed and skip."""
import logging
import sys
from dataclasses import dataclass, replace
from typing import Optional

from smart_study.db import Repository
from smart_study.models import DAY_MS, Topic, now_ms

logger = logging.getLogger(__name__)

NEVER_REVIEWED = sys.maxsize
SKIP_DAYS = 7
NEVER_REVIEWED_BONUS = 50.0


@dataclass
class TopicSuggestion:
    topic: Topic
    priority_score: float
    days_since_review: int  # NEVER_REVIEWED when the topic has no review yet


def days_since_review(topic: Topic, now: int) -> Optional[int]:
    """Whole days since the last review, or None for a skipped (future) topic."""
    if topic.last_reviewed is None:
        return NEVER_REVIEWED
    if topic.last_reviewed > now:
        return None
    return (now - topic.last_reviewed) // DAY_MS


def calculate_review_score(topic: Topic, days: int) -> float:
    """Higher score means the topic is more urgent.

    A manual priority (0-10) overrides everything and is scaled to the
    0-100 range the computed score usually falls in.
    """
    if topic.manual_priority is not None:
        return topic.manual_priority * 10.0

    score = min(days, 30) * 2.0
    score += (10 - min(topic.review_count, 10)) * 1.5
    score += topic.difficulty * 1.0
    if topic.last_reviewed is None:
        score += NEVER_REVIEWED_BONUS
    return score


def suggest_topics(
    repo: Repository,
    subject_id: Optional[str] = None,
    limit: int = 10,
    now: Optional[int] = None,
) -> list[TopicSuggestion]:
    now = now_ms() if now is None else now
    topics = repo.get_topics()
    if subject_id is not None:
        topics = [t for t in topics if t.subject_id == subject_id]

    suggestions = []
    for topic in topics:
        days = days_since_review(topic, now)
        if days is None:
            continue
        suggestions.append(TopicSuggestion(topic, calculate_review_score(topic, days), days))

    # sorted() is stable, so equal scores keep insertion order
    suggestions = sorted(suggestions, key=lambda s: s.priority_score, reverse=True)
    return suggestions[:limit]


def mark_reviewed(repo: Repository, topic_id: str, now: Optional[int] = None) -> bool:
    """Stamp the topic as reviewed now. Returns False if the topic does not exist."""
    topic = repo.get("topics", topic_id)
    if topic is None:
        logger.warning("Topic with id %s not found", topic_id)
        return False
    now = now_ms() if now is None else now
    repo.update_topic(replace(topic, last_reviewed=now, review_count=topic.review_count + 1))
    return True


def skip_topic(repo: Repository, topic_id: str, now: Optional[int] = None) -> bool:
    """Hide a topic from suggestions for a week by pushing last_reviewed forward."""
    topic = repo.get("topics", topic_id)
    if topic is None:
        logger.warning("Topic with id %s not found", topic_id)
        return False
    now = now_ms() if now is None else now
    repo.update_topic(replace(topic, last_reviewed=now + SKIP_DAYS * DAY_MS))
    return True


def get_topics_by_difficulty(
    repo: Repository, difficulty: int, subject_id: Optional[str] = None
) -> list[Topic]:
    topics = repo.get_topics()
    if subject_id is not None:
        topics = [t for t in topics if t.subject_id == subject_id]
    return [t for t in topics if t.difficulty == difficulty]
