"""Adaptive weekly study schedule generation."""
import logging
import random
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from smart_study.db import Repository
from smart_study.models import ScheduleItem, StudySession, Subject, new_id

logger = logging.getLogger(__name__)

# 8am to 9pm with a lunch gap at 12
AVAILABLE_HOURS = [8, 9, 10, 11, 13, 14, 15, 16, 17, 18, 19, 20]
HARD_HOURS = [9, 10, 11, 14, 15, 8, 16, 17]
EASY_HOURS = [14, 15, 16, 17, 18, 19, 10, 11]

# Mon, Wed, Fri first, then Sun, Tue, Thu, Sat
DAY_ORDER = list(dict.fromkeys([1, 3, 5] + [0, 2, 4, 6]))
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

MAX_SESSIONS_PER_DAY = 2
MAX_SESSIONS_PER_SUBJECT = 4
DEFAULT_DIFFICULTY = 5.0
DAY_STEP = 2


@dataclass(frozen=True)
class TimeSlot:
    day: int
    hour: int
    minute: int = 0

    def to_time_string(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def overlaps(self, other: "TimeSlot", duration_minutes: int, other_duration_minutes: int) -> bool:
        if self.day != other.day:
            return False
        start = self.hour * 60 + self.minute
        end = start + duration_minutes
        other_start = other.hour * 60 + other.minute
        other_end = other_start + other_duration_minutes
        return start < other_end and other_start < end


def session_duration(difficulty: float) -> int:
    if difficulty >= 7:
        return 90
    if difficulty >= 4:
        return 60
    return 45


def sessions_per_week(subject: Subject, duration: int) -> int:
    target_minutes = int(subject.target_hours_per_week * 60)
    return max(1, min(target_minutes // duration, MAX_SESSIONS_PER_SUBJECT))


def _has_conflict(slot: TimeSlot, duration: int, used_slots: list[tuple[TimeSlot, int]]) -> bool:
    return any(slot.overlaps(used, duration, used_duration) for used, used_duration in used_slots)


def find_available_slot(
    day: int,
    duration_minutes: int,
    used_slots: list[tuple[TimeSlot, int]],
    difficulty: float,
    rng: Optional[random.Random] = None,
) -> Optional[TimeSlot]:
    """First free start hour on `day`, preferring focus hours for hard subjects.

    When every preferred hour collides, the remaining available hours are
    tried in an order shuffled by `rng`.
    """
    preferred = HARD_HOURS if difficulty >= 6 else EASY_HOURS
    for hour in preferred:
        if hour not in AVAILABLE_HOURS:
            continue
        slot = TimeSlot(day, hour)
        if not _has_conflict(slot, duration_minutes, used_slots):
            return slot

    rng = rng or random.Random()
    fallback = list(AVAILABLE_HOURS)
    rng.shuffle(fallback)
    for hour in fallback:
        slot = TimeSlot(day, hour)
        if not _has_conflict(slot, duration_minutes, used_slots):
            return slot
    return None


def generate_adaptive_schedule(repo: Repository, rng: Optional[random.Random] = None) -> list[ScheduleItem]:
    subjects = repo.get_subjects()
    topics = repo.get_topics()
    if not subjects:
        return []
    rng = rng or random.Random()

    topics_by_subject: dict[str, list] = {}
    for topic in topics:
        topics_by_subject.setdefault(topic.subject_id, []).append(topic)

    difficulty = {}
    for subject in subjects:
        subject_topics = topics_by_subject.get(subject.id, [])
        if subject_topics:
            difficulty[subject.id] = sum(t.difficulty for t in subject_topics) / len(subject_topics)
        else:
            difficulty[subject.id] = DEFAULT_DIFFICULTY

    # Harder subjects are queued first so they get the better slots
    ordered = sorted(subjects, key=lambda s: difficulty[s.id], reverse=True)
    work: list[tuple[Subject, int, int]] = []
    for subject in ordered:
        duration = session_duration(difficulty[subject.id])
        for index in range(sessions_per_week(subject, duration)):
            work.append((subject, duration, index))

    schedule: list[ScheduleItem] = []
    used_slots: list[tuple[TimeSlot, int]] = []
    per_day: Counter = Counter()
    day_index = 0

    for subject, duration, topic_index in work:
        avg = difficulty[subject.id]
        subject_topics = sorted(topics_by_subject.get(subject.id, []), key=lambda t: t.difficulty, reverse=True)
        placed = False
        for attempt in range(len(DAY_ORDER)):
            day = DAY_ORDER[(day_index + attempt) % len(DAY_ORDER)]
            if per_day[day] >= MAX_SESSIONS_PER_DAY:
                continue
            slot = find_available_slot(day, duration, used_slots, avg, rng)
            if slot is None:
                continue
            topic_name = subject_topics[topic_index % len(subject_topics)].name if subject_topics else ""
            schedule.append(ScheduleItem(
                id=new_id(),
                subject_id=subject.id,
                day_of_week=day,
                start_time=slot.to_time_string(),
                duration_minutes=duration,
                recurring=True,
                topic=topic_name,
                enabled=True,
            ))
            used_slots.append((slot, duration))
            per_day[day] += 1
            day_index = (day_index + DAY_STEP) % len(DAY_ORDER)
            placed = True
            break
        if not placed:
            logger.info("No free slot for a %d min %s session, dropped", duration, subject.name)

    return sorted(schedule, key=lambda item: (item.day_of_week, item.start_time))


def update_schedule_from_patterns(repo: Repository, rng: Optional[random.Random] = None) -> list[ScheduleItem]:
    """Replace the whole stored schedule with a freshly generated one.

    Items the user added or edited by hand are discarded.
    """
    new_schedule = generate_adaptive_schedule(repo, rng)
    for item in repo.get_schedule_items():
        repo.delete_schedule_item(item.id)
    for item in new_schedule:
        repo.add_schedule_item(item)
    logger.info("Schedule regenerated with %d sessions", len(new_schedule))
    return new_schedule


def get_schedule_for_day(repo: Repository, day_of_week: int) -> list[ScheduleItem]:
    items = [i for i in repo.get_schedule_items() if i.day_of_week == day_of_week and i.enabled]
    return sorted(items, key=lambda i: i.start_time)


def find_conflicts(items: list[ScheduleItem]) -> list[tuple[ScheduleItem, ScheduleItem]]:
    conflicts = []
    for i, first in enumerate(items):
        for second in items[i + 1:]:
            if first.conflicts_with(second):
                conflicts.append((first, second))
    return conflicts


def analyze_time_patterns(sessions: list[StudySession]) -> dict[str, list[int]]:
    """Up to three most common local start hours per subject for finished sessions."""
    hours: dict[str, Counter] = {}
    for session in sessions:
        if session.end_time is None:
            continue
        hour = datetime.fromtimestamp(session.start_time / 1000).hour
        hours.setdefault(session.subject_id, Counter())[hour] += 1
    return {
        subject_id: [hour for hour, _ in counts.most_common(3)]
        for subject_id, counts in hours.items()
    }
