"""Data classes for the study tracker domain model."""
import time
import uuid
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

DAY_MS = 24 * 60 * 60 * 1000
MINUTE_MS = 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class Record:
    """Mixin giving dataclasses a camelCase JSON shape.

    Unknown keys are ignored on load so older builds can read newer files.
    """

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.name
            data[_camel(f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict):
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        return cls(**kwargs)


@dataclass(frozen=True)
class Subject(Record):
    id: str
    name: str
    color: str = "#3498db"
    target_hours_per_week: float = 10.0
    description: str = ""


@dataclass(frozen=True)
class Topic(Record):
    id: str
    subject_id: str
    name: str
    last_reviewed: Optional[int] = None
    review_count: int = 0
    difficulty: int = 2
    manual_priority: Optional[float] = None
    notes: str = ""


@dataclass(frozen=True)
class StudySession(Record):
    id: str
    subject_id: str
    start_time: int
    topic: str = ""
    end_time: Optional[int] = None  # None while in progress
    duration_minutes: int = 0
    notes: str = ""

    @property
    def is_active(self) -> bool:
        return self.end_time is None


def parse_time(value: str) -> int:
    """Minutes after midnight for an "HH:mm" string."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


@dataclass(frozen=True)
class ScheduleItem(Record):
    id: str
    subject_id: str
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    start_time: str  # "HH:mm"
    duration_minutes: int
    recurring: bool = True
    topic: str = ""
    enabled: bool = True

    @property
    def start_minutes(self) -> int:
        return parse_time(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    def conflicts_with(self, other: "ScheduleItem") -> bool:
        if self.day_of_week != other.day_of_week:
            return False
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes


@dataclass(frozen=True)
class Grade(Record):
    id: str
    subject_id: str
    type: str
    score: float
    date: int
    max_score: float = 100.0
    category: str = ""

    @property
    def percentage(self) -> float:
        return self.score / self.max_score * 100


class AlertType(Enum):
    GRADE_DROP = "GRADE_DROP"
    LOW_ATTENDANCE = "LOW_ATTENDANCE"
    MISSED_STUDY_GOAL = "MISSED_STUDY_GOAL"
    PERFORMANCE_DECLINE = "PERFORMANCE_DECLINE"
    GENERAL = "GENERAL"


@dataclass(frozen=True)
class PerformanceAlert(Record):
    id: str
    type: AlertType
    message: str
    date: int
    subject_id: Optional[str] = None
    resolved: bool = False
    severity: int = 1  # 1 = low, 2 = medium, 3 = high

    def __post_init__(self):
        if isinstance(self.type, str):
            object.__setattr__(self, "type", AlertType[self.type])


@dataclass(frozen=True)
class UserProfile(Record):
    id: str
    name: str
    email: str
    password_hash: str
    avatar_initials: str = ""
    institution: str = "Smart Study Academy"
    study_goal_hours: int = 15
    streak_days: int = 0
    last_login: Optional[int] = None


@dataclass(frozen=True)
class UserSession(Record):
    user_id: Optional[str] = None
    logged_in: bool = False
    last_login: Optional[int] = None
