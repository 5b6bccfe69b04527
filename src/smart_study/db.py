"""JSON-file repository with an in-memory cache."""
import json
import logging
from pathlib import Path
from typing import Optional

from smart_study.config import DEFAULT_DATA_DIR
from smart_study.exceptions import StorageError
from smart_study.models import (
    Grade, PerformanceAlert, ScheduleItem, StudySession, Subject, Topic,
    UserProfile, UserSession,
)

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "subjects": ("subjects.json", Subject),
    "study_sessions": ("study_sessions.json", StudySession),
    "grades": ("grades.json", Grade),
    "schedule_items": ("schedule_items.json", ScheduleItem),
    "topics": ("topics.json", Topic),
    "alerts": ("alerts.json", PerformanceAlert),
}

PROFILE_FILE = "user_profile.json"
SESSION_FILE = "user_session.json"


class Repository:
    """Single source of truth for all records, flushed to disk on every change.

    Reads return copies of the cached lists. Write failures are logged and the
    in-memory state stays authoritative for the rest of the process.
    """

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR):
        self.data_dir = Path(data_dir)
        self._data: dict[str, list] = {name: [] for name in COLLECTIONS}
        self._profile: Optional[UserProfile] = None
        self._session = UserSession()

    # -- lifecycle ---------------------------------------------------------

    def load(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name, (filename, record_cls) in COLLECTIONS.items():
            rows = self._read(self.data_dir / filename)
            if not isinstance(rows, list):
                rows = []
            items = []
            for row in rows:
                try:
                    items.append(record_cls.from_dict(row))
                except (TypeError, KeyError, ValueError, AttributeError):
                    logger.warning("Skipping malformed record in %s: %r", filename, row)
            self._data[name] = items
        self._profile = self._load_single(PROFILE_FILE, UserProfile)
        self._session = self._load_single(SESSION_FILE, UserSession) or UserSession()

    def _load_single(self, filename: str, record_cls):
        data = self._read(self.data_dir / filename)
        if not isinstance(data, dict):
            return None
        try:
            return record_cls.from_dict(data)
        except (TypeError, KeyError, ValueError, AttributeError):
            logger.warning("Ignoring malformed %s", filename)
            return None

    def save(self) -> None:
        for name in COLLECTIONS:
            self._flush(name)
        self._flush_single(PROFILE_FILE, self._profile)
        self._flush_single(SESSION_FILE, self._session)

    def _read(self, path: Path):
        if not path.exists() or path.stat().st_size == 0:
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading %s: %s", path.name, e)
            return None

    def _write(self, path: Path, payload) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write {path.name}: {e}") from e

    def _flush(self, name: str) -> None:
        filename = COLLECTIONS[name][0]
        try:
            self._write(self.data_dir / filename, [item.to_dict() for item in self._data[name]])
        except StorageError:
            logger.exception("Error saving %s", filename)

    def _flush_single(self, filename: str, record) -> None:
        path = self.data_dir / filename
        try:
            if record is None:
                if path.exists():
                    path.unlink()
            else:
                self._write(path, record.to_dict())
        except (OSError, StorageError):
            logger.exception("Error saving %s", filename)

    # -- generic collection access -------------------------------------------

    def list_all(self, name: str) -> list:
        return list(self._data[name])

    def get(self, name: str, item_id: str):
        return next((item for item in self._data[name] if item.id == item_id), None)

    def add(self, name: str, item) -> None:
        self._data[name].append(item)
        self._flush(name)

    def update(self, name: str, item) -> bool:
        """Replace the record with the same id. Returns False if there is none."""
        items = self._data[name]
        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                self._flush(name)
                return True
        logger.debug("update: no %s record with id %s", name, item.id)
        return False

    def delete(self, name: str, item_id: str) -> bool:
        items = self._data[name]
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            logger.debug("delete: no %s record with id %s", name, item_id)
            return False
        self._data[name] = remaining
        self._flush(name)
        return True

    # -- per-collection helpers ----------------------------------------------

    def get_subjects(self) -> list[Subject]:
        return self.list_all("subjects")

    def add_subject(self, subject: Subject) -> None:
        self.add("subjects", subject)

    def update_subject(self, subject: Subject) -> bool:
        return self.update("subjects", subject)

    def delete_subject(self, subject_id: str) -> bool:
        """Delete a subject together with its topics and schedule items."""
        if not self.delete("subjects", subject_id):
            return False
        for name in ("topics", "schedule_items"):
            items = self._data[name]
            kept = [item for item in items if item.subject_id != subject_id]
            if len(kept) != len(items):
                self._data[name] = kept
                self._flush(name)
        return True

    def get_topics(self) -> list[Topic]:
        return self.list_all("topics")

    def add_topic(self, topic: Topic) -> None:
        self.add("topics", topic)

    def update_topic(self, topic: Topic) -> bool:
        return self.update("topics", topic)

    def delete_topic(self, topic_id: str) -> bool:
        return self.delete("topics", topic_id)

    def get_study_sessions(self) -> list[StudySession]:
        return self.list_all("study_sessions")

    def add_study_session(self, session: StudySession) -> None:
        self.add("study_sessions", session)

    def update_study_session(self, session: StudySession) -> bool:
        return self.update("study_sessions", session)

    def delete_study_session(self, session_id: str) -> bool:
        return self.delete("study_sessions", session_id)

    def get_grades(self) -> list[Grade]:
        return self.list_all("grades")

    def add_grade(self, grade: Grade) -> None:
        self.add("grades", grade)

    def update_grade(self, grade: Grade) -> bool:
        return self.update("grades", grade)

    def delete_grade(self, grade_id: str) -> bool:
        return self.delete("grades", grade_id)

    def get_schedule_items(self) -> list[ScheduleItem]:
        return self.list_all("schedule_items")

    def add_schedule_item(self, item: ScheduleItem) -> None:
        self.add("schedule_items", item)

    def update_schedule_item(self, item: ScheduleItem) -> bool:
        return self.update("schedule_items", item)

    def delete_schedule_item(self, item_id: str) -> bool:
        return self.delete("schedule_items", item_id)

    def get_alerts(self) -> list[PerformanceAlert]:
        return self.list_all("alerts")

    def add_alert(self, alert: PerformanceAlert) -> None:
        self.add("alerts", alert)

    def update_alert(self, alert: PerformanceAlert) -> bool:
        return self.update("alerts", alert)

    def delete_alert(self, alert_id: str) -> bool:
        return self.delete("alerts", alert_id)

    # -- profile & session ---------------------------------------------------

    def get_profile(self) -> Optional[UserProfile]:
        return self._profile

    def save_profile(self, profile: UserProfile) -> None:
        self._profile = profile
        self._flush_single(PROFILE_FILE, profile)

    def get_session(self) -> UserSession:
        return self._session

    def save_session(self, session: UserSession) -> None:
        self._session = session
        self._flush_single(SESSION_FILE, session)

    def clear_session(self) -> None:
        self._session = UserSession()
        self._flush_single(SESSION_FILE, None)


def init_db(data_dir: str = DEFAULT_DATA_DIR) -> Repository:
    """Create the data directory if needed and return a loaded repository."""
    Path(data_dir).mkdir(parents=True, exist_ok=True)
    repo = Repository(data_dir)
    repo.load()
    return repo
