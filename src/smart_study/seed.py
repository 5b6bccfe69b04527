"""Seed an empty repository with demo subjects, topics and grades."""
from smart_study.db import Repository
from smart_study.models import DAY_MS, Grade, Subject, Topic, new_id, now_ms

DEMO_SUBJECTS = [
    # name, color, target hours/week, description
    ("Mathematics", "#e74c3c", 6.0, "Calculus and linear algebra"),
    ("Physics", "#3498db", 4.0, "Mechanics and electromagnetism"),
    ("Literature", "#9b59b6", 2.0, "Essay writing and close reading"),
]

DEMO_TOPICS = {
    "Mathematics": [("Integration by parts", 8), ("Eigenvalues", 9), ("Limits", 5)],
    "Physics": [("Newton's laws", 4), ("Maxwell's equations", 8)],
    "Literature": [("Poetry analysis", 3), ("Essay structure", 2)],
}

# Percentages, oldest first
DEMO_GRADES = {
    "Mathematics": [("Quiz 1", "Quiz", 88.0), ("Quiz 2", "Quiz", 82.0), ("Midterm", "Exam", 71.0)],
    "Physics": [("Lab report", "Homework", 75.0), ("Quiz 1", "Quiz", 81.0)],
    "Literature": [("Essay 1", "Homework", 90.0)],
}


def is_seeded(repo: Repository) -> bool:
    """Check whether the repository already holds any subjects."""
    return len(repo.get_subjects()) > 0


def seed_subjects(repo: Repository) -> dict[str, str]:
    ids = {}
    for name, color, hours, description in DEMO_SUBJECTS:
        subject = Subject(id=new_id(), name=name, color=color, target_hours_per_week=hours, description=description)
        repo.add_subject(subject)
        ids[name] = subject.id
    return ids


def seed_topics(repo: Repository, subject_ids: dict[str, str]) -> None:
    for subject_name, topics in DEMO_TOPICS.items():
        for name, difficulty in topics:
            repo.add_topic(Topic(id=new_id(), subject_id=subject_ids[subject_name], name=name, difficulty=difficulty))


def seed_grades(repo: Repository, subject_ids: dict[str, str], now: int) -> None:
    for subject_name, grades in DEMO_GRADES.items():
        for weeks_ago, (label, category, score) in zip(range(len(grades), 0, -1), grades):
            repo.add_grade(Grade(
                id=new_id(),
                subject_id=subject_ids[subject_name],
                type=label,
                score=score,
                max_score=100.0,
                date=now - weeks_ago * 7 * DAY_MS,
                category=category,
            ))


def seed_all(repo: Repository, now: int | None = None) -> None:
    """Run all seed functions in order."""
    if is_seeded(repo):
        return
    now = now_ms() if now is None else now
    subject_ids = seed_subjects(repo)
    seed_topics(repo, subject_ids)
    seed_grades(repo, subject_ids, now)
