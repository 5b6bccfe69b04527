"""Input checks applied at the shell boundary before records are built."""
from smart_study.exceptions import ValidationError


def validate_grade_input(score, max_score=100.0) -> tuple[float, float]:
    """Coerce and check a score pair entered by the user."""
    try:
        score = float(score)
        max_score = float(max_score)
    except (TypeError, ValueError):
        raise ValidationError("Score and max score must be numbers")
    if max_score <= 0:
        raise ValidationError("Max score must be greater than zero")
    if score < 0:
        raise ValidationError("Score cannot be negative")
    if score > max_score:
        raise ValidationError(f"Score {score:g} is greater than max score {max_score:g}")
    return score, max_score


def validate_difficulty(value) -> int:
    try:
        difficulty = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Difficulty must be a whole number")
    if not 1 <= difficulty <= 10:
        raise ValidationError("Difficulty must be between 1 and 10")
    return difficulty


def validate_priority(value) -> float | None:
    """Blank input clears the manual priority."""
    if value is None or str(value).strip() == "":
        return None
    try:
        priority = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Priority must be a number")
    if not 0 <= priority <= 10:
        raise ValidationError("Priority must be between 0 and 10")
    return priority


def validate_time(value: str) -> str:
    """Normalize an "H:mm" or "HH:mm" string to zero-padded "HH:mm"."""
    try:
        hours, minutes = (int(part) for part in value.strip().split(":"))
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time {value!r}, expected HH:mm")
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValidationError(f"Invalid time {value!r}, expected HH:mm")
    return f"{hours:02d}:{minutes:02d}"


DEFAULT_COLOR = "#3498db"


def normalize_color(value: str) -> str:
    """Return a "#rrggbb" color, falling back to the default blue for bad input.

    An 8-digit value is read as "#aarrggbb" and its alpha is dropped.
    """
    digits = (value or "").strip().lstrip("#")
    if len(digits) == 8:
        digits = digits[2:]
    if len(digits) != 6:
        return DEFAULT_COLOR
    try:
        int(digits, 16)
    except ValueError:
        return DEFAULT_COLOR
    return "#" + digits.lower()
