"""Single local user profile: register, login, logout."""
import hashlib
import logging
from typing import Optional

from smart_study.db import Repository
from smart_study.exceptions import AuthError
from smart_study.models import UserProfile, UserSession, new_id, now_ms

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Skylar Johnson"
DEFAULT_EMAIL = "student@smartstudy.com"
DEFAULT_PASSWORD = "studysmart"
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hash_password(password) == password_hash


def initials(name: str) -> str:
    return "".join(part[0].upper() for part in name.split()[:2])


def ensure_default_profile(repo: Repository) -> UserProfile:
    """Create the demo profile on first run and make sure nobody is logged in."""
    profile = repo.get_profile()
    if profile is not None:
        return profile
    profile = UserProfile(
        id=new_id(),
        name=DEFAULT_NAME,
        email=DEFAULT_EMAIL,
        password_hash=hash_password(DEFAULT_PASSWORD),
        avatar_initials=initials(DEFAULT_NAME),
        study_goal_hours=20,
        streak_days=5,
    )
    repo.save_profile(profile)
    repo.clear_session()
    return profile


def is_logged_in(repo: Repository) -> bool:
    return repo.get_session().logged_in and repo.get_profile() is not None


def current_user(repo: Repository) -> Optional[UserProfile]:
    return repo.get_profile() if is_logged_in(repo) else None


def _start_session(repo: Repository, profile: UserProfile, now: int) -> None:
    repo.save_session(UserSession(user_id=profile.id, logged_in=True, last_login=now))


def login(repo: Repository, email: str, password: str, now: Optional[int] = None) -> UserProfile:
    profile = repo.get_profile()
    if profile is None:
        raise AuthError("No user profile found")
    if profile.email.lower() != email.strip().lower() or not verify_password(password, profile.password_hash):
        logger.warning("Failed login for %s", email.strip())
        raise AuthError("Invalid email or password")
    _start_session(repo, profile, now_ms() if now is None else now)
    return profile


def register(repo: Repository, name: str, email: str, password: str, now: Optional[int] = None) -> UserProfile:
    """Replace the local profile with a new one and log it in."""
    if not name.strip() or not email.strip() or len(password) < MIN_PASSWORD_LENGTH:
        raise AuthError("Please enter valid registration details")
    profile = UserProfile(
        id=new_id(),
        name=name.strip(),
        email=email.strip(),
        password_hash=hash_password(password),
        avatar_initials=initials(name),
        study_goal_hours=15,
        streak_days=0,
    )
    repo.save_profile(profile)
    _start_session(repo, profile, now_ms() if now is None else now)
    return profile


def logout(repo: Repository) -> None:
    repo.clear_session()
