from __future__ import annotations

import json
import logging
import time

from learning_curve.core.metrics import REGISTRATIONS
from learning_curve.models.user import User
from learning_curve.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

EXPERIENCE_LEVELS = ("beginner", "intermediate", "advanced")


class UserValidationError(ValueError):
    pass


async def register(
    repo: UserRepo,
    *,
    name: str,
    email: str,
    admin_emails: frozenset[str] = frozenset(),
) -> tuple[User, bool]:
    """Find-or-create a user by email.

    Returns (user, created).  A known email returns the stored user
    unchanged; the submitted name is ignored in that case.  New accounts
    whose email is in ``admin_emails`` are created as admins.
    """
    name = name.strip()
    email = email.strip().lower()
    if not name or not email:
        logger.warning("Rejected registration with blank field")
        raise UserValidationError("Name and email are required")
    if "@" not in email:
        logger.warning("Rejected registration with invalid email=%s", email)
        raise UserValidationError("Please enter a valid email address")

    existing = await repo.get_by_email(email)
    if existing is not None:
        REGISTRATIONS.labels(outcome="existing").inc()
        logger.info("Registration matched existing user id=%d", existing.id)
        return existing, False

    try:
        user = await repo.add(
            email=email,
            name=name,
            created_at=int(time.time()),
            role="admin" if email in admin_emails else "user",
        )
    except ValueError:
        # Lost a race with a concurrent registration for the same email.
        user = await repo.get_by_email(email)
        if user is None:
            raise
        REGISTRATIONS.labels(outcome="existing").inc()
        return user, False

    REGISTRATIONS.labels(outcome="created").inc()
    logger.info("Created user id=%d email=%s role=%s", user.id, user.email, user.role)
    return user, True


def _parse_tags(field: str, raw: str | list[str] | None) -> tuple[str, ...]:
    """Accept a JSON-encoded list (as the web client sends it) or a list."""
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise UserValidationError(f"{field} must be a JSON list of strings") from None
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise UserValidationError(f"{field} must be a JSON list of strings")
    return tuple(v.strip() for v in raw if v.strip())


async def update_onboarding(
    repo: UserRepo,
    user_id: int,
    *,
    experience_level: str | None,
    learning_goals: str | list[str] | None,
    interests: str | list[str] | None,
) -> User | None:
    """Store onboarding answers and mark onboarding complete.

    Returns None when the user does not exist.
    """
    level = experience_level.strip().lower() if experience_level else None
    if level is not None and level not in EXPERIENCE_LEVELS:
        raise UserValidationError(
            "experienceLevel must be beginner|intermediate|advanced"
        )
    goals = _parse_tags("learningGoals", learning_goals)
    tags = _parse_tags("interests", interests)

    user = await repo.update_onboarding(
        user_id, experience_level=level, learning_goals=goals, interests=tags
    )
    if user is not None:
        logger.info("Onboarding completed user_id=%d level=%s", user_id, level)
    return user
