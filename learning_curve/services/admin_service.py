"""Account administration: listing, editing and removing users, plus
per-user activity and headline counts.  Callers must already have
checked that the acting user is an admin."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass

from learning_curve.models.achievement import Achievement, EarnedAchievement
from learning_curve.models.progress import ModuleCompletion, PathEnrollment, QuizAttempt
from learning_curve.models.user import User
from learning_curve.repos.achievement_repo import AchievementRepo
from learning_curve.repos.progress_repo import ProgressRepo
from learning_curve.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")
MAX_PAGE_SIZE = 100
RECENT_DAYS = 30


class AdminValidationError(ValueError):
    pass


class EmailInUseError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class UserPage:
    users: list[User]
    total: int
    page: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class UserActivity:
    completions: list[ModuleCompletion]
    enrollments: list[PathEnrollment]
    achievements: list[tuple[EarnedAchievement, Achievement]]
    quiz_attempts: list[QuizAttempt]


@dataclass(frozen=True, slots=True)
class AdminStats:
    total_users: int
    admin_users: int
    recent_users: int


async def list_users(
    repo: UserRepo, *, search: str | None, page: int, limit: int
) -> UserPage:
    if page < 1:
        raise AdminValidationError("page must be >= 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise AdminValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    search = search.strip() if search else None

    users = await repo.list_users(search=search, limit=limit, offset=(page - 1) * limit)
    total = await repo.count_users(search=search)
    return UserPage(
        users=users, total=total, page=page, total_pages=math.ceil(total / limit)
    )


async def update_user(
    repo: UserRepo,
    user_id: int,
    *,
    name: str | None,
    email: str | None,
    role: str | None,
) -> User | None:
    """Apply the given changes.  None when the user does not exist.

    A role change reaches the user's token the next time one is issued;
    admin checks read the stored role and see it at once.
    """
    if name is not None:
        name = name.strip()
        if not name:
            raise AdminValidationError("name must not be empty")
    if email is not None:
        email = email.strip().lower()
        if "@" not in email:
            raise AdminValidationError("Please enter a valid email address")
    if role is not None and role not in ROLES:
        raise AdminValidationError("role must be user|admin")

    try:
        user = await repo.update_account(user_id, name=name, email=email, role=role)
    except ValueError:
        raise EmailInUseError("Email is already in use") from None
    if user is not None:
        logger.info("Admin updated user id=%d role=%s", user.id, user.role)
    return user


async def delete_user(repo: UserRepo, user_id: int) -> bool:
    deleted = await repo.delete(user_id)
    if deleted:
        logger.info("Admin deleted user id=%d", user_id)
    return deleted


async def user_activity(
    progress: ProgressRepo, achievements: AchievementRepo, user_id: int
) -> UserActivity:
    return UserActivity(
        completions=await progress.list_completions(user_id),
        enrollments=await progress.list_enrollments(user_id),
        achievements=await achievements.list_earned(user_id),
        quiz_attempts=await progress.list_quiz_attempts(user_id),
    )


async def stats(repo: UserRepo, *, now: int | None = None) -> AdminStats:
    now = int(time.time()) if now is None else now
    return AdminStats(
        total_users=await repo.count_users(),
        admin_users=await repo.count_users(role="admin"),
        recent_users=await repo.count_users(created_since=now - RECENT_DAYS * 86400),
    )
