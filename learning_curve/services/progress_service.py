"""Server-side progress: enrollments, module completions and snapshot sync.

The server is the system of record for a registered learner.  A client
that tracked progress anonymously uploads its local snapshot once, on
registration, through sync_local_snapshot(); after that the server's
records win on every conflict and the client merges the server snapshot
back (client/tracker.py, merge_server_snapshot).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from learning_curve.models.progress import ModuleCompletion, PathEnrollment
from learning_curve.repos.catalog_repo import CatalogRepo
from learning_curve.repos.progress_repo import ProgressRepo
from learning_curve.repos.user_repo import UserRepo
from learning_curve.services.users_service import EXPERIENCE_LEVELS

logger = logging.getLogger(__name__)

STATUSES = ("not_started", "in_progress", "completed")


class ProgressValidationError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class LocalModule:
    module_id: int
    score: float | None = None
    completed_at: int | None = None


@dataclass(frozen=True, slots=True)
class LocalEnrollment:
    path_id: int
    enrolled_at: int | None = None


@dataclass(frozen=True, slots=True)
class LocalSnapshot:
    """What a client uploads: its completed modules and enrollments."""

    completed_modules: tuple[LocalModule, ...] = ()
    enrolled_paths: tuple[LocalEnrollment, ...] = ()
    experience_level: str | None = None
    learning_goals: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    onboarding_completed: bool = False


@dataclass(slots=True)
class SyncResult:
    modules_imported: int = 0
    enrollments_imported: int = 0
    skipped: list[str] = field(default_factory=list)


async def enroll(
    progress: ProgressRepo, user_id: int, path_id: int
) -> tuple[PathEnrollment, bool]:
    enrollment, created = await progress.enroll(user_id, path_id, int(time.time()))
    if created:
        logger.info("Enrolled user_id=%d path_id=%d", user_id, path_id)
    return enrollment, created


async def record_module(
    progress: ProgressRepo,
    user_id: int,
    module_id: int,
    *,
    status: str,
    score: float | None = None,
) -> ModuleCompletion:
    """Upsert the user's record for one module.  Replaces, never merges."""
    if status not in STATUSES:
        raise ProgressValidationError(
            "status must be not_started|in_progress|completed"
        )
    if score is not None and not 0 <= score <= 100:
        raise ProgressValidationError("score must be between 0 and 100")

    completion = ModuleCompletion(
        user_id=user_id,
        module_id=module_id,
        status=status,
        score=score,
        completed_at=int(time.time()) if status == "completed" else None,
    )
    await progress.upsert_completion(completion)
    logger.info(
        "Module progress user_id=%d module_id=%d status=%s", user_id, module_id, status
    )
    return completion


async def sync_local_snapshot(
    catalog: CatalogRepo,
    progress: ProgressRepo,
    users: UserRepo,
    user_id: int,
    snapshot: LocalSnapshot,
) -> SyncResult:
    """Import a client's anonymous progress.

    Server records win: a module the server already has as completed is
    left alone, and existing enrollments keep their original date.  Ids
    the catalog does not know are skipped.
    """
    result = SyncResult()
    now = int(time.time())

    for local in snapshot.completed_modules:
        if await catalog.get_module(local.module_id) is None:
            result.skipped.append(f"module:{local.module_id}")
            continue
        existing = await progress.get_completion(user_id, local.module_id)
        if existing is not None and existing.is_completed:
            continue
        if local.score is not None and not 0 <= local.score <= 100:
            result.skipped.append(f"module:{local.module_id}")
            continue
        await progress.upsert_completion(
            ModuleCompletion(
                user_id=user_id,
                module_id=local.module_id,
                status="completed",
                score=local.score,
                completed_at=local.completed_at or now,
            )
        )
        result.modules_imported += 1

    for local in snapshot.enrolled_paths:
        if await catalog.get_path(local.path_id) is None:
            result.skipped.append(f"path:{local.path_id}")
            continue
        _, created = await progress.enroll(user_id, local.path_id, local.enrolled_at or now)
        if created:
            result.enrollments_imported += 1

    if snapshot.onboarding_completed:
        user = await users.get_by_id(user_id)
        if user is not None and not user.onboarding_completed:
            await users.update_onboarding(
                user_id,
                experience_level=(
                    snapshot.experience_level
                    if snapshot.experience_level in EXPERIENCE_LEVELS
                    else None
                ),
                learning_goals=snapshot.learning_goals,
                interests=snapshot.interests,
            )

    if result.skipped:
        logger.warning(
            "Sync skipped unknown or invalid ids user_id=%d skipped=%s",
            user_id,
            ",".join(result.skipped),
        )
    logger.info(
        "Synced local progress user_id=%d modules=%d enrollments=%d",
        user_id,
        result.modules_imported,
        result.enrollments_imported,
    )
    return result
