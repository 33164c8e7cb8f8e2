"""Server-side progress endpoints.

The snapshot shape served by GET /v1/progress and accepted by
POST /v1/progress/sync is the same JSON document the client tracker
keeps in storage (camelCase keys, ISO-8601 timestamps), so a client can
upload its local blob as-is and merge the reply straight back.

Writes invalidate nothing here: the only cached view is the achievement
summary, which changes on grant, not on progress.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.principal import Principal
from learning_curve.services import progress_service
from learning_curve.services.progress_service import (
    LocalEnrollment,
    LocalModule,
    LocalSnapshot,
    ProgressValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class ModuleProgressModel(BaseModel):
    moduleId: int
    completed: bool = True
    score: float | None = None
    completedAt: str | None = None


class PathEnrollmentModel(BaseModel):
    pathId: int
    enrolledAt: str | None = None


class SnapshotModel(BaseModel):
    completedModules: list[ModuleProgressModel] = Field(default_factory=list)
    enrolledPaths: list[PathEnrollmentModel] = Field(default_factory=list)
    experienceLevel: str | None = None
    learningGoals: list[str] | None = None
    interests: list[str] | None = None
    onboardingCompleted: bool = False


class ModuleUpdateIn(BaseModel):
    status: str = "completed"
    score: float | None = None


class ModuleUpdateOut(BaseModel):
    moduleId: int
    status: str
    score: float | None
    completedAt: str | None


def _iso(ts: int | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, UTC).isoformat().replace("+00:00", "Z")


def _epoch(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


async def _server_snapshot(repos: Repos, user_id: int) -> SnapshotModel:
    completions = await repos.progress.list_completions(user_id)
    enrollments = await repos.progress.list_enrollments(user_id)
    user = await repos.users.get_by_id(user_id)
    return SnapshotModel(
        completedModules=[
            ModuleProgressModel(
                moduleId=c.module_id,
                completed=True,
                score=c.score,
                completedAt=_iso(c.completed_at),
            )
            for c in sorted(completions, key=lambda c: c.module_id)
            if c.is_completed
        ],
        enrolledPaths=[
            PathEnrollmentModel(pathId=e.path_id, enrolledAt=_iso(e.enrolled_at))
            for e in sorted(enrollments, key=lambda e: e.path_id)
        ],
        experienceLevel=user.experience_level if user else None,
        learningGoals=list(user.learning_goals) if user and user.learning_goals else None,
        interests=list(user.interests) if user and user.interests else None,
        onboardingCompleted=bool(user and user.onboarding_completed),
    )


# ---------------------------------------------------------------------------
# GET /v1/progress
# ---------------------------------------------------------------------------


@router.get("", response_model=SnapshotModel)
async def get_progress(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> SnapshotModel:
    return await _server_snapshot(repos, principal.user_id)


# ---------------------------------------------------------------------------
# PUT /v1/progress/modules/{module_id}
# ---------------------------------------------------------------------------


@router.put("/modules/{module_id}", response_model=ModuleUpdateOut)
async def update_module(
    module_id: int,
    payload: ModuleUpdateIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> ModuleUpdateOut:
    if await repos.catalog.get_module(module_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Module not found"},
        )
    try:
        completion = await progress_service.record_module(
            repos.progress,
            principal.user_id,
            module_id,
            status=payload.status,
            score=payload.score,
        )
    except ProgressValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e)},
        ) from None

    return ModuleUpdateOut(
        moduleId=completion.module_id,
        status=completion.status,
        score=completion.score,
        completedAt=_iso(completion.completed_at),
    )


# ---------------------------------------------------------------------------
# POST /v1/progress/sync
# ---------------------------------------------------------------------------


@router.post("/sync", response_model=SnapshotModel)
async def sync_progress(
    payload: SnapshotModel,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> SnapshotModel:
    """Import the caller's local snapshot and return the merged server view."""
    snapshot = LocalSnapshot(
        completed_modules=tuple(
            LocalModule(
                module_id=m.moduleId,
                score=m.score,
                completed_at=_epoch(m.completedAt),
            )
            for m in payload.completedModules
            if m.completed
        ),
        enrolled_paths=tuple(
            LocalEnrollment(path_id=e.pathId, enrolled_at=_epoch(e.enrolledAt))
            for e in payload.enrolledPaths
        ),
        experience_level=payload.experienceLevel,
        learning_goals=tuple(payload.learningGoals or ()),
        interests=tuple(payload.interests or ()),
        onboarding_completed=payload.onboardingCompleted,
    )
    await progress_service.sync_local_snapshot(
        repos.catalog, repos.progress, repos.users, principal.user_id, snapshot
    )
    return await _server_snapshot(repos, principal.user_id)
