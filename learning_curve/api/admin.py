"""Admin-only account management.

Every route requires a bearer token whose user currently holds the
admin role (403 otherwise).  Admins are bootstrapped through
ADMIN_EMAILS and can then promote other accounts.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_admin
from learning_curve.models.principal import Principal
from learning_curve.models.user import User
from learning_curve.services import admin_service
from learning_curve.services.admin_service import AdminValidationError, EmailInUseError

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class AdminUserOut(BaseModel):
    id: int
    email: str
    name: str
    role: str
    onboardingCompleted: bool
    createdAt: int


class UserPageOut(BaseModel):
    users: list[AdminUserOut]
    total: int
    page: int
    totalPages: int


class UserUpdateIn(BaseModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None


class CompletionOut(BaseModel):
    moduleId: int
    status: str
    score: float | None
    completedAt: int | None


class EnrollmentOut(BaseModel):
    pathId: int
    enrolledAt: int


class EarnedOut(BaseModel):
    achievementId: int
    key: str
    earnedAt: int


class AttemptOut(BaseModel):
    quizId: int
    score: int
    passed: bool
    completedAt: int


class ActivityOut(BaseModel):
    progress: list[CompletionOut]
    enrollments: list[EnrollmentOut]
    achievements: list[EarnedOut]
    quizzes: list[AttemptOut]


class StatsOut(BaseModel):
    totalUsers: int
    adminUsers: int
    recentUsers: int


def _user_out(u: User) -> AdminUserOut:
    return AdminUserOut(
        id=u.id,
        email=u.email,
        name=u.name,
        role=u.role,
        onboardingCompleted=u.onboarding_completed,
        createdAt=u.created_at,
    )


def _user_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": "User not found"},
    )


def _invalid(e: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": str(e)},
    )


# --- Users ---------------------------------------------------------------------


@router.get("/users", response_model=UserPageOut)
async def list_users(
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
    search: str | None = None,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = 20,
) -> UserPageOut:
    try:
        result = await admin_service.list_users(
            repos.users, search=search, page=page, limit=limit
        )
    except AdminValidationError as e:
        raise _invalid(e) from None
    return UserPageOut(
        users=[_user_out(u) for u in result.users],
        total=result.total,
        page=result.page,
        totalPages=result.total_pages,
    )


@router.get("/users/{user_id}", response_model=AdminUserOut)
async def get_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> AdminUserOut:
    user = await repos.users.get_by_id(user_id)
    if user is None:
        raise _user_not_found()
    return _user_out(user)


@router.patch("/users/{user_id}", response_model=AdminUserOut)
async def update_user(
    user_id: int,
    payload: UserUpdateIn,
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> AdminUserOut:
    try:
        user = await admin_service.update_user(
            repos.users,
            user_id,
            name=payload.name,
            email=payload.email,
            role=payload.role,
        )
    except EmailInUseError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e)},
        ) from None
    except AdminValidationError as e:
        raise _invalid(e) from None
    if user is None:
        raise _user_not_found()
    return _user_out(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> Response:
    if not await admin_service.delete_user(repos.users, user_id):
        raise _user_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/activity", response_model=ActivityOut)
async def user_activity(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> ActivityOut:
    if await repos.users.get_by_id(user_id) is None:
        raise _user_not_found()
    activity = await admin_service.user_activity(repos.progress, repos.achievements, user_id)
    return ActivityOut(
        progress=[
            CompletionOut(
                moduleId=c.module_id,
                status=c.status,
                score=c.score,
                completedAt=c.completed_at,
            )
            for c in activity.completions
        ],
        enrollments=[
            EnrollmentOut(pathId=e.path_id, enrolledAt=e.enrolled_at)
            for e in activity.enrollments
        ],
        achievements=[
            EarnedOut(achievementId=a.id, key=a.key, earnedAt=earned.earned_at)
            for earned, a in activity.achievements
        ],
        quizzes=[
            AttemptOut(
                quizId=q.quiz_id, score=q.score, passed=q.passed, completedAt=q.completed_at
            )
            for q in activity.quiz_attempts
        ],
    )


# --- Stats ---------------------------------------------------------------------


@router.get("/stats", response_model=StatsOut)
async def get_stats(
    _admin: Annotated[Principal, Depends(require_admin)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> StatsOut:
    result = await admin_service.stats(repos.users)
    return StatsOut(
        totalUsers=result.total_users,
        adminUsers=result.admin_users,
        recentUsers=result.recent_users,
    )
