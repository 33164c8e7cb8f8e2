"""Passwordless registration, profile and onboarding endpoints.

POST /v1/users/register is find-or-create by email: a known email gets a
fresh token for the existing account.  Anyone who knows an address can
therefore obtain a token for it; registration is an identity capture for
progress tracking, not an authentication step.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.core.config import SETTINGS
from learning_curve.models.principal import Principal
from learning_curve.models.user import User
from learning_curve.services import token_service, users_service
from learning_curve.services.users_service import UserValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    name: str
    email: str


class RegisterOut(BaseModel):
    token: str
    name: str
    email: str


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    role: str
    experienceLevel: str | None
    learningGoals: list[str]
    interests: list[str]
    onboardingCompleted: bool
    createdAt: int


class OnboardingIn(BaseModel):
    experienceLevel: str | None = None
    # JSON-encoded lists, as the web client sends them; plain lists accepted.
    learningGoals: str | list[str] | None = None
    interests: str | list[str] | None = None


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        experienceLevel=user.experience_level,
        learningGoals=list(user.learning_goals),
        interests=list(user.interests),
        onboardingCompleted=user.onboarding_completed,
        createdAt=user.created_at,
    )


# --- POST /v1/users/register -----------------------------------------------


@router.post("/register", response_model=RegisterOut)
async def register(
    payload: RegisterIn,
    response: Response,
    repos: Annotated[Repos, Depends(get_repos)],
) -> RegisterOut:
    try:
        user, created = await users_service.register(
            repos.users,
            name=payload.name,
            email=payload.email,
            admin_emails=SETTINGS.admin_emails,
        )
    except UserValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e)},
        ) from None

    if created:
        response.status_code = status.HTTP_201_CREATED

    token = token_service.create_access_token(sub=str(user.id), roles=[user.role])
    return RegisterOut(token=token, name=user.name, email=user.email)


# --- GET /v1/users/me --------------------------------------------------------


@router.get("/me", response_model=UserOut)
async def me(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> UserOut:
    user = await repos.users.get_by_id(principal.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "User not found"},
        )
    return _user_out(user)


# --- PATCH /v1/users/me/onboarding ------------------------------------------


@router.patch("/me/onboarding")
async def complete_onboarding(
    payload: OnboardingIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> dict:
    try:
        user = await users_service.update_onboarding(
            repos.users,
            principal.user_id,
            experience_level=payload.experienceLevel,
            learning_goals=payload.learningGoals,
            interests=payload.interests,
        )
    except UserValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e)},
        ) from None

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "User not found"},
        )
    return {"success": True}
