"""Achievement catalog, earned list, summary and the reconciliation trigger.

POST /v1/achievements/check runs one reconciliation pass for the caller
and returns only the achievements that pass granted.  Clients call it
after any action that may satisfy a rule and show one notification per
returned entry.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.achievement import Achievement
from learning_curve.models.principal import Principal
from learning_curve.services import achievement_service

router = APIRouter(prefix="/v1/achievements", tags=["achievements"])


class AchievementOut(BaseModel):
    id: int
    key: str
    title: str
    description: str
    icon: str
    category: str
    points: int
    rarity: str


class EarnedOut(AchievementOut):
    earnedAt: int


class CheckOut(BaseModel):
    newAchievements: list[AchievementOut]


class SummaryOut(BaseModel):
    total: int
    earned: int
    points: int


def _achievement_out(a: Achievement) -> AchievementOut:
    return AchievementOut(
        id=a.id,
        key=a.key,
        title=a.title,
        description=a.description,
        icon=a.icon,
        category=a.category,
        points=a.points,
        rarity=a.rarity,
    )


@router.get("", response_model=list[AchievementOut])
async def list_catalog(
    repos: Annotated[Repos, Depends(get_repos)],
) -> list[AchievementOut]:
    return [_achievement_out(a) for a in await repos.achievements.list_catalog()]


@router.get("/me", response_model=list[EarnedOut])
async def list_mine(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> list[EarnedOut]:
    rows = await achievement_service.list_earned(repos.achievements, principal.user_id)
    return [
        EarnedOut(**_achievement_out(a).model_dump(), earnedAt=earned.earned_at)
        for earned, a in rows
    ]


@router.get("/progress", response_model=SummaryOut)
async def summary(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> SummaryOut:
    return SummaryOut(
        **await achievement_service.progress_summary(repos.achievements, principal.user_id)
    )


@router.post("/check", response_model=CheckOut)
async def check(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> CheckOut:
    granted = await achievement_service.check_all(
        repos.achievements, repos.activity, principal.user_id
    )
    return CheckOut(newAchievements=[_achievement_out(a) for a in granted])
