"""Learning catalog: paths, their modules, and path enrollment."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.catalog import LearningPath, Module
from learning_curve.models.principal import Principal
from learning_curve.services import progress_service

router = APIRouter(prefix="/v1/paths", tags=["catalog"])


class PathOut(BaseModel):
    id: int
    slug: str
    title: str
    description: str
    difficulty: str
    position: int


class ModuleOut(BaseModel):
    id: int
    pathId: int
    slug: str
    title: str
    difficulty: str
    position: int


class EnrollmentOut(BaseModel):
    pathId: int
    enrolledAt: int


def _path_out(p: LearningPath) -> PathOut:
    return PathOut(
        id=p.id,
        slug=p.slug,
        title=p.title,
        description=p.description,
        difficulty=p.difficulty,
        position=p.position,
    )


def _module_out(m: Module) -> ModuleOut:
    return ModuleOut(
        id=m.id,
        pathId=m.path_id,
        slug=m.slug,
        title=m.title,
        difficulty=m.difficulty,
        position=m.position,
    )


@router.get("", response_model=list[PathOut])
async def list_paths(repos: Annotated[Repos, Depends(get_repos)]) -> list[PathOut]:
    return [_path_out(p) for p in await repos.catalog.list_paths()]


@router.get("/{path_id}/modules", response_model=list[ModuleOut])
async def list_modules(
    path_id: int, repos: Annotated[Repos, Depends(get_repos)]
) -> list[ModuleOut]:
    path = await repos.catalog.get_path(path_id)
    if path is None or not path.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Learning path not found"},
        )
    return [_module_out(m) for m in await repos.catalog.list_modules(path_id)]


@router.get("/{slug}", response_model=PathOut)
async def get_path(slug: str, repos: Annotated[Repos, Depends(get_repos)]) -> PathOut:
    path = await repos.catalog.get_path_by_slug(slug)
    if path is None or not path.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Learning path not found"},
        )
    return _path_out(path)


@router.post("/{path_id}/enroll", response_model=EnrollmentOut)
async def enroll(
    path_id: int,
    response: Response,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> EnrollmentOut:
    path = await repos.catalog.get_path(path_id)
    if path is None or not path.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Learning path not found"},
        )

    enrollment, created = await progress_service.enroll(
        repos.progress, principal.user_id, path_id
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return EnrollmentOut(pathId=enrollment.path_id, enrolledAt=enrollment.enrolled_at)
