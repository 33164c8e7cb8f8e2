"""Curated learning resources (articles, videos, tools...).  Read-only."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos
from learning_curve.models.catalog import Resource

router = APIRouter(prefix="/v1/resources", tags=["catalog"])


class ResourceOut(BaseModel):
    id: int
    title: str
    description: str
    url: str | None
    resourceType: str
    difficulty: str | None
    tags: list[str]
    isPremium: bool


def _resource_out(r: Resource) -> ResourceOut:
    return ResourceOut(
        id=r.id,
        title=r.title,
        description=r.description,
        url=r.url,
        resourceType=r.resource_type,
        difficulty=r.difficulty,
        tags=list(r.tags),
        isPremium=r.is_premium,
    )


@router.get("", response_model=list[ResourceOut])
async def list_resources(repos: Annotated[Repos, Depends(get_repos)]) -> list[ResourceOut]:
    return [_resource_out(r) for r in await repos.catalog.list_resources()]


@router.get("/{resource_id}", response_model=ResourceOut)
async def get_resource(
    resource_id: int, repos: Annotated[Repos, Depends(get_repos)]
) -> ResourceOut:
    resource = await repos.catalog.get_resource(resource_id)
    if resource is None or not resource.is_published:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Resource not found"},
        )
    return _resource_out(resource)
