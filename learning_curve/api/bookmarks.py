"""Bookmarked modules and resources.  Every operation is scoped to the
caller's own bookmarks."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.bookmark import Bookmark, ItemType
from learning_curve.models.principal import Principal
from learning_curve.services import bookmarks_service
from learning_curve.services.bookmarks_service import BookmarkTargetNotFound

router = APIRouter(prefix="/v1/bookmarks", tags=["bookmarks"])


class BookmarkIn(BaseModel):
    itemType: ItemType
    itemId: int


class BookmarkOut(BaseModel):
    id: int
    itemType: ItemType
    itemId: int
    createdAt: int


class BookmarkStatusOut(BaseModel):
    bookmarked: bool


def _bookmark_out(b: Bookmark) -> BookmarkOut:
    return BookmarkOut(id=b.id, itemType=b.item_type, itemId=b.item_id, createdAt=b.created_at)


@router.get("", response_model=list[BookmarkOut])
async def list_bookmarks(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> list[BookmarkOut]:
    """The caller's bookmarks, newest first."""
    return [_bookmark_out(b) for b in await repos.bookmarks.list_for_user(principal.user_id)]


@router.post("", response_model=BookmarkOut)
async def add_bookmark(
    payload: BookmarkIn,
    response: Response,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> BookmarkOut:
    try:
        bookmark, created = await bookmarks_service.add_bookmark(
            repos.bookmarks,
            repos.catalog,
            principal.user_id,
            payload.itemType,
            payload.itemId,
        )
    except BookmarkTargetNotFound as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": str(e)},
        ) from None
    if created:
        response.status_code = status.HTTP_201_CREATED
    return _bookmark_out(bookmark)


@router.get("/{item_type}/{item_id}", response_model=BookmarkStatusOut)
async def check_bookmark(
    item_type: ItemType,
    item_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> BookmarkStatusOut:
    bookmark = await repos.bookmarks.get(principal.user_id, item_type, item_id)
    return BookmarkStatusOut(bookmarked=bookmark is not None)


@router.delete("/{item_type}/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bookmark(
    item_type: ItemType,
    item_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> Response:
    if not await bookmarks_service.remove_bookmark(
        repos.bookmarks, principal.user_id, item_type, item_id
    ):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Bookmark not found"},
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
