from __future__ import annotations

import logging
import time

from learning_curve.models.bookmark import Bookmark, ItemType
from learning_curve.repos.bookmark_repo import BookmarkRepo
from learning_curve.repos.catalog_repo import CatalogRepo

logger = logging.getLogger(__name__)


class BookmarkTargetNotFound(LookupError):
    pass


async def _require_target(catalog: CatalogRepo, item_type: ItemType, item_id: int) -> None:
    if item_type == "module":
        module = await catalog.get_module(item_id)
        if module is None or not module.is_published:
            raise BookmarkTargetNotFound("Module not found")
    else:
        resource = await catalog.get_resource(item_id)
        if resource is None or not resource.is_published:
            raise BookmarkTargetNotFound("Resource not found")


async def add_bookmark(
    repo: BookmarkRepo,
    catalog: CatalogRepo,
    user_id: int,
    item_type: ItemType,
    item_id: int,
) -> tuple[Bookmark, bool]:
    """Bookmark a published module or resource.  Adding twice is a no-op."""
    await _require_target(catalog, item_type, item_id)
    bookmark, created = await repo.add(
        user_id=user_id, item_type=item_type, item_id=item_id, created_at=int(time.time())
    )
    if created:
        logger.info(
            "Bookmark added user_id=%d item=%s:%d", user_id, item_type, item_id
        )
    return bookmark, created


async def remove_bookmark(
    repo: BookmarkRepo, user_id: int, item_type: ItemType, item_id: int
) -> bool:
    removed = await repo.remove(user_id, item_type, item_id)
    if removed:
        logger.info(
            "Bookmark removed user_id=%d item=%s:%d", user_id, item_type, item_id
        )
    return removed
