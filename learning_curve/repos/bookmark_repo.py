from __future__ import annotations

import itertools
import threading
from typing import Protocol

from learning_curve.models.bookmark import Bookmark, ItemType


class BookmarkRepo(Protocol):
    async def add(
        self, *, user_id: int, item_type: ItemType, item_id: int, created_at: int
    ) -> tuple[Bookmark, bool]:
        """Insert unless present.  Returns (bookmark, created)."""
        ...

    async def get(self, user_id: int, item_type: ItemType, item_id: int) -> Bookmark | None: ...
    async def list_for_user(self, user_id: int) -> list[Bookmark]: ...
    async def remove(self, user_id: int, item_type: ItemType, item_id: int) -> bool: ...


class InMemoryBookmarkRepo:
    def __init__(self) -> None:
        self._by_key: dict[tuple[int, str, int], Bookmark] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def add(
        self, *, user_id: int, item_type: ItemType, item_id: int, created_at: int
    ) -> tuple[Bookmark, bool]:
        key = (user_id, item_type, item_id)
        with self._lock:
            existing = self._by_key.get(key)
            if existing is not None:
                return existing, False
            bookmark = Bookmark(
                id=next(self._ids),
                user_id=user_id,
                item_type=item_type,
                item_id=item_id,
                created_at=created_at,
            )
            self._by_key[key] = bookmark
            return bookmark, True

    async def get(self, user_id: int, item_type: ItemType, item_id: int) -> Bookmark | None:
        return self._by_key.get((user_id, item_type, item_id))

    async def list_for_user(self, user_id: int) -> list[Bookmark]:
        marks = [b for b in self._by_key.values() if b.user_id == user_id]
        return sorted(marks, key=lambda b: (b.created_at, b.id), reverse=True)

    async def remove(self, user_id: int, item_type: ItemType, item_id: int) -> bool:
        with self._lock:
            return self._by_key.pop((user_id, item_type, item_id), None) is not None
