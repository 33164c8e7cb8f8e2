"""PostgreSQL implementation of BookmarkRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import BookmarkRow
from learning_curve.models.bookmark import Bookmark, ItemType


class PgBookmarkRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self, *, user_id: int, item_type: ItemType, item_id: int, created_at: int
    ) -> tuple[Bookmark, bool]:
        existing = await self.get(user_id, item_type, item_id)
        if existing is not None:
            return existing, False

        row = BookmarkRow(
            user_id=user_id, item_type=item_type, item_id=item_id, created_at=created_at
        )
        try:
            # SAVEPOINT so a concurrent duplicate leaves the outer transaction usable
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            existing = await self.get(user_id, item_type, item_id)
            if existing is None:
                raise
            return existing, False
        return _row_to_bookmark(row), True

    async def get(self, user_id: int, item_type: ItemType, item_id: int) -> Bookmark | None:
        stmt = select(BookmarkRow).where(
            BookmarkRow.user_id == user_id,
            BookmarkRow.item_type == item_type,
            BookmarkRow.item_id == item_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_bookmark(row) if row is not None else None

    async def list_for_user(self, user_id: int) -> list[Bookmark]:
        stmt = (
            select(BookmarkRow)
            .where(BookmarkRow.user_id == user_id)
            .order_by(BookmarkRow.created_at.desc(), BookmarkRow.id.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_bookmark(r) for r in rows]

    async def remove(self, user_id: int, item_type: ItemType, item_id: int) -> bool:
        stmt = delete(BookmarkRow).where(
            BookmarkRow.user_id == user_id,
            BookmarkRow.item_type == item_type,
            BookmarkRow.item_id == item_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_bookmark(row: BookmarkRow) -> Bookmark:
    return Bookmark(
        id=row.id,
        user_id=row.user_id,
        item_type=row.item_type,  # type: ignore[arg-type]
        item_id=row.item_id,
        created_at=row.created_at,
    )
