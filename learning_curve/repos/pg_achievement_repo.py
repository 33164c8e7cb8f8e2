"""PostgreSQL implementation of AchievementRepo.

Duplicate grants are prevented by the (user_id, achievement_id) unique
constraint: the insert is ``ON CONFLICT DO NOTHING RETURNING id``, so a
racing second insert gets no row back and the caller leaves that
achievement out of its result.  Each grant is committed before it is
returned.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import AchievementRow, EarnedAchievementRow
from learning_curve.models.achievement import Achievement, EarnedAchievement
from learning_curve.repos.achievement_repo import DataUnavailableError


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate connectivity failures into DataUnavailableError."""
    try:
        yield
    except (OperationalError, InterfaceError, OSError) as exc:
        raise DataUnavailableError("achievement store unavailable") from exc


class PgAchievementRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_catalog(self) -> list[Achievement]:
        stmt = (
            select(AchievementRow)
            .where(AchievementRow.is_active.is_(True))
            .order_by(AchievementRow.id)
        )
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return [row_to_achievement(r) for r in rows]

    async def earned_ids(self, user_id: int) -> set[int]:
        stmt = select(EarnedAchievementRow.achievement_id).where(
            EarnedAchievementRow.user_id == user_id
        )
        with store_errors():
            rows = (await self._session.execute(stmt)).scalars().all()
        return set(rows)

    async def grant_if_absent(
        self, user_id: int, achievement_id: int, earned_at: int
    ) -> EarnedAchievement | None:
        stmt = (
            insert(EarnedAchievementRow)
            .values(user_id=user_id, achievement_id=achievement_id, earned_at=earned_at)
            .on_conflict_do_nothing(constraint="uq_user_achievements_user_achievement")
            .returning(EarnedAchievementRow.id)
        )
        with store_errors():
            new_id = (await self._session.execute(stmt)).scalar_one_or_none()
            await self._session.commit()
        if new_id is None:
            return None
        return EarnedAchievement(
            id=new_id,
            user_id=user_id,
            achievement_id=achievement_id,
            earned_at=earned_at,
        )

    async def list_earned(
        self, user_id: int
    ) -> list[tuple[EarnedAchievement, Achievement]]:
        stmt = (
            select(EarnedAchievementRow, AchievementRow)
            .join(AchievementRow, EarnedAchievementRow.achievement_id == AchievementRow.id)
            .where(EarnedAchievementRow.user_id == user_id)
            .order_by(EarnedAchievementRow.earned_at.desc(), EarnedAchievementRow.id.desc())
        )
        with store_errors():
            rows = (await self._session.execute(stmt)).all()
        return [
            (
                EarnedAchievement(
                    id=earned.id,
                    user_id=earned.user_id,
                    achievement_id=earned.achievement_id,
                    earned_at=earned.earned_at,
                ),
                row_to_achievement(achievement),
            )
            for earned, achievement in rows
        ]


def row_to_achievement(row: AchievementRow) -> Achievement:
    return Achievement(
        id=row.id,
        key=row.key,
        title=row.title,
        description=row.description,
        icon=row.icon,
        category=row.category,
        points=row.points,
        rarity=row.rarity,
        criteria=json.loads(row.criteria_json),
        is_active=row.is_active,
    )
