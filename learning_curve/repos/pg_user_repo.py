"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

import json

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db import tables
from learning_curve.db.tables import UserRow
from learning_curve.models.user import User


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: int) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def add(
        self, *, email: str, name: str, created_at: int, role: str = "user"
    ) -> User:
        row = UserRow(email=email, name=name, created_at=created_at, role=role)
        try:
            # SAVEPOINT so a duplicate email leaves the outer transaction usable
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ValueError("email already exists") from None
        return _row_to_user(row)

    async def update_onboarding(
        self,
        user_id: int,
        *,
        experience_level: str | None,
        learning_goals: tuple[str, ...],
        interests: tuple[str, ...],
    ) -> User | None:
        stmt = (
            update(UserRow)
            .where(UserRow.id == user_id)
            .values(
                experience_level=experience_level,
                learning_goals=json.dumps(list(learning_goals)),
                interests=json.dumps(list(interests)),
                onboarding_completed=True,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(user_id)

    async def list_users(
        self, *, search: str | None, limit: int, offset: int
    ) -> list[User]:
        stmt = (
            _filtered(select(UserRow), search=search)
            .order_by(UserRow.created_at.desc(), UserRow.id.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_user(r) for r in rows]

    async def count_users(
        self,
        *,
        search: str | None = None,
        role: str | None = None,
        created_since: int | None = None,
    ) -> int:
        stmt = _filtered(select(func.count()).select_from(UserRow), search=search)
        if role is not None:
            stmt = stmt.where(UserRow.role == role)
        if created_since is not None:
            stmt = stmt.where(UserRow.created_at >= created_since)
        return (await self._session.execute(stmt)).scalar_one()

    async def update_account(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> User | None:
        values = {
            k: v for k, v in (("name", name), ("email", email), ("role", role)) if v is not None
        }
        if not values:
            return await self.get_by_id(user_id)
        stmt = update(UserRow).where(UserRow.id == user_id).values(**values)
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except IntegrityError:
            raise ValueError("email already exists") from None
        if result.rowcount == 0:
            return None
        return await self.get_by_id(user_id)

    async def delete(self, user_id: int) -> bool:
        # Owned rows first; the foreign keys do not cascade.
        for table in _OWNED_BY_USER:
            await self._session.execute(delete(table).where(table.user_id == user_id))
        result = await self._session.execute(delete(UserRow).where(UserRow.id == user_id))
        return result.rowcount > 0


_OWNED_BY_USER = (
    tables.EarnedAchievementRow,
    tables.BookmarkRow,
    tables.ModuleNoteRow,
    tables.CertificateRow,
    tables.QuizAttemptRow,
    tables.ModuleCompletionRow,
    tables.PathEnrollmentRow,
)


def _filtered(stmt, *, search: str | None):
    if search:
        stmt = stmt.where(
            or_(
                UserRow.name.icontains(search, autoescape=True),
                UserRow.email.icontains(search, autoescape=True),
            )
        )
    return stmt


def _load_tags(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        value = json.loads(raw)
    except ValueError:
        return ()
    return tuple(str(v) for v in value) if isinstance(value, list) else ()


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name or "",
        created_at=row.created_at,
        role=row.role or "user",
        experience_level=row.experience_level,
        learning_goals=_load_tags(row.learning_goals),
        interests=_load_tags(row.interests),
        onboarding_completed=bool(row.onboarding_completed),
    )
