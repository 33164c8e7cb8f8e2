"""PostgreSQL implementation of NoteRepo."""

from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import ModuleNoteRow
from learning_curve.models.note import ModuleNote


class PgNoteRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self, *, user_id: int, module_id: int, content: str, created_at: int
    ) -> ModuleNote:
        row = ModuleNoteRow(
            user_id=user_id,
            module_id=module_id,
            content=content,
            created_at=created_at,
            updated_at=created_at,
        )
        self._session.add(row)
        await self._session.flush()
        return _row_to_note(row)

    async def get(self, note_id: int) -> ModuleNote | None:
        row = await self._session.get(ModuleNoteRow, note_id)
        return _row_to_note(row) if row is not None else None

    async def list_for_module(self, user_id: int, module_id: int) -> list[ModuleNote]:
        stmt = (
            select(ModuleNoteRow)
            .where(
                ModuleNoteRow.user_id == user_id, ModuleNoteRow.module_id == module_id
            )
            .order_by(ModuleNoteRow.created_at.desc(), ModuleNoteRow.id.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_note(r) for r in rows]

    async def list_for_user(self, user_id: int) -> list[ModuleNote]:
        stmt = (
            select(ModuleNoteRow)
            .where(ModuleNoteRow.user_id == user_id)
            .order_by(ModuleNoteRow.created_at.desc(), ModuleNoteRow.id.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_note(r) for r in rows]

    async def update_content(
        self, note_id: int, user_id: int, content: str, updated_at: int
    ) -> ModuleNote | None:
        stmt = (
            update(ModuleNoteRow)
            .where(ModuleNoteRow.id == note_id, ModuleNoteRow.user_id == user_id)
            .values(content=content, updated_at=updated_at)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get(note_id)

    async def delete(self, note_id: int, user_id: int) -> bool:
        stmt = delete(ModuleNoteRow).where(
            ModuleNoteRow.id == note_id, ModuleNoteRow.user_id == user_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_note(row: ModuleNoteRow) -> ModuleNote:
    return ModuleNote(
        id=row.id,
        user_id=row.user_id,
        module_id=row.module_id,
        content=row.content,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
