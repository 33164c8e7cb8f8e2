from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from learning_curve.models.note import ModuleNote


class NoteRepo(Protocol):
    async def add(
        self, *, user_id: int, module_id: int, content: str, created_at: int
    ) -> ModuleNote: ...
    async def get(self, note_id: int) -> ModuleNote | None: ...
    async def list_for_module(self, user_id: int, module_id: int) -> list[ModuleNote]: ...
    async def list_for_user(self, user_id: int) -> list[ModuleNote]: ...
    async def update_content(
        self, note_id: int, user_id: int, content: str, updated_at: int
    ) -> ModuleNote | None: ...
    async def delete(self, note_id: int, user_id: int) -> bool: ...


class InMemoryNoteRepo:
    """Notes keyed by id.  Mutations are scoped to the owning user."""

    def __init__(self) -> None:
        self._by_id: dict[int, ModuleNote] = {}
        self._ids = itertools.count(1)

    async def add(
        self, *, user_id: int, module_id: int, content: str, created_at: int
    ) -> ModuleNote:
        note = ModuleNote(
            id=next(self._ids),
            user_id=user_id,
            module_id=module_id,
            content=content,
            created_at=created_at,
            updated_at=created_at,
        )
        self._by_id[note.id] = note
        return note

    async def get(self, note_id: int) -> ModuleNote | None:
        return self._by_id.get(note_id)

    async def list_for_module(self, user_id: int, module_id: int) -> list[ModuleNote]:
        notes = [
            n
            for n in self._by_id.values()
            if n.user_id == user_id and n.module_id == module_id
        ]
        return sorted(notes, key=lambda n: (n.created_at, n.id), reverse=True)

    async def list_for_user(self, user_id: int) -> list[ModuleNote]:
        notes = [n for n in self._by_id.values() if n.user_id == user_id]
        return sorted(notes, key=lambda n: (n.created_at, n.id), reverse=True)

    async def update_content(
        self, note_id: int, user_id: int, content: str, updated_at: int
    ) -> ModuleNote | None:
        note = self._by_id.get(note_id)
        if note is None or note.user_id != user_id:
            return None
        updated = replace(note, content=content, updated_at=updated_at)
        self._by_id[note_id] = updated
        return updated

    async def delete(self, note_id: int, user_id: int) -> bool:
        note = self._by_id.get(note_id)
        if note is None or note.user_id != user_id:
            return False
        del self._by_id[note_id]
        return True
