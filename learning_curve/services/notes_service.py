from __future__ import annotations

import logging
import time

from learning_curve.models.note import ModuleNote
from learning_curve.repos.note_repo import NoteRepo

logger = logging.getLogger(__name__)

MAX_NOTE_LENGTH = 10_000


class NoteValidationError(ValueError):
    pass


def _clean(content: str) -> str:
    content = content.strip()
    if not content:
        raise NoteValidationError("Note content must not be empty")
    if len(content) > MAX_NOTE_LENGTH:
        raise NoteValidationError(
            f"Note content must be at most {MAX_NOTE_LENGTH} characters"
        )
    return content


async def create_note(
    repo: NoteRepo, user_id: int, module_id: int, content: str
) -> ModuleNote:
    note = await repo.add(
        user_id=user_id,
        module_id=module_id,
        content=_clean(content),
        created_at=int(time.time()),
    )
    logger.info("Note created id=%d user_id=%d module_id=%d", note.id, user_id, module_id)
    return note


async def update_note(
    repo: NoteRepo, user_id: int, note_id: int, content: str
) -> ModuleNote | None:
    """None when the note does not exist or belongs to someone else."""
    return await repo.update_content(note_id, user_id, _clean(content), int(time.time()))


async def delete_note(repo: NoteRepo, user_id: int, note_id: int) -> bool:
    deleted = await repo.delete(note_id, user_id)
    if deleted:
        logger.info("Note deleted id=%d user_id=%d", note_id, user_id)
    return deleted
