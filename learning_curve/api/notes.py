"""Per-module notes.  Every operation is scoped to the caller's own notes;
another user's note id behaves exactly like a missing one (404)."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.note import ModuleNote
from learning_curve.models.principal import Principal
from learning_curve.services import notes_service
from learning_curve.services.notes_service import NoteValidationError

router = APIRouter(prefix="/v1/notes", tags=["notes"])


class NoteIn(BaseModel):
    moduleId: int
    content: str


class NoteUpdateIn(BaseModel):
    content: str


class NoteOut(BaseModel):
    id: int
    moduleId: int
    content: str
    createdAt: int
    updatedAt: int


def _note_out(n: ModuleNote) -> NoteOut:
    return NoteOut(
        id=n.id,
        moduleId=n.module_id,
        content=n.content,
        createdAt=n.created_at,
        updatedAt=n.updated_at,
    )


def _invalid(e: NoteValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": str(e)},
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": "Note not found"},
    )


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> NoteOut:
    if await repos.catalog.get_module(payload.moduleId) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Module not found"},
        )
    try:
        note = await notes_service.create_note(
            repos.notes, principal.user_id, payload.moduleId, payload.content
        )
    except NoteValidationError as e:
        raise _invalid(e) from None
    return _note_out(note)


@router.get("", response_model=list[NoteOut])
async def list_notes(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
    module_id: Annotated[int | None, Query(alias="moduleId")] = None,
) -> list[NoteOut]:
    """The caller's notes, newest first; optionally for one module."""
    if module_id is None:
        notes = await repos.notes.list_for_user(principal.user_id)
    else:
        notes = await repos.notes.list_for_module(principal.user_id, module_id)
    return [_note_out(n) for n in notes]


@router.patch("/{note_id}", response_model=NoteOut)
async def update_note(
    note_id: int,
    payload: NoteUpdateIn,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> NoteOut:
    try:
        note = await notes_service.update_note(
            repos.notes, principal.user_id, note_id, payload.content
        )
    except NoteValidationError as e:
        raise _invalid(e) from None
    if note is None:
        raise _not_found()
    return _note_out(note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> Response:
    if not await notes_service.delete_note(repos.notes, principal.user_id, note_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
