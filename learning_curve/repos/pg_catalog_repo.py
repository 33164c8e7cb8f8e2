"""PostgreSQL implementation of CatalogRepo."""

from __future__ import annotations

import json

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import (
    LearningPathRow,
    ModuleRow,
    QuizQuestionRow,
    QuizRow,
    ResourceRow,
)
from learning_curve.models.catalog import LearningPath, Module, Quiz, QuizQuestion, Resource


class PgCatalogRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_paths(self) -> list[LearningPath]:
        stmt = (
            select(LearningPathRow)
            .where(LearningPathRow.is_published.is_(True))
            .order_by(LearningPathRow.position, LearningPathRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_path(r) for r in rows]

    async def get_path(self, path_id: int) -> LearningPath | None:
        row = await self._session.get(LearningPathRow, path_id)
        return _row_to_path(row) if row is not None else None

    async def get_path_by_slug(self, slug: str) -> LearningPath | None:
        stmt = select(LearningPathRow).where(LearningPathRow.slug == slug)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_path(row) if row is not None else None

    async def list_modules(self, path_id: int) -> list[Module]:
        stmt = (
            select(ModuleRow)
            .where(ModuleRow.path_id == path_id, ModuleRow.is_published.is_(True))
            .order_by(ModuleRow.position, ModuleRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    async def get_module(self, module_id: int) -> Module | None:
        row = await self._session.get(ModuleRow, module_id)
        return _row_to_module(row) if row is not None else None

    async def get_quiz(self, quiz_id: int) -> Quiz | None:
        row = await self._session.get(QuizRow, quiz_id)
        return _row_to_quiz(row) if row is not None else None

    async def get_quiz_for_module(self, module_id: int) -> Quiz | None:
        stmt = select(QuizRow).where(QuizRow.module_id == module_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_quiz(row) if row is not None else None

    async def list_quiz_questions(self, quiz_id: int) -> list[QuizQuestion]:
        stmt = (
            select(QuizQuestionRow)
            .where(QuizQuestionRow.quiz_id == quiz_id)
            .order_by(QuizQuestionRow.position, QuizQuestionRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(r) for r in rows]

    async def list_resources(self) -> list[Resource]:
        stmt = (
            select(ResourceRow)
            .where(ResourceRow.is_published.is_(True))
            .order_by(ResourceRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_resource(r) for r in rows]

    async def get_resource(self, resource_id: int) -> Resource | None:
        row = await self._session.get(ResourceRow, resource_id)
        return _row_to_resource(row) if row is not None else None


def _row_to_path(row: LearningPathRow) -> LearningPath:
    return LearningPath(
        id=row.id,
        slug=row.slug,
        title=row.title,
        difficulty=row.difficulty,
        description=row.description or "",
        position=row.position,
        is_published=row.is_published,
    )


def _row_to_module(row: ModuleRow) -> Module:
    return Module(
        id=row.id,
        path_id=row.path_id,
        slug=row.slug,
        title=row.title,
        difficulty=row.difficulty,
        position=row.position,
        is_published=row.is_published,
    )


def _load_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    try:
        value = json.loads(raw)
    except ValueError:
        return ()
    return tuple(str(v) for v in value) if isinstance(value, list) else ()


def _row_to_quiz(row: QuizRow) -> Quiz:
    return Quiz(
        id=row.id,
        module_id=row.module_id,
        title=row.title,
        description=row.description or "",
        passing_score=row.passing_score,
    )


def _row_to_question(row: QuizQuestionRow) -> QuizQuestion:
    return QuizQuestion(
        id=row.id,
        quiz_id=row.quiz_id,
        question=row.question,
        question_type=row.question_type,
        correct_answer=row.correct_answer,
        options=_load_list(row.options),
        explanation=row.explanation or "",
        position=row.position,
    )


def _row_to_resource(row: ResourceRow) -> Resource:
    return Resource(
        id=row.id,
        title=row.title,
        resource_type=row.resource_type,
        description=row.description or "",
        url=row.url,
        difficulty=row.difficulty,
        tags=_load_list(row.tags),
        is_premium=row.is_premium,
        is_published=row.is_published,
    )
