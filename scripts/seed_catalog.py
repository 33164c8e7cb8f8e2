"""Create tables and seed the sample catalog, quizzes, resources and
built-in achievements.

Idempotent: rows that already exist (same id or key) are left alone.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/seed_catalog.py
"""

from __future__ import annotations

import asyncio
import json
import logging

from sqlalchemy.dialects.postgresql import insert

from learning_curve.core.config import SETTINGS
from learning_curve.core.logging import setup_logging
from learning_curve.db import tables
from learning_curve.db.engine import Base, engine, session_scope
from learning_curve.repos.catalog_repo import sample_paths, sample_quizzes, sample_resources
from learning_curve.services.achievement_catalog import builtin_achievements

logger = logging.getLogger("seed_catalog")


async def seed() -> None:
    if engine is None:
        raise SystemExit("DATABASE_URL is not set")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    paths = sample_paths()
    quizzes = sample_quizzes()
    resources = sample_resources()

    async with session_scope() as session:
        for path, modules in paths:
            await session.execute(
                insert(tables.LearningPathRow)
                .values(
                    id=path.id,
                    slug=path.slug,
                    title=path.title,
                    difficulty=path.difficulty,
                    position=path.position,
                )
                .on_conflict_do_nothing()
            )
            for m in modules:
                await session.execute(
                    insert(tables.ModuleRow)
                    .values(
                        id=m.id,
                        path_id=m.path_id,
                        slug=m.slug,
                        title=m.title,
                        difficulty=m.difficulty,
                        position=m.position,
                    )
                    .on_conflict_do_nothing()
                )

        for quiz, questions in quizzes:
            await session.execute(
                insert(tables.QuizRow)
                .values(
                    id=quiz.id,
                    module_id=quiz.module_id,
                    title=quiz.title,
                    description=quiz.description,
                    passing_score=quiz.passing_score,
                )
                .on_conflict_do_nothing()
            )
            for q in questions:
                await session.execute(
                    insert(tables.QuizQuestionRow)
                    .values(
                        id=q.id,
                        quiz_id=q.quiz_id,
                        question=q.question,
                        question_type=q.question_type,
                        options=json.dumps(list(q.options)),
                        correct_answer=q.correct_answer,
                        explanation=q.explanation,
                        position=q.position,
                    )
                    .on_conflict_do_nothing()
                )

        for r in resources:
            await session.execute(
                insert(tables.ResourceRow)
                .values(
                    id=r.id,
                    title=r.title,
                    description=r.description,
                    url=r.url,
                    resource_type=r.resource_type,
                    difficulty=r.difficulty,
                    tags=json.dumps(list(r.tags)),
                    is_premium=r.is_premium,
                    is_published=r.is_published,
                )
                .on_conflict_do_nothing()
            )

        for a in builtin_achievements():
            await session.execute(
                insert(tables.AchievementRow)
                .values(
                    key=a.key,
                    title=a.title,
                    description=a.description,
                    icon=a.icon,
                    category=a.category,
                    criteria_json=json.dumps(a.criteria),
                    points=a.points,
                    rarity=a.rarity,
                    is_active=a.is_active,
                )
                .on_conflict_do_nothing(index_elements=["key"])
            )

    logger.info(
        "Seeded %d paths, %d quizzes, %d resources and %d achievements",
        len(paths),
        len(quizzes),
        len(resources),
        len(builtin_achievements()),
    )
    await engine.dispose()


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(seed())
