"""ActivityFacts straight from PostgreSQL, one aggregate query per fact."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import (
    CertificateRow,
    LearningPathRow,
    ModuleCompletionRow,
    ModuleNoteRow,
    QuizAttemptRow,
    UserRow,
)
from learning_curve.models.achievement import ActivityFacts
from learning_curve.repos.pg_achievement_repo import store_errors


class PgActivityRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _count(self, stmt) -> int:
        return int((await self._session.execute(stmt)).scalar_one())

    async def load_facts(self, user_id: int) -> ActivityFacts:
        with store_errors():
            modules_completed = await self._count(
                select(func.count())
                .select_from(ModuleCompletionRow)
                .where(
                    ModuleCompletionRow.user_id == user_id,
                    ModuleCompletionRow.status == "completed",
                )
            )
            quizzes_passed = await self._count(
                select(func.count())
                .select_from(QuizAttemptRow)
                .where(QuizAttemptRow.user_id == user_id, QuizAttemptRow.passed.is_(True))
            )
            perfect_quizzes = await self._count(
                select(func.count())
                .select_from(QuizAttemptRow)
                .where(QuizAttemptRow.user_id == user_id, QuizAttemptRow.score == 100)
            )
            notes_created = await self._count(
                select(func.count())
                .select_from(ModuleNoteRow)
                .where(ModuleNoteRow.user_id == user_id)
            )
            slugs = (
                await self._session.execute(
                    select(LearningPathRow.slug)
                    .join(CertificateRow, CertificateRow.path_id == LearningPathRow.id)
                    .where(CertificateRow.user_id == user_id)
                )
            ).scalars().all()
            onboarding = (
                await self._session.execute(
                    select(UserRow.onboarding_completed).where(UserRow.id == user_id)
                )
            ).scalar_one_or_none()

        return ActivityFacts(
            modules_completed=modules_completed,
            quizzes_passed=quizzes_passed,
            perfect_quizzes=perfect_quizzes,
            certificates_earned=len(slugs),
            certified_path_slugs=frozenset(slugs),
            onboarding_completed=bool(onboarding),
            notes_created=notes_created,
        )
