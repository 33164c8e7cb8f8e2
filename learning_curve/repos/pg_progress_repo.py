"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learning_curve.db.tables import (
    CertificateRow,
    ModuleCompletionRow,
    PathEnrollmentRow,
    QuizAttemptRow,
)
from learning_curve.models.progress import (
    Certificate,
    ModuleCompletion,
    PathEnrollment,
    QuizAttempt,
)


class PgProgressRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- enrollments ---

    async def enroll(
        self, user_id: int, path_id: int, enrolled_at: int
    ) -> tuple[PathEnrollment, bool]:
        stmt = (
            insert(PathEnrollmentRow)
            .values(user_id=user_id, path_id=path_id, enrolled_at=enrolled_at)
            .on_conflict_do_nothing(index_elements=["user_id", "path_id"])
            .returning(PathEnrollmentRow.enrolled_at)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            return PathEnrollment(user_id, path_id, inserted), True

        existing = await self.get_enrollment(user_id, path_id)
        if existing is None:
            raise RuntimeError("enrollment conflict without an existing row")
        return existing, False

    async def get_enrollment(self, user_id: int, path_id: int) -> PathEnrollment | None:
        row = await self._session.get(PathEnrollmentRow, (user_id, path_id))
        if row is None:
            return None
        return PathEnrollment(row.user_id, row.path_id, row.enrolled_at)

    async def list_enrollments(self, user_id: int) -> list[PathEnrollment]:
        stmt = (
            select(PathEnrollmentRow)
            .where(PathEnrollmentRow.user_id == user_id)
            .order_by(PathEnrollmentRow.enrolled_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [PathEnrollment(r.user_id, r.path_id, r.enrolled_at) for r in rows]

    # --- module completions ---

    async def get_completion(
        self, user_id: int, module_id: int
    ) -> ModuleCompletion | None:
        row = await self._session.get(ModuleCompletionRow, (user_id, module_id))
        return _row_to_completion(row) if row is not None else None

    async def upsert_completion(self, completion: ModuleCompletion) -> ModuleCompletion:
        values = {
            "user_id": completion.user_id,
            "module_id": completion.module_id,
            "status": completion.status,
            "score": completion.score,
            "completed_at": completion.completed_at,
        }
        stmt = insert(ModuleCompletionRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "module_id"],
            set_={
                "status": stmt.excluded.status,
                "score": stmt.excluded.score,
                "completed_at": stmt.excluded.completed_at,
            },
        )
        await self._session.execute(stmt)
        return completion

    async def list_completions(self, user_id: int) -> list[ModuleCompletion]:
        stmt = select(ModuleCompletionRow).where(ModuleCompletionRow.user_id == user_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_completion(r) for r in rows]

    # --- quiz attempts ---

    async def add_quiz_attempt(
        self,
        *,
        user_id: int,
        quiz_id: int,
        score: int,
        passed: bool,
        answers_json: str,
        completed_at: int,
    ) -> QuizAttempt:
        row = QuizAttemptRow(
            user_id=user_id,
            quiz_id=quiz_id,
            score=score,
            passed=passed,
            answers_json=answers_json,
            completed_at=completed_at,
        )
        self._session.add(row)
        await self._session.flush()
        return _row_to_attempt(row)

    async def list_quiz_attempts(
        self, user_id: int, quiz_id: int | None = None
    ) -> list[QuizAttempt]:
        stmt = select(QuizAttemptRow).where(QuizAttemptRow.user_id == user_id)
        if quiz_id is not None:
            stmt = stmt.where(QuizAttemptRow.quiz_id == quiz_id)
        stmt = stmt.order_by(QuizAttemptRow.completed_at)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_attempt(r) for r in rows]

    # --- certificates ---

    async def add_certificate(
        self, *, user_id: int, path_id: int, certificate_number: str, issued_at: int
    ) -> Certificate:
        row = CertificateRow(
            user_id=user_id,
            path_id=path_id,
            certificate_number=certificate_number,
            issued_at=issued_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ValueError("certificate already issued") from None
        return _row_to_certificate(row)

    async def get_certificate(self, user_id: int, path_id: int) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.user_id == user_id, CertificateRow.path_id == path_id
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_certificate(row) if row is not None else None

    async def get_certificate_by_number(self, number: str) -> Certificate | None:
        stmt = select(CertificateRow).where(CertificateRow.certificate_number == number)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_certificate(row) if row is not None else None

    async def list_certificates(self, user_id: int) -> list[Certificate]:
        stmt = select(CertificateRow).where(CertificateRow.user_id == user_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_certificate(r) for r in rows]


def _row_to_completion(row: ModuleCompletionRow) -> ModuleCompletion:
    return ModuleCompletion(
        user_id=row.user_id,
        module_id=row.module_id,
        status=row.status,
        score=row.score,
        completed_at=row.completed_at,
    )


def _row_to_attempt(row: QuizAttemptRow) -> QuizAttempt:
    return QuizAttempt(
        id=row.id,
        user_id=row.user_id,
        quiz_id=row.quiz_id,
        score=row.score,
        passed=row.passed,
        completed_at=row.completed_at,
        answers_json=row.answers_json,
    )


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        user_id=row.user_id,
        path_id=row.path_id,
        certificate_number=row.certificate_number,
        issued_at=row.issued_at,
    )
