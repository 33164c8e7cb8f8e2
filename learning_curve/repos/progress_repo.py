from __future__ import annotations

import itertools
from typing import Protocol

from learning_curve.models.progress import (
    Certificate,
    ModuleCompletion,
    PathEnrollment,
    QuizAttempt,
)


class ProgressRepo(Protocol):
    async def enroll(
        self, user_id: int, path_id: int, enrolled_at: int
    ) -> tuple[PathEnrollment, bool]: ...
    async def get_enrollment(
        self, user_id: int, path_id: int
    ) -> PathEnrollment | None: ...
    async def list_enrollments(self, user_id: int) -> list[PathEnrollment]: ...
    async def get_completion(
        self, user_id: int, module_id: int
    ) -> ModuleCompletion | None: ...
    async def upsert_completion(
        self, completion: ModuleCompletion
    ) -> ModuleCompletion: ...
    async def list_completions(self, user_id: int) -> list[ModuleCompletion]: ...
    async def add_quiz_attempt(
        self,
        *,
        user_id: int,
        quiz_id: int,
        score: int,
        passed: bool,
        answers_json: str,
        completed_at: int,
    ) -> QuizAttempt: ...
    async def list_quiz_attempts(
        self, user_id: int, quiz_id: int | None = None
    ) -> list[QuizAttempt]: ...
    async def add_certificate(
        self, *, user_id: int, path_id: int, certificate_number: str, issued_at: int
    ) -> Certificate: ...
    async def get_certificate(self, user_id: int, path_id: int) -> Certificate | None: ...
    async def get_certificate_by_number(self, number: str) -> Certificate | None: ...
    async def list_certificates(self, user_id: int) -> list[Certificate]: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        self._enrollments: dict[tuple[int, int], PathEnrollment] = {}
        self._completions: dict[tuple[int, int], ModuleCompletion] = {}
        self._attempts: list[QuizAttempt] = []
        self._certificates: dict[tuple[int, int], Certificate] = {}
        self._attempt_ids = itertools.count(1)
        self._certificate_ids = itertools.count(1)

    # --- enrollments ---

    async def enroll(
        self, user_id: int, path_id: int, enrolled_at: int
    ) -> tuple[PathEnrollment, bool]:
        key = (user_id, path_id)
        existing = self._enrollments.get(key)
        if existing is not None:
            return existing, False
        enrollment = PathEnrollment(
            user_id=user_id, path_id=path_id, enrolled_at=enrolled_at
        )
        self._enrollments[key] = enrollment
        return enrollment, True

    async def get_enrollment(self, user_id: int, path_id: int) -> PathEnrollment | None:
        return self._enrollments.get((user_id, path_id))

    async def list_enrollments(self, user_id: int) -> list[PathEnrollment]:
        return [e for (uid, _), e in self._enrollments.items() if uid == user_id]

    # --- module completions ---

    async def get_completion(
        self, user_id: int, module_id: int
    ) -> ModuleCompletion | None:
        return self._completions.get((user_id, module_id))

    async def upsert_completion(self, completion: ModuleCompletion) -> ModuleCompletion:
        self._completions[(completion.user_id, completion.module_id)] = completion
        return completion

    async def list_completions(self, user_id: int) -> list[ModuleCompletion]:
        return [c for (uid, _), c in self._completions.items() if uid == user_id]

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
        attempt = QuizAttempt(
            id=next(self._attempt_ids),
            user_id=user_id,
            quiz_id=quiz_id,
            score=score,
            passed=passed,
            completed_at=completed_at,
            answers_json=answers_json,
        )
        self._attempts.append(attempt)
        return attempt

    async def list_quiz_attempts(
        self, user_id: int, quiz_id: int | None = None
    ) -> list[QuizAttempt]:
        return [
            a
            for a in self._attempts
            if a.user_id == user_id and (quiz_id is None or a.quiz_id == quiz_id)
        ]

    # --- certificates ---

    async def add_certificate(
        self, *, user_id: int, path_id: int, certificate_number: str, issued_at: int
    ) -> Certificate:
        key = (user_id, path_id)
        if key in self._certificates:
            raise ValueError("certificate already issued")
        certificate = Certificate(
            id=next(self._certificate_ids),
            user_id=user_id,
            path_id=path_id,
            certificate_number=certificate_number,
            issued_at=issued_at,
        )
        self._certificates[key] = certificate
        return certificate

    async def get_certificate(self, user_id: int, path_id: int) -> Certificate | None:
        return self._certificates.get((user_id, path_id))

    async def get_certificate_by_number(self, number: str) -> Certificate | None:
        return next(
            (
                c
                for c in self._certificates.values()
                if c.certificate_number == number
            ),
            None,
        )

    async def list_certificates(self, user_id: int) -> list[Certificate]:
        return [c for (uid, _), c in self._certificates.items() if uid == user_id]
