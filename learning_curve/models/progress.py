from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PathEnrollment:
    """Server-side enrollment; one per (user, path)."""

    user_id: int
    path_id: int
    enrolled_at: int


@dataclass(frozen=True, slots=True)
class ModuleCompletion:
    """Server-side module progress; one per (user, module)."""

    user_id: int
    module_id: int
    status: str = "not_started"  # not_started|in_progress|completed
    score: float | None = None
    completed_at: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    id: int
    user_id: int
    quiz_id: int
    score: int  # 0-100
    passed: bool
    completed_at: int
    answers_json: str = "[]"


@dataclass(frozen=True, slots=True)
class Certificate:
    """Issued on completing every published module of a path."""

    id: int
    user_id: int
    path_id: int
    certificate_number: str
    issued_at: int
