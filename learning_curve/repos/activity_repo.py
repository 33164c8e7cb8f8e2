from __future__ import annotations

from typing import Protocol

from learning_curve.models.achievement import ActivityFacts
from learning_curve.repos.catalog_repo import CatalogRepo
from learning_curve.repos.note_repo import NoteRepo
from learning_curve.repos.progress_repo import ProgressRepo
from learning_curve.repos.user_repo import UserRepo


class ActivityRepo(Protocol):
    async def load_facts(self, user_id: int) -> ActivityFacts: ...


class InMemoryActivityRepo:
    """Derives ActivityFacts from the other in-memory stores."""

    def __init__(
        self,
        *,
        users: UserRepo,
        catalog: CatalogRepo,
        progress: ProgressRepo,
        notes: NoteRepo,
    ) -> None:
        self._users = users
        self._catalog = catalog
        self._progress = progress
        self._notes = notes

    async def load_facts(self, user_id: int) -> ActivityFacts:
        user = await self._users.get_by_id(user_id)
        completions = await self._progress.list_completions(user_id)
        attempts = await self._progress.list_quiz_attempts(user_id)
        certificates = await self._progress.list_certificates(user_id)
        notes = await self._notes.list_for_user(user_id)

        slugs: set[str] = set()
        for cert in certificates:
            path = await self._catalog.get_path(cert.path_id)
            if path is not None:
                slugs.add(path.slug)

        return ActivityFacts(
            modules_completed=sum(1 for c in completions if c.is_completed),
            quizzes_passed=sum(1 for a in attempts if a.passed),
            perfect_quizzes=sum(1 for a in attempts if a.score == 100),
            certificates_earned=len(certificates),
            certified_path_slugs=frozenset(slugs),
            onboarding_completed=bool(user and user.onboarding_completed),
            notes_created=len(notes),
        )
