from __future__ import annotations

import itertools
import threading
from typing import Protocol

from learning_curve.models.achievement import Achievement, EarnedAchievement


class DataUnavailableError(RuntimeError):
    """The achievement store could not be reached; nothing was granted."""


class AchievementRepo(Protocol):
    async def list_catalog(self) -> list[Achievement]:
        """Active catalog entries in id order."""
        ...

    async def earned_ids(self, user_id: int) -> set[int]: ...

    async def grant_if_absent(
        self, user_id: int, achievement_id: int, earned_at: int
    ) -> EarnedAchievement | None:
        """Insert the earned row unless one exists.

        Returns the new row, or None when the pair was already earned
        (including by a concurrent call).  A returned row is durable.
        """
        ...

    async def list_earned(
        self, user_id: int
    ) -> list[tuple[EarnedAchievement, Achievement]]:
        """Earned rows joined with their catalog entries, newest first."""
        ...


class InMemoryAchievementRepo:
    """Catalog plus earned set.

    The check-and-insert in grant_if_absent runs under a lock so that
    racing requests (TestClient runs handlers on worker threads) can
    never both observe "absent".
    """

    def __init__(self) -> None:
        self._catalog: dict[int, Achievement] = {}
        self._earned: dict[tuple[int, int], EarnedAchievement] = {}
        self._lock = threading.Lock()
        self._earned_ids = itertools.count(1)

    def add_definition(self, achievement: Achievement) -> None:
        self._catalog[achievement.id] = achievement

    async def list_catalog(self) -> list[Achievement]:
        return [self._catalog[i] for i in sorted(self._catalog) if self._catalog[i].is_active]

    async def earned_ids(self, user_id: int) -> set[int]:
        with self._lock:
            return {aid for (uid, aid) in self._earned if uid == user_id}

    async def grant_if_absent(
        self, user_id: int, achievement_id: int, earned_at: int
    ) -> EarnedAchievement | None:
        with self._lock:
            key = (user_id, achievement_id)
            if key in self._earned:
                return None
            earned = EarnedAchievement(
                id=next(self._earned_ids),
                user_id=user_id,
                achievement_id=achievement_id,
                earned_at=earned_at,
            )
            self._earned[key] = earned
            return earned

    async def list_earned(
        self, user_id: int
    ) -> list[tuple[EarnedAchievement, Achievement]]:
        with self._lock:
            rows = [e for (uid, _), e in self._earned.items() if uid == user_id]
        rows.sort(key=lambda e: (e.earned_at, e.id), reverse=True)
        return [(e, self._catalog[e.achievement_id]) for e in rows]
