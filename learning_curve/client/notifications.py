"""Achievement notifications.

Each newly granted achievement becomes one notification.  They stack in
the order shown; each one closes itself after ``display_seconds`` unless
dismissed first.  Dismissing only removes the notification: it never
re-runs the achievement check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from learning_curve.client.scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)

DISPLAY_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class Notification:
    achievement_id: int
    key: str
    title: str
    description: str
    icon: str
    rarity: str
    points: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Notification:
        return cls(
            achievement_id=int(data["id"]),
            key=str(data.get("key", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            icon=str(data.get("icon", "")),
            rarity=str(data.get("rarity", "common")),
            points=int(data.get("points", 0)),
        )


class AchievementNotifier:
    def __init__(
        self, scheduler: Scheduler, *, display_seconds: float = DISPLAY_SECONDS
    ) -> None:
        self._scheduler = scheduler
        self._display_seconds = display_seconds
        self._active: dict[int, Notification] = {}
        self._timers: dict[int, Handle] = {}

    @property
    def active(self) -> list[Notification]:
        """Visible notifications; list index is the stack slot."""
        return list(self._active.values())

    def show(self, achievements: list[dict[str, Any]]) -> list[Notification]:
        """Add a notification per achievement not already on screen.

        The whole payload is parsed before anything is shown, so a malformed
        entry raises without leaving part of the batch on screen.
        """
        parsed = [Notification.from_api(data) for data in achievements]
        added: list[Notification] = []
        for note in parsed:
            if note.achievement_id in self._active:
                continue
            self._active[note.achievement_id] = note
            self._timers[note.achievement_id] = self._scheduler.call_later(
                self._display_seconds,
                lambda aid=note.achievement_id: self._expire(aid),
            )
            added.append(note)
            logger.info("Achievement unlocked: %s", note.title)
        return added

    def dismiss(self, achievement_id: int) -> None:
        timer = self._timers.pop(achievement_id, None)
        if timer is not None:
            timer.cancel()
        self._active.pop(achievement_id, None)

    def _expire(self, achievement_id: int) -> None:
        self._timers.pop(achievement_id, None)
        self._active.pop(achievement_id, None)

    def close(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._active.clear()
