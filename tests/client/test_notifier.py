from __future__ import annotations

import pytest

from learning_curve.client.notifications import DISPLAY_SECONDS, AchievementNotifier
from tests.conftest import ManualScheduler


def _achievement(achievement_id: int, key: str) -> dict:
    return {
        "id": achievement_id,
        "key": key,
        "title": key.replace("_", " ").title(),
        "description": "",
        "icon": "Award",
        "category": "module",
        "points": 10,
        "rarity": "common",
    }


def test_notifications_stack_in_order(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler)
    notifier.show([_achievement(1, "first_steps"), _achievement(5, "quiz_novice")])
    assert [n.key for n in notifier.active] == ["first_steps", "quiz_novice"]
    assert notifier.active[0].title == "First Steps"


def test_each_notification_expires_on_its_own_timer(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler)
    notifier.show([_achievement(1, "first_steps")])
    scheduler.advance(2)
    notifier.show([_achievement(5, "quiz_novice")])

    scheduler.advance(DISPLAY_SECONDS - 2)
    assert [n.key for n in notifier.active] == ["quiz_novice"]
    scheduler.advance(2)
    assert notifier.active == []


def test_dismiss_cancels_timer(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler)
    notifier.show([_achievement(1, "first_steps"), _achievement(5, "quiz_novice")])
    notifier.dismiss(1)

    assert [n.key for n in notifier.active] == ["quiz_novice"]
    assert len(scheduler.pending) == 1
    notifier.dismiss(1)


def test_already_visible_achievement_is_not_shown_twice(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler)
    notifier.show([_achievement(1, "first_steps")])
    added = notifier.show([_achievement(1, "first_steps")])
    assert added == []
    assert len(notifier.active) == 1
    assert len(scheduler.pending) == 1


def test_close_clears_everything(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler, display_seconds=1)
    notifier.show([_achievement(1, "first_steps"), _achievement(5, "quiz_novice")])
    notifier.close()
    assert notifier.active == []
    assert scheduler.pending == []


def test_malformed_entry_rejects_the_whole_batch(scheduler: ManualScheduler) -> None:
    notifier = AchievementNotifier(scheduler)
    malformed = {"key": "quiz_novice", "title": "Quiz Novice"}

    with pytest.raises(KeyError):
        notifier.show([_achievement(1, "first_steps"), malformed])

    assert notifier.active == []
    assert scheduler.pending == []
