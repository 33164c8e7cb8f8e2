"""Reconciliation pass: idempotence, overlapping calls, store failures."""

from __future__ import annotations

import asyncio

import pytest

from learning_curve.models.achievement import Achievement, ActivityFacts
from learning_curve.repos.achievement_repo import DataUnavailableError, InMemoryAchievementRepo
from learning_curve.services import achievement_service
from learning_curve.services.achievement_rules import evaluate
from learning_curve.services.cache import cache_service


class FakeActivity:
    """Facts set directly by the test; yields once so calls can interleave."""

    def __init__(self, facts: ActivityFacts | None = None) -> None:
        self.facts = facts or ActivityFacts()

    async def load_facts(self, user_id: int) -> ActivityFacts:
        await asyncio.sleep(0)
        return self.facts


def _first_module_repo() -> InMemoryAchievementRepo:
    repo = InMemoryAchievementRepo()
    repo.add_definition(
        Achievement(
            id=1,
            key="first_module",
            title="First Module",
            description="Complete a module",
            icon="Footprints",
            category="module",
            points=10,
            rarity="common",
            criteria={"type": "module_completion", "count": 1},
        )
    )
    return repo


def _keys(achievements: list[Achievement]) -> list[str]:
    return [a.key for a in achievements]


def test_first_module_granted_exactly_once() -> None:
    repo = _first_module_repo()
    activity = FakeActivity()

    assert asyncio.run(achievement_service.check_all(repo, activity, 1)) == []

    activity.facts = ActivityFacts(modules_completed=1)
    assert _keys(asyncio.run(achievement_service.check_all(repo, activity, 1))) == [
        "first_module"
    ]
    assert asyncio.run(achievement_service.check_all(repo, activity, 1)) == []


def test_overlapping_checks_report_grant_once() -> None:
    repo = _first_module_repo()
    activity = FakeActivity(ActivityFacts(modules_completed=1))

    async def _race() -> list[list[Achievement]]:
        return list(
            await asyncio.gather(
                achievement_service.check_all(repo, activity, 1),
                achievement_service.check_all(repo, activity, 1),
            )
        )

    first, second = asyncio.run(_race())
    assert sorted([len(first), len(second)]) == [0, 1]
    assert asyncio.run(repo.earned_ids(1)) == {1}


def test_grants_are_per_user() -> None:
    repo = _first_module_repo()
    activity = FakeActivity(ActivityFacts(modules_completed=1))
    asyncio.run(achievement_service.check_all(repo, activity, 1))
    assert _keys(asyncio.run(achievement_service.check_all(repo, activity, 2))) == [
        "first_module"
    ]


def test_earned_at_uses_supplied_clock() -> None:
    repo = _first_module_repo()
    activity = FakeActivity(ActivityFacts(modules_completed=1))
    asyncio.run(achievement_service.check_all(repo, activity, 1, now=1_700_000_000))
    [(earned, achievement)] = asyncio.run(achievement_service.list_earned(repo, 1))
    assert earned.earned_at == 1_700_000_000
    assert achievement.key == "first_module"


def test_store_failure_propagates_without_reporting_grants() -> None:
    repo = _first_module_repo()

    async def _down(user_id: int, achievement_id: int, earned_at: int):
        raise DataUnavailableError("down")

    repo.grant_if_absent = _down  # type: ignore[method-assign]
    with pytest.raises(DataUnavailableError):
        asyncio.run(
            achievement_service.check_all(
                repo, FakeActivity(ActivityFacts(modules_completed=1)), 1
            )
        )


def test_summary_is_cached_until_next_grant() -> None:
    repo = _first_module_repo()
    activity = FakeActivity()

    assert asyncio.run(achievement_service.progress_summary(repo, 1)) == {
        "total": 1,
        "earned": 0,
        "points": 0,
    }
    assert asyncio.run(cache_service.get("achievements:1:summary")) is not None

    activity.facts = ActivityFacts(modules_completed=1)
    asyncio.run(achievement_service.check_all(repo, activity, 1))
    assert asyncio.run(cache_service.get("achievements:1:summary")) is None
    assert asyncio.run(achievement_service.progress_summary(repo, 1))["points"] == 10


# ---- rules ----


@pytest.mark.parametrize(
    ("criteria", "facts", "expected"),
    [
        ({"type": "module_completion", "count": 5}, ActivityFacts(modules_completed=4), False),
        ({"type": "module_completion", "count": 5}, ActivityFacts(modules_completed=5), True),
        ({"type": "quiz_passed"}, ActivityFacts(quizzes_passed=1), True),
        ({"type": "quiz_perfect", "count": 5}, ActivityFacts(perfect_quizzes=2), False),
        ({"type": "path_completion", "count": 1}, ActivityFacts(certificates_earned=1), True),
        (
            {"type": "specific_path", "path_slug": "deep-learning"},
            ActivityFacts(certified_path_slugs=frozenset({"machine-learning"})),
            False,
        ),
        (
            {"type": "specific_path", "path_slug": "deep-learning"},
            ActivityFacts(certified_path_slugs=frozenset({"deep-learning"})),
            True,
        ),
        ({"type": "onboarding_complete"}, ActivityFacts(onboarding_completed=True), True),
        ({"type": "note_created", "count": 1}, ActivityFacts(), False),
        ({"type": "certificate_earned", "count": 1}, ActivityFacts(certificates_earned=1), True),
    ],
)
def test_rule_evaluation(criteria: dict, facts: ActivityFacts, expected: bool) -> None:
    assert evaluate(criteria, facts) is expected


def test_unknown_rule_type_never_matches() -> None:
    assert evaluate({"type": "streak_days", "count": 0}, ActivityFacts()) is False


def test_malformed_count_never_matches() -> None:
    facts = ActivityFacts(modules_completed=100)
    assert evaluate({"type": "module_completion", "count": "lots"}, facts) is False
