from __future__ import annotations

import asyncio

import httpx

from learning_curve.client.achievements import AchievementChecker
from learning_curve.client.api_client import ApiClient
from learning_curve.client.config import ClientSettings
from learning_curve.client.notifications import AchievementNotifier
from learning_curve.client.storage import InMemoryStorage
from learning_curve.client.tracker import ProgressTracker
from learning_curve.main import app
from tests.conftest import ManualScheduler

SETTINGS = ClientSettings(api_url="http://testserver", http_timeout=5.0, storage_dir=None)


def _check(tracker: ProgressTracker, notifier: AchievementNotifier, transport):
    async def _run():
        async with ApiClient(SETTINGS, transport=transport) as api:
            return await AchievementChecker(tracker, api, notifier).check()

    return asyncio.run(_run())


def _registered_tracker(scheduler: ManualScheduler) -> ProgressTracker:
    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    tracker.register_user("Ana", "ana@example.com", "tok")
    return tracker


def test_anonymous_learner_is_not_checked(scheduler: ManualScheduler) -> None:
    def _no_network(request: httpx.Request) -> httpx.Response:
        raise AssertionError("unexpected request")

    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    notifier = AchievementNotifier(scheduler)
    assert _check(tracker, notifier, httpx.MockTransport(_no_network)) == []


def test_granted_achievements_become_notifications(scheduler: ManualScheduler) -> None:
    def _granted(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(
            200,
            json={
                "newAchievements": [
                    {"id": 1, "key": "first_steps", "title": "First Steps", "points": 10}
                ]
            },
        )

    notifier = AchievementNotifier(scheduler)
    shown = _check(_registered_tracker(scheduler), notifier, httpx.MockTransport(_granted))
    assert [n.key for n in shown] == ["first_steps"]
    assert [n.key for n in notifier.active] == ["first_steps"]


def test_server_error_shows_nothing(scheduler: ManualScheduler) -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": {"message": "Service temporarily unavailable"}})

    notifier = AchievementNotifier(scheduler)
    assert _check(_registered_tracker(scheduler), notifier, httpx.MockTransport(_down)) == []
    assert notifier.active == []


def test_malformed_payload_shows_nothing(scheduler: ManualScheduler) -> None:
    def _odd(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"newAchievements": [{"key": "no_id"}]})

    notifier = AchievementNotifier(scheduler)
    assert _check(_registered_tracker(scheduler), notifier, httpx.MockTransport(_odd)) == []


def test_partly_malformed_payload_leaves_nothing_on_screen(scheduler: ManualScheduler) -> None:
    def _mixed(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "newAchievements": [
                    {"id": 1, "key": "first_steps", "title": "First Steps"},
                    {"id": "six", "key": "perfect_score"},
                ]
            },
        )

    notifier = AchievementNotifier(scheduler)
    assert _check(_registered_tracker(scheduler), notifier, httpx.MockTransport(_mixed)) == []
    assert notifier.active == []
    assert scheduler.pending == []


def test_against_running_app(scheduler: ManualScheduler) -> None:
    async def _run():
        transport = httpx.ASGITransport(app=app)
        async with ApiClient(SETTINGS, transport=transport) as api:
            data = await api.register("Ana", "ana@example.com")
            await api.sync_progress(
                data["token"],
                {"completedModules": [{"moduleId": 101, "completed": True, "score": 90}]},
            )
            tracker = ProgressTracker(InMemoryStorage(), scheduler)
            tracker.register_user(data["name"], data["email"], data["token"])
            checker = AchievementChecker(tracker, api, AchievementNotifier(scheduler))
            return await checker.check(), await checker.check()

    first, second = asyncio.run(_run())
    assert [n.key for n in first] == ["first_steps"]
    assert second == []
