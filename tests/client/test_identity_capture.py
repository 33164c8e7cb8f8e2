"""Identity capture against the real app (ASGI transport) and canned transports."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from learning_curve.client.api_client import ApiClient
from learning_curve.client.config import ClientSettings
from learning_curve.client.identity import IdentityCapture, RegistrationError
from learning_curve.client.storage import InMemoryStorage
from learning_curve.client.tracker import ProgressTracker
from learning_curve.main import app
from tests.conftest import ManualScheduler

SETTINGS = ClientSettings(api_url="http://testserver", http_timeout=5.0, storage_dir=None)


def _no_network(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


def _submit(
    tracker: ProgressTracker, transport: httpx.AsyncBaseTransport, name: str, email: str
):
    async def _run():
        async with ApiClient(SETTINGS, transport=transport) as api:
            return await IdentityCapture(tracker, api).submit(name, email)

    return asyncio.run(_run())


@pytest.mark.parametrize(
    ("name", "email", "message"),
    [
        ("", "ana@example.com", "Please enter both name and email"),
        ("Ana", "  ", "Please enter both name and email"),
        ("Ana", "ana.example.com", "Please enter a valid email address"),
    ],
)
def test_invalid_input_never_reaches_network(
    scheduler: ManualScheduler, name: str, email: str, message: str
) -> None:
    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    with pytest.raises(RegistrationError, match=message):
        _submit(tracker, httpx.MockTransport(_no_network), name, email)
    assert tracker.identity is None


def test_registers_and_uploads_local_progress(scheduler: ManualScheduler) -> None:
    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    tracker.complete_module(101, score=80)
    tracker.enroll_in_path(1)
    scheduler.advance(1.0)
    assert tracker.registration_required is True

    identity = _submit(tracker, httpx.ASGITransport(app=app), " Ana ", " ANA@Example.com ")

    assert identity.name == "Ana"
    assert identity.email == "ana@example.com"
    assert identity.token
    assert tracker.identity == identity
    assert tracker.registration_required is False
    # Reply from the sync was merged back; the upload was accepted.
    assert tracker.get_module_score(101) == 80
    assert tracker.is_enrolled_in_path(1) is True


def test_server_message_is_surfaced(scheduler: ManualScheduler) -> None:
    def _reject(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": {"message": "Email is blocked"}})

    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    with pytest.raises(RegistrationError, match="Email is blocked"):
        _submit(tracker, httpx.MockTransport(_reject), "Ana", "ana@example.com")
    assert tracker.identity is None


def test_network_failure_uses_generic_message(scheduler: ManualScheduler) -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    tracker.complete_module(101)
    before = tracker.snapshot
    with pytest.raises(RegistrationError, match="Registration failed"):
        _submit(tracker, httpx.MockTransport(_down), "Ana", "ana@example.com")
    assert tracker.identity is None
    assert tracker.snapshot == before


def test_timeout_is_reported(scheduler: ManualScheduler) -> None:
    def _slow(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    with pytest.raises(RegistrationError, match="timed out"):
        _submit(tracker, httpx.MockTransport(_slow), "Ana", "ana@example.com")


def test_failed_sync_still_registers(scheduler: ManualScheduler) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/users/register":
            return httpx.Response(
                201, json={"token": "tok", "name": "Ana", "email": "ana@example.com"}
            )
        return httpx.Response(503, json={"detail": {"message": "Service temporarily unavailable"}})

    tracker = ProgressTracker(InMemoryStorage(), scheduler)
    tracker.complete_module(101)
    identity = _submit(tracker, httpx.MockTransport(_handler), "Ana", "ana@example.com")
    assert identity.token == "tok"
    assert tracker.identity == identity
    assert tracker.is_module_completed(101) is True


def test_returning_device_adopts_server_progress(scheduler: ManualScheduler) -> None:
    async def _run() -> ProgressTracker:
        async with ApiClient(SETTINGS, transport=httpx.ASGITransport(app=app)) as api:
            first = ProgressTracker(InMemoryStorage(), scheduler)
            first.complete_module(101, score=80)
            await IdentityCapture(first, api).submit("Ana", "ana@example.com")

            # Same learner on a fresh device: only the identity is known.
            second = ProgressTracker(InMemoryStorage(), scheduler)
            identity = await IdentityCapture(second, api).submit("Ana", "ana@example.com")
            second.merge_server_snapshot(await api.get_progress(identity.token))
            return second

    tracker = asyncio.run(_run())
    assert tracker.get_module_score(101) == 80


def test_existing_email_keeps_registered_name(scheduler: ManualScheduler) -> None:
    async def _run():
        async with ApiClient(SETTINGS, transport=httpx.ASGITransport(app=app)) as api:
            await IdentityCapture(
                ProgressTracker(InMemoryStorage(), scheduler), api
            ).submit("Ana Original", "ana@example.com")
            tracker = ProgressTracker(InMemoryStorage(), scheduler)
            identity = await IdentityCapture(tracker, api).submit("Someone Else", "ana@example.com")
            return tracker, identity

    tracker, identity = asyncio.run(_run())
    assert identity.name == "Ana Original"
    assert tracker.identity is not None
    assert tracker.identity.name == "Ana Original"
