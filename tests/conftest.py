from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from learning_curve.api import dependencies
from learning_curve.main import app
from learning_curve.services import token_service
from learning_curve.services.cache import cache_service

# Ensure repo root is on sys.path so `from tests.conftest import ...` works.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Fresh in-memory stores (sample catalog + built-in achievements)."""
    dependencies.memory_repos = dependencies.build_memory_repos()


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: int = 1, roles: list[str] | None = None) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=str(user_id), roles=roles)


@pytest.fixture
def token() -> str:
    return mint_token()


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(
    client: TestClient, name: str = "Ana", email: str = "ana@example.com"
) -> str:
    """Register through the API and return the issued token."""
    resp = client.post("/v1/users/register", json={"name": name, "email": email})
    assert resp.status_code in (200, 201), resp.text
    return resp.json()["token"]


# ---------------------------------------------------------------------------
# Manual scheduler: timers fire only when the test advances the clock
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ManualHandle:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    now: float = 0.0
    handles: list[ManualHandle] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(due=self.now + delay, callback=callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [h for h in self.handles if not h.cancelled and h.due <= self.now]
        self.handles = [h for h in self.handles if h not in due]
        for h in sorted(due, key=lambda h: h.due):
            h.callback()

    @property
    def pending(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
