from __future__ import annotations

import asyncio

import pytest

from learning_curve.models.user import User
from learning_curve.repos.user_repo import InMemoryUserRepo
from learning_curve.services import users_service


def _register(repo: InMemoryUserRepo, name: str, email: str) -> tuple[User, bool]:
    return asyncio.run(users_service.register(repo, name=name, email=email))


def test_register_creates_user() -> None:
    repo = InMemoryUserRepo()
    user, created = _register(repo, "Ana", "ana@example.com")
    assert created is True
    assert user.id == 1
    assert user.name == "Ana"
    assert user.onboarding_completed is False


# ---- normalization ----


def test_register_normalizes_email_and_name() -> None:
    repo = InMemoryUserRepo()
    user, _ = _register(repo, "  Ana  ", "  LOUD@Example.COM ")
    assert user.name == "Ana"
    assert user.email == "loud@example.com"


# ---- existing email ----


def test_register_existing_email_returns_stored_user() -> None:
    repo = InMemoryUserRepo()
    first, _ = _register(repo, "Ana", "ana@example.com")
    again, created = _register(repo, "Someone Else", "ANA@example.com")
    assert created is False
    assert again == first
    assert again.name == "Ana"


def test_register_lost_race_returns_winner() -> None:
    repo = InMemoryUserRepo()
    winner, _ = _register(repo, "Ana", "ana@example.com")

    class RacingRepo(InMemoryUserRepo):
        """Misses on the first lookup, as if the insert happened in between."""

        def __init__(self) -> None:
            super().__init__()
            self._lookups = 0

        async def get_by_email(self, email: str) -> User | None:
            self._lookups += 1
            if self._lookups == 1:
                return None
            return await repo.get_by_email(email)

        async def add(
            self, *, email: str, name: str, created_at: int, role: str = "user"
        ) -> User:
            raise ValueError("email already exists")

    user, created = _register(RacingRepo(), "Ana Two", "ana@example.com")
    assert created is False
    assert user == winner


# ---- validation ----


@pytest.mark.parametrize(
    ("name", "email"),
    [("", "ana@example.com"), ("Ana", "   "), ("  ", "")],
)
def test_register_rejects_blank_fields(name: str, email: str) -> None:
    with pytest.raises(users_service.UserValidationError, match="required"):
        _register(InMemoryUserRepo(), name, email)


def test_register_rejects_email_without_at() -> None:
    with pytest.raises(users_service.UserValidationError, match="valid email"):
        _register(InMemoryUserRepo(), "Ana", "ana.example.com")


# ---- onboarding ----


def test_update_onboarding_parses_json_lists() -> None:
    repo = InMemoryUserRepo()
    user, _ = _register(repo, "Ana", "ana@example.com")
    updated = asyncio.run(
        users_service.update_onboarding(
            repo,
            user.id,
            experience_level=" Intermediate ",
            learning_goals='["career", " research "]',
            interests=["nlp", ""],
        )
    )
    assert updated is not None
    assert updated.onboarding_completed is True
    assert updated.experience_level == "intermediate"
    assert updated.learning_goals == ("career", "research")
    assert updated.interests == ("nlp",)


def test_update_onboarding_rejects_unknown_level() -> None:
    repo = InMemoryUserRepo()
    user, _ = _register(repo, "Ana", "ana@example.com")
    with pytest.raises(users_service.UserValidationError, match="experienceLevel"):
        asyncio.run(
            users_service.update_onboarding(
                repo, user.id, experience_level="expert", learning_goals=None, interests=None
            )
        )


def test_update_onboarding_rejects_malformed_list() -> None:
    repo = InMemoryUserRepo()
    user, _ = _register(repo, "Ana", "ana@example.com")
    with pytest.raises(users_service.UserValidationError, match="learningGoals"):
        asyncio.run(
            users_service.update_onboarding(
                repo, user.id, experience_level=None, learning_goals="{nope", interests=None
            )
        )


def test_update_onboarding_unknown_user() -> None:
    result = asyncio.run(
        users_service.update_onboarding(
            InMemoryUserRepo(), 42, experience_level=None, learning_goals=None, interests=None
        )
    )
    assert result is None
