from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Protocol

from learning_curve.models.user import User


class UserRepo(Protocol):
    async def get_by_id(self, user_id: int) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def add(
        self, *, email: str, name: str, created_at: int, role: str = "user"
    ) -> User: ...
    async def update_onboarding(
        self,
        user_id: int,
        *,
        experience_level: str | None,
        learning_goals: tuple[str, ...],
        interests: tuple[str, ...],
    ) -> User | None: ...
    async def list_users(
        self, *, search: str | None, limit: int, offset: int
    ) -> list[User]:
        """Newest first; ``search`` matches name or email, case-insensitively."""
        ...

    async def count_users(
        self,
        *,
        search: str | None = None,
        role: str | None = None,
        created_since: int | None = None,
    ) -> int: ...
    async def update_account(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> User | None:
        """Change the given fields.  Raises ValueError if the email is taken."""
        ...

    async def delete(self, user_id: int) -> bool: ...


def _matches(user: User, search: str | None) -> bool:
    if not search:
        return True
    needle = search.lower()
    return needle in user.name.lower() or needle in user.email.lower()


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_email: dict[str, User] = {}
        self._by_id: dict[int, User] = {}
        self._ids = itertools.count(1)

    async def get_by_id(self, user_id: int) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return self._by_email.get(email)

    async def add(
        self, *, email: str, name: str, created_at: int, role: str = "user"
    ) -> User:
        if email in self._by_email:
            raise ValueError("email already exists")
        user = User(
            id=next(self._ids), email=email, name=name, created_at=created_at, role=role
        )
        self._by_email[email] = user
        self._by_id[user.id] = user
        return user

    async def update_onboarding(
        self,
        user_id: int,
        *,
        experience_level: str | None,
        learning_goals: tuple[str, ...],
        interests: tuple[str, ...],
    ) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None

        updated = replace(
            u,
            experience_level=experience_level,
            learning_goals=learning_goals,
            interests=interests,
            onboarding_completed=True,
        )
        self._store(updated, previous_email=u.email)
        return updated

    async def list_users(
        self, *, search: str | None, limit: int, offset: int
    ) -> list[User]:
        users = [u for u in self._by_id.values() if _matches(u, search)]
        users.sort(key=lambda u: (u.created_at, u.id), reverse=True)
        return users[offset : offset + limit]

    async def count_users(
        self,
        *,
        search: str | None = None,
        role: str | None = None,
        created_since: int | None = None,
    ) -> int:
        return sum(
            1
            for u in self._by_id.values()
            if _matches(u, search)
            and (role is None or u.role == role)
            and (created_since is None or u.created_at >= created_since)
        )

    async def update_account(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
        role: str | None = None,
    ) -> User | None:
        u = self._by_id.get(user_id)
        if u is None:
            return None
        if email is not None and email != u.email and email in self._by_email:
            raise ValueError("email already exists")

        updated = replace(
            u,
            name=u.name if name is None else name,
            email=u.email if email is None else email,
            role=u.role if role is None else role,
        )
        self._store(updated, previous_email=u.email)
        return updated

    async def delete(self, user_id: int) -> bool:
        u = self._by_id.pop(user_id, None)
        if u is None:
            return False
        self._by_email.pop(u.email, None)
        return True

    def _store(self, user: User, *, previous_email: str) -> None:
        if previous_email != user.email:
            self._by_email.pop(previous_email, None)
        self._by_id[user.id] = user
        self._by_email[user.email] = user
