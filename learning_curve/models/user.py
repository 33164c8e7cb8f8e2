from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class User:
    id: int
    email: str
    name: str
    created_at: int
    role: str = "user"  # user|admin
    experience_level: str | None = None  # beginner|intermediate|advanced
    learning_goals: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    onboarding_completed: bool = False
