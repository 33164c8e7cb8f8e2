from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Achievement:
    """Catalog entry.  Defined once, never mutated by user action.

    ``criteria`` is rule configuration, e.g. ``{"type": "module_completion",
    "count": 5}``; see learning_curve/services/achievement_rules.py.
    """

    id: int
    key: str
    title: str
    description: str
    icon: str
    category: str
    points: int
    rarity: str = "common"
    criteria: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class EarnedAchievement:
    """One row per (user, achievement); the duplicate-grant anchor."""

    id: int
    user_id: int
    achievement_id: int
    earned_at: int


@dataclass(frozen=True, slots=True)
class ActivityFacts:
    """Everything the rule set needs about one user, loaded in one pass."""

    modules_completed: int = 0
    quizzes_passed: int = 0
    perfect_quizzes: int = 0
    certificates_earned: int = 0
    certified_path_slugs: frozenset[str] = frozenset()
    onboarding_completed: bool = False
    notes_created: int = 0
