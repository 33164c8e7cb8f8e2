from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LearningPath:
    id: int
    slug: str
    title: str
    difficulty: str  # beginner|intermediate|advanced
    description: str = ""
    position: int = 0
    is_published: bool = True


@dataclass(frozen=True, slots=True)
class Module:
    id: int
    path_id: int
    slug: str
    title: str
    difficulty: str
    position: int = 0
    is_published: bool = True


@dataclass(frozen=True, slots=True)
class Quiz:
    """At most one quiz per module."""

    id: int
    module_id: int
    title: str
    description: str = ""
    passing_score: int = 70


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    id: int
    quiz_id: int
    question: str
    question_type: str  # multiple_choice|true_false|code
    correct_answer: str
    options: tuple[str, ...] = ()
    explanation: str = ""
    position: int = 0


@dataclass(frozen=True, slots=True)
class Resource:
    id: int
    title: str
    resource_type: str  # article|video|tool|course|book|documentation
    description: str = ""
    url: str | None = None
    difficulty: str | None = None
    tags: tuple[str, ...] = ()
    is_premium: bool = False
    is_published: bool = True
