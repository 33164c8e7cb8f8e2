"""Achievement rule evaluation.

Each catalog entry carries a criteria config such as::

    {"type": "module_completion", "count": 5}
    {"type": "specific_path", "path_slug": "deep-learning"}
    {"type": "onboarding_complete"}

``evaluate`` is pure: it only looks at the config and an ActivityFacts
snapshot, so one facts load serves the whole catalog walk.  Unknown rule
types never match.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from learning_curve.models.achievement import ActivityFacts

logger = logging.getLogger(__name__)

Rule = Callable[[Mapping[str, Any], ActivityFacts], bool]


def _count(criteria: Mapping[str, Any]) -> int:
    return int(criteria.get("count", 1))


def _module_completion(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.modules_completed >= _count(criteria)


def _quiz_passed(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.quizzes_passed >= _count(criteria)


def _quiz_perfect(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.perfect_quizzes >= _count(criteria)


def _path_completion(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.certificates_earned >= _count(criteria)


def _specific_path(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    slug = criteria.get("path_slug")
    return bool(slug) and slug in facts.certified_path_slugs


def _onboarding_complete(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.onboarding_completed


def _note_created(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    return facts.notes_created >= _count(criteria)


RULES: dict[str, Rule] = {
    "module_completion": _module_completion,
    "quiz_passed": _quiz_passed,
    "quiz_perfect": _quiz_perfect,
    "path_completion": _path_completion,
    "specific_path": _specific_path,
    "onboarding_complete": _onboarding_complete,
    "note_created": _note_created,
    # Certificates are per path, so this is the same count as path_completion.
    "certificate_earned": _path_completion,
}


def evaluate(criteria: Mapping[str, Any], facts: ActivityFacts) -> bool:
    rule = RULES.get(str(criteria.get("type", "")))
    if rule is None:
        logger.debug("Unknown achievement rule type=%r", criteria.get("type"))
        return False
    try:
        return rule(criteria, facts)
    except (TypeError, ValueError):
        logger.warning("Malformed achievement criteria %r", dict(criteria))
        return False
