"""Achievement reconciliation.

check_all() is a pass over the catalog for one user:

  1. load the ids the user has already earned
  2. load the user's activity facts once
  3. walk the active catalog in id order and evaluate each unearned rule
  4. grant each satisfied rule with an insert-if-absent

Only rows this call inserted are returned, so two overlapping passes for
the same user can both see a rule satisfied but only one of them
reports it.  The pass is safe to repeat; a second call with unchanged
activity returns [].
"""

from __future__ import annotations

import json
import logging
import time

from learning_curve.core.metrics import ACHIEVEMENT_CHECKS, ACHIEVEMENTS_GRANTED
from learning_curve.models.achievement import Achievement, EarnedAchievement
from learning_curve.repos.achievement_repo import AchievementRepo, DataUnavailableError
from learning_curve.repos.activity_repo import ActivityRepo
from learning_curve.services.achievement_rules import evaluate
from learning_curve.services.cache import cache_service

logger = logging.getLogger(__name__)

_SUMMARY_CACHE_TTL = 300


def _summary_key(user_id: int) -> str:
    return f"achievements:{user_id}:summary"


async def check_all(
    achievements: AchievementRepo,
    activity: ActivityRepo,
    user_id: int,
    *,
    now: int | None = None,
) -> list[Achievement]:
    """Grant every newly satisfied achievement; return only those granted here.

    Raises DataUnavailableError when the store cannot be reached.  Grants
    made before the failure are committed and will simply not be
    returned again.
    """
    earned_at = now if now is not None else int(time.time())
    granted: list[Achievement] = []
    try:
        earned = await achievements.earned_ids(user_id)
        facts = await activity.load_facts(user_id)
        catalog = await achievements.list_catalog()

        for achievement in catalog:
            if achievement.id in earned:
                continue
            if not evaluate(achievement.criteria, facts):
                continue
            row = await achievements.grant_if_absent(user_id, achievement.id, earned_at)
            if row is None:
                logger.debug(
                    "Achievement already granted concurrently user_id=%d key=%s",
                    user_id,
                    achievement.key,
                )
                continue
            ACHIEVEMENTS_GRANTED.labels(key=achievement.key).inc()
            logger.info(
                "Achievement granted user_id=%d key=%s",
                user_id,
                achievement.key,
                extra={"user_id": user_id, "achievement_key": achievement.key},
            )
            granted.append(achievement)
    except DataUnavailableError:
        ACHIEVEMENT_CHECKS.labels(result="unavailable").inc()
        if granted:
            await cache_service.delete(_summary_key(user_id))
        logger.warning("Achievement check aborted user_id=%d: store unavailable", user_id)
        raise

    if granted:
        await cache_service.delete(_summary_key(user_id))
    ACHIEVEMENT_CHECKS.labels(result="granted" if granted else "none").inc()
    return granted


async def list_earned(
    achievements: AchievementRepo, user_id: int
) -> list[tuple[EarnedAchievement, Achievement]]:
    """The user's earned achievements, newest first."""
    return await achievements.list_earned(user_id)


async def progress_summary(achievements: AchievementRepo, user_id: int) -> dict[str, int]:
    """{total, earned, points} for the user; read-through cached."""
    key = _summary_key(user_id)
    cached = await cache_service.get(key)
    if cached is not None:
        return json.loads(cached)

    catalog = await achievements.list_catalog()
    earned = await achievements.earned_ids(user_id)
    summary = {
        "total": len(catalog),
        "earned": sum(1 for a in catalog if a.id in earned),
        "points": sum(a.points for a in catalog if a.id in earned),
    }
    await cache_service.set(key, json.dumps(summary), _SUMMARY_CACHE_TTL)
    return summary
