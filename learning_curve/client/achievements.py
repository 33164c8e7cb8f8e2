from __future__ import annotations

import logging

from learning_curve.client.api_client import ApiClient, ApiError
from learning_curve.client.notifications import AchievementNotifier, Notification
from learning_curve.client.tracker import ProgressTracker

logger = logging.getLogger(__name__)


class AchievementChecker:
    """Asks the server for newly earned achievements and shows them.

    Anonymous learners have nothing to check.  Failures are logged and
    reported as "nothing new"; the next check picks up anything missed.
    """

    def __init__(
        self, tracker: ProgressTracker, api: ApiClient, notifier: AchievementNotifier
    ) -> None:
        self._tracker = tracker
        self._api = api
        self._notifier = notifier

    async def check(self) -> list[Notification]:
        identity = self._tracker.identity
        if identity is None:
            return []
        try:
            granted = await self._api.check_achievements(identity.token)
        except ApiError as e:
            logger.warning("Achievement check failed: %s", e.message)
            return []
        try:
            return self._notifier.show(granted)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed achievement payload: %s", e)
            return []
