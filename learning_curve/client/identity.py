"""Identity capture: turns an anonymous learner into a registered one.

Shown when the tracker reports ``registration_required``.  Input is
validated locally first, so obviously bad input never reaches the
network.  On success the identity is stored on the tracker and the
local progress is uploaded once; from then on the server's records win.
"""

from __future__ import annotations

import logging

from learning_curve.client.api_client import ApiClient, ApiError
from learning_curve.client.snapshot import UserIdentity, snapshot_to_dict
from learning_curve.client.tracker import ProgressTracker

logger = logging.getLogger(__name__)


class RegistrationError(Exception):
    pass


class IdentityCapture:
    def __init__(self, tracker: ProgressTracker, api: ApiClient) -> None:
        self._tracker = tracker
        self._api = api
        self.submitting = False

    async def submit(self, name: str, email: str) -> UserIdentity:
        """Register and return the stored identity.

        Raises RegistrationError with a message fit for display.  On any
        failure the tracker is left exactly as it was.
        """
        name = name.strip()
        email = email.strip().lower()
        if not name or not email:
            raise RegistrationError("Please enter both name and email")
        if "@" not in email:
            raise RegistrationError("Please enter a valid email address")

        self.submitting = True
        try:
            data = await self._api.register(name, email)
        except ApiError as e:
            logger.warning("Registration failed: %s", e.message)
            raise RegistrationError(e.message or "Registration failed") from None
        finally:
            self.submitting = False

        # An existing email keeps the name it was first registered with.
        identity = UserIdentity(
            name=data.get("name", name), email=data.get("email", email), token=data["token"]
        )
        self._tracker.register_user(identity.name, identity.email, identity.token)
        await self._sync(identity.token)
        return identity

    async def _sync(self, token: str) -> None:
        # Best effort: progress stays local and is offered again on the next sync.
        try:
            merged = await self._api.sync_progress(
                token, snapshot_to_dict(self._tracker.snapshot)
            )
        except ApiError as e:
            logger.warning("Progress sync after registration failed: %s", e.message)
            return
        try:
            self._tracker.merge_server_snapshot(merged)
        except ValueError as e:
            logger.warning("Ignoring malformed server snapshot: %s", e)
