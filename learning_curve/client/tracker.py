"""Local progress tracker.

Keeps the learner's progress in durable client storage so it survives
restarts without an account.  Two blobs are stored:

  ai_learning_progress   the ProgressSnapshot (completions, enrollments,
                         onboarding answers)
  ai_learning_user       the UserIdentity, once the learner registered

Every mutation replaces the in-memory snapshot and writes the whole blob
back, so a reader never sees a half-applied change.  Storage failures
are logged and swallowed: the tracker keeps working from memory.

Registration prompt: after each module completion a check is scheduled
``prompt_delay`` seconds later (letting the completion UI settle).  When
it fires with no identity stored and at least one completion present,
``registration_required`` turns true.  A newer completion cancels a still
pending check and schedules its own.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime

from learning_curve.client.config import ClientSettings, load_client_settings
from learning_curve.client.scheduler import AsyncioScheduler, Handle, Scheduler
from learning_curve.client.snapshot import (
    ModuleProgress,
    PathEnrollment,
    ProgressSnapshot,
    UserIdentity,
    identity_from_json,
    identity_to_json,
    snapshot_from_dict,
    snapshot_from_json,
    snapshot_to_dict,
)
from learning_curve.client.storage import (
    FileStorage,
    InMemoryStorage,
    KeyValueStorage,
    StorageError,
)

logger = logging.getLogger(__name__)

PROGRESS_KEY = "ai_learning_progress"
USER_KEY = "ai_learning_user"
REGISTRATION_PROMPT_DELAY = 1.0


def _utcnow_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ProgressTracker:
    def __init__(
        self,
        storage: KeyValueStorage,
        scheduler: Scheduler,
        *,
        prompt_delay: float = REGISTRATION_PROMPT_DELAY,
        clock: Callable[[], str] = _utcnow_iso,
    ) -> None:
        self._storage = storage
        self._scheduler = scheduler
        self._prompt_delay = prompt_delay
        self._clock = clock
        self._prompt_open = False
        self._pending: Handle | None = None
        self._snapshot = self._load_snapshot()
        self._identity = self._load_identity()

    # --- storage ----------------------------------------------------------

    def _load_snapshot(self) -> ProgressSnapshot:
        try:
            raw = self._storage.get(PROGRESS_KEY)
            if raw is None:
                return ProgressSnapshot()
            return snapshot_from_json(raw)
        except (StorageError, ValueError) as e:
            logger.warning("Failed to load progress; starting empty: %s", e)
            return ProgressSnapshot()

    def _load_identity(self) -> UserIdentity | None:
        try:
            raw = self._storage.get(USER_KEY)
            if raw is None:
                return None
            return identity_from_json(raw)
        except (StorageError, ValueError) as e:
            logger.warning("Failed to load stored identity: %s", e)
            return None

    def _save(self, snapshot: ProgressSnapshot) -> None:
        self._snapshot = snapshot
        try:
            self._storage.set(PROGRESS_KEY, json.dumps(snapshot_to_dict(snapshot)))
        except StorageError as e:
            logger.error("Failed to save progress: %s", e)

    # --- reads --------------------------------------------------------------

    @property
    def snapshot(self) -> ProgressSnapshot:
        return self._snapshot

    @property
    def identity(self) -> UserIdentity | None:
        return self._identity

    def is_module_completed(self, module_id: int) -> bool:
        return any(
            m.module_id == module_id and m.completed
            for m in self._snapshot.completed_modules
        )

    def is_enrolled_in_path(self, path_id: int) -> bool:
        return any(p.path_id == path_id for p in self._snapshot.enrolled_paths)

    def get_module_score(self, module_id: int) -> float | None:
        for m in self._snapshot.completed_modules:
            if m.module_id == module_id:
                return m.score
        return None

    # --- mutations -----------------------------------------------------------

    def complete_module(self, module_id: int, score: float | None = None) -> None:
        """Record a completion, replacing any earlier record for the module."""
        entry = ModuleProgress(
            module_id=module_id,
            completed=True,
            score=score,
            completed_at=self._clock(),
        )
        modules = list(self._snapshot.completed_modules)
        for i, m in enumerate(modules):
            if m.module_id == module_id:
                modules[i] = entry
                break
        else:
            modules.append(entry)

        self._save(replace(self._snapshot, completed_modules=tuple(modules)))
        self._schedule_registration_check()

    def enroll_in_path(self, path_id: int) -> None:
        if self.is_enrolled_in_path(path_id):
            return
        enrollment = PathEnrollment(path_id=path_id, enrolled_at=self._clock())
        self._save(
            replace(
                self._snapshot,
                enrolled_paths=self._snapshot.enrolled_paths + (enrollment,),
            )
        )

    def complete_onboarding(
        self,
        experience_level: str | None = None,
        learning_goals: Iterable[str] | None = None,
        interests: Iterable[str] | None = None,
    ) -> None:
        """Merge the supplied answers; fields left as None keep their value."""
        s = self._snapshot
        self._save(
            replace(
                s,
                experience_level=(
                    experience_level if experience_level is not None else s.experience_level
                ),
                learning_goals=(
                    tuple(learning_goals) if learning_goals is not None else s.learning_goals
                ),
                interests=tuple(interests) if interests is not None else s.interests,
                onboarding_completed=True,
            )
        )

    def register_user(self, name: str, email: str, token: str) -> None:
        identity = UserIdentity(name=name, email=email, token=token)
        self._identity = identity
        try:
            self._storage.set(USER_KEY, identity_to_json(identity))
        except StorageError as e:
            logger.error("Failed to save identity: %s", e)
        self._prompt_open = False
        self._cancel_pending()
        logger.info("Registered learner email=%s", email)

    def clear_progress(self) -> None:
        """Forget everything: progress, identity and any pending prompt."""
        for key in (PROGRESS_KEY, USER_KEY):
            try:
                self._storage.remove(key)
            except StorageError as e:
                logger.error("Failed to remove %s: %s", key, e)
        self._snapshot = ProgressSnapshot()
        self._identity = None
        self._prompt_open = False
        self._cancel_pending()

    def merge_server_snapshot(self, server: ProgressSnapshot | dict) -> None:
        """Adopt the server's records for a registered learner.

        Server entries replace local ones with the same id.  Local-only
        entries are kept: they have not reached the server yet.
        """
        if isinstance(server, dict):
            server = snapshot_from_dict(server)

        server_modules = {m.module_id: m for m in server.completed_modules}
        modules = [
            server_modules.pop(m.module_id, m) for m in self._snapshot.completed_modules
        ]
        modules.extend(server_modules.values())

        known_paths = {p.path_id for p in server.enrolled_paths}
        paths = list(server.enrolled_paths) + [
            p for p in self._snapshot.enrolled_paths if p.path_id not in known_paths
        ]

        s = self._snapshot
        self._save(
            ProgressSnapshot(
                completed_modules=tuple(modules),
                enrolled_paths=tuple(paths),
                experience_level=server.experience_level or s.experience_level,
                learning_goals=server.learning_goals or s.learning_goals,
                interests=server.interests or s.interests,
                onboarding_completed=server.onboarding_completed or s.onboarding_completed,
            )
        )

    # --- registration prompt -------------------------------------------------

    def needs_registration(self) -> bool:
        return self._identity is None and bool(self._snapshot.completed_modules)

    @property
    def registration_required(self) -> bool:
        return self._prompt_open and self.needs_registration()

    def dismiss_registration_prompt(self) -> None:
        """Close the prompt; the next completion opens it again."""
        self._prompt_open = False

    def _schedule_registration_check(self) -> None:
        if self._identity is not None:
            return
        self._cancel_pending()
        self._pending = self._scheduler.call_later(
            self._prompt_delay, self._run_registration_check
        )

    def _run_registration_check(self) -> None:
        self._pending = None
        if self.needs_registration():
            self._prompt_open = True
            logger.debug("Registration prompt opened")

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def close(self) -> None:
        self._cancel_pending()


def build_tracker(
    settings: ClientSettings | None = None,
    *,
    scheduler: Scheduler | None = None,
    prompt_delay: float = REGISTRATION_PROMPT_DELAY,
) -> ProgressTracker:
    """Tracker wired for a running client.

    Progress is kept under ``settings.storage_dir`` when one is configured
    and in memory otherwise.  Prompt checks run on the event loop, so the
    tracker must be built and used inside a running loop unless a
    scheduler is passed in.
    """
    if settings is None:
        settings = load_client_settings()
    storage: KeyValueStorage
    if settings.storage_dir is not None:
        storage = FileStorage(settings.storage_dir)
    else:
        logger.info("No storage directory configured; progress is kept in memory")
        storage = InMemoryStorage()
    return ProgressTracker(
        storage, scheduler or AsyncioScheduler(), prompt_delay=prompt_delay
    )
