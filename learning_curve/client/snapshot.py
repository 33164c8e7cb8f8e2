"""Client-side progress records and their JSON form.

The stored blob uses camelCase keys and ISO-8601 timestamps, the same
document GET /v1/progress returns, so it can be uploaded and merged
without translation.  Parsing is strict: anything that is not the
expected shape raises ValueError and the tracker falls back to defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ModuleProgress:
    module_id: int
    completed: bool = True
    score: float | None = None
    completed_at: str | None = None


@dataclass(frozen=True, slots=True)
class PathEnrollment:
    path_id: int
    enrolled_at: str


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    completed_modules: tuple[ModuleProgress, ...] = ()
    enrolled_paths: tuple[PathEnrollment, ...] = ()
    experience_level: str | None = None
    learning_goals: tuple[str, ...] | None = None
    interests: tuple[str, ...] | None = None
    onboarding_completed: bool = False


@dataclass(frozen=True, slots=True)
class UserIdentity:
    name: str
    email: str
    token: str = field(repr=False)


def _require(cond: bool, what: str) -> None:
    if not cond:
        raise ValueError(f"malformed progress snapshot: {what}")


def _int(value: Any, what: str) -> int:
    _require(isinstance(value, int) and not isinstance(value, bool), what)
    return value


def _opt_str(value: Any, what: str) -> str | None:
    _require(value is None or isinstance(value, str), what)
    return value


def _opt_tags(value: Any, what: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    _require(isinstance(value, list) and all(isinstance(v, str) for v in value), what)
    return tuple(value)


def snapshot_to_dict(s: ProgressSnapshot) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "completedModules": [
            {
                "moduleId": m.module_id,
                "completed": m.completed,
                "score": m.score,
                "completedAt": m.completed_at,
            }
            for m in s.completed_modules
        ],
        "enrolledPaths": [
            {"pathId": e.path_id, "enrolledAt": e.enrolled_at} for e in s.enrolled_paths
        ],
        "onboardingCompleted": s.onboarding_completed,
    }
    if s.experience_level is not None:
        doc["experienceLevel"] = s.experience_level
    if s.learning_goals is not None:
        doc["learningGoals"] = list(s.learning_goals)
    if s.interests is not None:
        doc["interests"] = list(s.interests)
    return doc


def snapshot_from_dict(doc: Any) -> ProgressSnapshot:
    _require(isinstance(doc, dict), "not an object")
    modules_raw = doc.get("completedModules", [])
    paths_raw = doc.get("enrolledPaths", [])
    _require(isinstance(modules_raw, list), "completedModules")
    _require(isinstance(paths_raw, list), "enrolledPaths")

    modules: dict[int, ModuleProgress] = {}
    for m in modules_raw:
        _require(isinstance(m, dict), "module entry")
        score = m.get("score")
        _require(
            score is None or (isinstance(score, (int, float)) and not isinstance(score, bool)),
            "score",
        )
        module_id = _int(m.get("moduleId"), "moduleId")
        # Last entry wins if a hand-edited blob repeats an id.
        modules[module_id] = ModuleProgress(
            module_id=module_id,
            completed=bool(m.get("completed", True)),
            score=float(score) if score is not None else None,
            completed_at=_opt_str(m.get("completedAt"), "completedAt"),
        )

    paths: dict[int, PathEnrollment] = {}
    for p in paths_raw:
        _require(isinstance(p, dict), "path entry")
        path_id = _int(p.get("pathId"), "pathId")
        if path_id in paths:
            continue
        enrolled_at = p.get("enrolledAt")
        _require(isinstance(enrolled_at, str), "enrolledAt")
        paths[path_id] = PathEnrollment(path_id=path_id, enrolled_at=enrolled_at)

    onboarding = doc.get("onboardingCompleted", False)
    _require(isinstance(onboarding, bool), "onboardingCompleted")

    return ProgressSnapshot(
        completed_modules=tuple(modules.values()),
        enrolled_paths=tuple(paths.values()),
        experience_level=_opt_str(doc.get("experienceLevel"), "experienceLevel"),
        learning_goals=_opt_tags(doc.get("learningGoals"), "learningGoals"),
        interests=_opt_tags(doc.get("interests"), "interests"),
        onboarding_completed=onboarding,
    )


def snapshot_from_json(raw: str) -> ProgressSnapshot:
    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"malformed progress snapshot: {e}") from None
    return snapshot_from_dict(doc)


def identity_to_json(identity: UserIdentity) -> str:
    return json.dumps(
        {"name": identity.name, "email": identity.email, "token": identity.token}
    )


def identity_from_json(raw: str) -> UserIdentity:
    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"malformed identity: {e}") from None
    if not isinstance(doc, dict) or not all(
        isinstance(doc.get(k), str) and doc.get(k) for k in ("name", "email", "token")
    ):
        raise ValueError("malformed identity: expected name, email and token")
    return UserIdentity(name=doc["name"], email=doc["email"], token=doc["token"])
