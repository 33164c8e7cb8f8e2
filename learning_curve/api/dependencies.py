"""Shared FastAPI dependencies: repository wiring and bearer auth.

Without DATABASE_URL every request is served from one process-wide set
of in-memory repositories (``memory_repos``), seeded with the sample
catalog and the built-in achievements.  With it, each request gets the
Postgres repositories bound to one session that commits when the
request succeeds and rolls back when it raises.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from learning_curve.db import engine as db_engine
from learning_curve.models.principal import Principal
from learning_curve.repos.achievement_repo import AchievementRepo, InMemoryAchievementRepo
from learning_curve.repos.activity_repo import ActivityRepo, InMemoryActivityRepo
from learning_curve.repos.bookmark_repo import BookmarkRepo, InMemoryBookmarkRepo
from learning_curve.repos.catalog_repo import (
    CatalogRepo,
    InMemoryCatalogRepo,
    seed_sample_catalog,
)
from learning_curve.repos.note_repo import InMemoryNoteRepo, NoteRepo
from learning_curve.repos.pg_achievement_repo import PgAchievementRepo
from learning_curve.repos.pg_activity_repo import PgActivityRepo
from learning_curve.repos.pg_bookmark_repo import PgBookmarkRepo
from learning_curve.repos.pg_catalog_repo import PgCatalogRepo
from learning_curve.repos.pg_note_repo import PgNoteRepo
from learning_curve.repos.pg_progress_repo import PgProgressRepo
from learning_curve.repos.pg_user_repo import PgUserRepo
from learning_curve.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from learning_curve.repos.user_repo import InMemoryUserRepo, UserRepo
from learning_curve.services import token_service
from learning_curve.services.achievement_catalog import seed_achievements

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Repos:
    users: UserRepo
    catalog: CatalogRepo
    progress: ProgressRepo
    notes: NoteRepo
    bookmarks: BookmarkRepo
    achievements: AchievementRepo
    activity: ActivityRepo


def build_memory_repos() -> Repos:
    users = InMemoryUserRepo()
    catalog = InMemoryCatalogRepo()
    seed_sample_catalog(catalog)
    progress = InMemoryProgressRepo()
    notes = InMemoryNoteRepo()
    achievements = InMemoryAchievementRepo()
    seed_achievements(achievements)
    return Repos(
        users=users,
        catalog=catalog,
        progress=progress,
        notes=notes,
        bookmarks=InMemoryBookmarkRepo(),
        achievements=achievements,
        activity=InMemoryActivityRepo(
            users=users, catalog=catalog, progress=progress, notes=notes
        ),
    )


memory_repos = build_memory_repos()


async def get_repos() -> AsyncIterator[Repos]:
    if db_engine.async_session_factory is None:
        yield memory_repos
        return

    async with db_engine.session_scope() as session:
        yield Repos(
            users=PgUserRepo(session),
            catalog=PgCatalogRepo(session),
            progress=PgProgressRepo(session),
            notes=PgNoteRepo(session),
            bookmarks=PgBookmarkRepo(session),
            achievements=PgAchievementRepo(session),
            activity=PgActivityRepo(session),
        )


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Principal:
    """Validate the bearer token and return the caller's Principal."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        logger.warning("Token with non-numeric sub rejected")
        raise _unauthorized("Invalid token") from None

    principal = Principal(
        user_id=user_id,
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug("Token validated for user=%d roles=%s", user_id, principal.roles)
    return principal


async def require_admin(
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> Principal:
    """Like require_user, but the stored account must have the admin role.

    The stored role is checked rather than the token's roles claim, so a
    demotion takes effect before the caller's token expires.
    """
    user = await repos.users.get_by_id(principal.user_id)
    if user is None or user.role != "admin":
        logger.warning("Admin access denied for user=%d", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Admin access required"},
        )
    return principal
