from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated bearer token.

    Carried through the request via FastAPI's dependency system so
    endpoints receive a typed identity instead of raw claims.
    """

    user_id: int
    roles: frozenset[str]
