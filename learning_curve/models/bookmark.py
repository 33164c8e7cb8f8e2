from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ItemType = Literal["module", "resource"]


@dataclass(frozen=True, slots=True)
class Bookmark:
    """One per (user, item_type, item_id)."""

    id: int
    user_id: int
    item_type: ItemType
    item_id: int
    created_at: int
