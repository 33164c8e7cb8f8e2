from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ModuleNote:
    id: int
    user_id: int
    module_id: int
    content: str
    created_at: int
    updated_at: int
