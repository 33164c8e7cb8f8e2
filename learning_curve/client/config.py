from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class ClientSettings:
    api_url: str
    http_timeout: float
    storage_dir: Path | None


def load_client_settings() -> ClientSettings:
    raw_timeout = _getenv("LEARNING_CURVE_HTTP_TIMEOUT", "15")
    try:
        http_timeout = float(raw_timeout)
    except ValueError:
        raise ValueError(
            f"LEARNING_CURVE_HTTP_TIMEOUT must be a number (got {raw_timeout!r})"
        ) from None
    if http_timeout <= 0:
        raise ValueError(
            f"LEARNING_CURVE_HTTP_TIMEOUT must be > 0 (got {http_timeout})"
        )

    storage_dir = _getenv("LEARNING_CURVE_STORAGE_DIR", "")
    return ClientSettings(
        api_url=_getenv("LEARNING_CURVE_API_URL", "http://localhost:8000").rstrip("/"),
        http_timeout=http_timeout,
        storage_dir=Path(storage_dir).expanduser() if storage_dir else None,
    )
