"""Thin async HTTP client for the learning-curve API.

Every non-2xx reply and every transport failure (including timeouts)
surfaces as ApiError with a human-readable message, so callers have one
exception to handle and can show ``str(e)`` directly.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from learning_curve.client.config import ClientSettings, load_client_settings

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Request failed"


class ApiError(Exception):
    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def error_message(body: Any, default: str = GENERIC_ERROR) -> str:
    """Pull the message out of an error body.

    Looks at ``detail.message``, then ``message``, then ``detail`` when it
    is a plain string.
    """
    if not isinstance(body, dict):
        return default
    detail = body.get("detail")
    if isinstance(detail, dict) and isinstance(detail.get("message"), str):
        return detail["message"]
    if isinstance(body.get("message"), str):
        return body["message"]
    if isinstance(detail, str):
        return detail
    return default


class ApiClient:
    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings or load_client_settings()
        self._http = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=settings.http_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        json: Any = None,
        default_error: str = GENERIC_ERROR,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            response = await self._http.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException:
            logger.warning("%s %s timed out", method, url)
            raise ApiError(None, "The request timed out") from None
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(None, default_error) from None

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = error_message(body, default_error)
            logger.warning("%s %s -> %d: %s", method, url, response.status_code, message)
            raise ApiError(response.status_code, message)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # --- endpoints -------------------------------------------------------------

    async def register(self, name: str, email: str) -> dict[str, Any]:
        """POST /v1/users/register -> {token, name, email}."""
        data = await self._request(
            "POST",
            "/v1/users/register",
            json={"name": name, "email": email},
            default_error="Registration failed",
        )
        if not isinstance(data, dict) or not isinstance(data.get("token"), str):
            raise ApiError(None, "Registration failed")
        return data

    async def get_progress(self, token: str) -> dict[str, Any]:
        return await self._request("GET", "/v1/progress", token=token)

    async def sync_progress(self, token: str, snapshot: dict[str, Any]) -> dict[str, Any]:
        """Upload a local snapshot; returns the merged server snapshot."""
        return await self._request("POST", "/v1/progress/sync", token=token, json=snapshot)

    async def check_achievements(self, token: str) -> list[dict[str, Any]]:
        data = await self._request("POST", "/v1/achievements/check", token=token)
        return list(data.get("newAchievements", [])) if isinstance(data, dict) else []
