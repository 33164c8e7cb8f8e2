"""Assert that issued tokens never appear in log output.

Registration hands out a bearer token and every authenticated request
carries one; none of the log records emitted along the way may contain it.
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth


def test_registration_does_not_log_token(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG):
        resp = client.post(
            "/v1/users/register", json={"name": "Ana", "email": "secrets@example.com"}
        )
    token = resp.json()["token"]
    assert caplog.records
    assert token not in caplog.text


def test_authenticated_requests_do_not_log_token(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    resp = client.post(
        "/v1/users/register", json={"name": "Ana", "email": "secrets@example.com"}
    )
    token = resp.json()["token"]

    with caplog.at_level(logging.DEBUG):
        client.get("/v1/users/me", headers=auth(token))
        client.put("/v1/progress/modules/101", json={"status": "completed"}, headers=auth(token))
        client.post("/v1/achievements/check", headers=auth(token))
        client.get("/v1/users/me", headers=auth(token + "tampered"))

    assert token not in caplog.text
