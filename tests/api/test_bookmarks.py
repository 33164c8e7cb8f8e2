from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, register


def _add(client: TestClient, token: str, item_type: str, item_id: int):
    return client.post(
        "/v1/bookmarks", json={"itemType": item_type, "itemId": item_id}, headers=auth(token)
    )


def test_add_list_and_check(client: TestClient) -> None:
    token = register(client)
    first = _add(client, token, "module", 101)
    second = _add(client, token, "resource", 2)
    assert first.status_code == 201
    assert second.status_code == 201

    listed = client.get("/v1/bookmarks", headers=auth(token)).json()
    # Newest first; ids break ties within the same second.
    assert [(b["itemType"], b["itemId"]) for b in listed] == [("resource", 2), ("module", 101)]

    assert client.get("/v1/bookmarks/module/101", headers=auth(token)).json() == {
        "bookmarked": True
    }
    assert client.get("/v1/bookmarks/module/102", headers=auth(token)).json() == {
        "bookmarked": False
    }


def test_adding_twice_is_idempotent(client: TestClient) -> None:
    token = register(client)
    first = _add(client, token, "module", 101)
    again = _add(client, token, "module", 101)
    assert again.status_code == 200
    assert again.json()["id"] == first.json()["id"]
    assert len(client.get("/v1/bookmarks", headers=auth(token)).json()) == 1


def test_unknown_target_is_404(client: TestClient) -> None:
    token = register(client)
    resp = _add(client, token, "module", 999)
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Module not found"
    resp = _add(client, token, "resource", 999)
    assert resp.json()["detail"]["message"] == "Resource not found"
    assert client.get("/v1/bookmarks", headers=auth(token)).json() == []


def test_invalid_item_type_is_422(client: TestClient) -> None:
    token = register(client)
    assert _add(client, token, "path", 1).status_code == 422
    assert client.get("/v1/bookmarks/path/1", headers=auth(token)).status_code == 422


def test_remove(client: TestClient) -> None:
    token = register(client)
    _add(client, token, "resource", 1)
    resp = client.delete("/v1/bookmarks/resource/1", headers=auth(token))
    assert resp.status_code == 204
    assert client.get("/v1/bookmarks/resource/1", headers=auth(token)).json()["bookmarked"] is False
    assert client.delete("/v1/bookmarks/resource/1", headers=auth(token)).status_code == 404


def test_bookmarks_are_per_user(client: TestClient) -> None:
    ana = register(client)
    bo = register(client, name="Bo", email="bo@example.com")
    _add(client, ana, "module", 101)

    assert client.get("/v1/bookmarks", headers=auth(bo)).json() == []
    assert client.get("/v1/bookmarks/module/101", headers=auth(bo)).json()["bookmarked"] is False
    assert client.delete("/v1/bookmarks/module/101", headers=auth(bo)).status_code == 404
    assert client.get("/v1/bookmarks/module/101", headers=auth(ana)).json()["bookmarked"] is True


def test_bookmarks_require_auth(client: TestClient) -> None:
    assert client.get("/v1/bookmarks").status_code == 401
    resp = client.post("/v1/bookmarks", json={"itemType": "module", "itemId": 101})
    assert resp.status_code == 401
