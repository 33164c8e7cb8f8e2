from __future__ import annotations

from fastapi.testclient import TestClient


def test_list_resources(client: TestClient) -> None:
    resp = client.get("/v1/resources")
    assert resp.status_code == 200
    body = resp.json()
    assert [r["id"] for r in body] == [1, 2, 3, 4, 5]
    assert body[0]["resourceType"] == "course"
    assert body[1]["tags"] == ["machine-learning", "python"]


def test_get_resource(client: TestClient) -> None:
    resp = client.get("/v1/resources/3")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Deep Learning Book"
    assert resp.json()["isPremium"] is False


def test_unknown_resource_is_404(client: TestClient) -> None:
    resp = client.get("/v1/resources/999")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Resource not found"
