from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, register


def test_submit_and_list_attempts(client: TestClient) -> None:
    token = register(client)
    first = client.post(
        "/v1/quizzes/5/attempts",
        json={"score": 60, "passed": False, "answers": [1, 0, 2]},
        headers=auth(token),
    )
    second = client.post(
        "/v1/quizzes/5/attempts",
        json={"score": 100, "passed": True},
        headers=auth(token),
    )
    client.post(
        "/v1/quizzes/6/attempts", json={"score": 90, "passed": True}, headers=auth(token)
    )
    assert first.status_code == 201
    assert second.status_code == 201

    resp = client.get("/v1/quizzes/5/attempts", headers=auth(token))
    assert resp.status_code == 200
    assert [a["score"] for a in resp.json()] == [60, 100]
    assert all(a["quizId"] == 5 for a in resp.json())


def test_attempts_are_per_user(client: TestClient) -> None:
    ana = register(client)
    bo = register(client, name="Bo", email="bo@example.com")
    client.post("/v1/quizzes/5/attempts", json={"score": 70, "passed": True}, headers=auth(ana))
    assert client.get("/v1/quizzes/5/attempts", headers=auth(bo)).json() == []


def test_score_out_of_range_is_rejected(client: TestClient) -> None:
    token = register(client)
    resp = client.post(
        "/v1/quizzes/5/attempts", json={"score": 101, "passed": True}, headers=auth(token)
    )
    assert resp.status_code == 422


def test_attempts_require_auth(client: TestClient) -> None:
    assert client.post("/v1/quizzes/5/attempts", json={"score": 1, "passed": False}).status_code == 401


def test_module_quiz_and_questions(client: TestClient) -> None:
    quiz = client.get("/v1/modules/201/quiz")
    assert quiz.status_code == 200
    body = quiz.json()
    assert body["moduleId"] == 201
    assert body["passingScore"] == 70

    questions = client.get(f"/v1/quizzes/{body['id']}/questions").json()
    assert [q["position"] for q in questions] == [0, 1]
    assert questions[0]["questionType"] == "multiple_choice"
    assert questions[0]["correctAnswer"] in questions[0]["options"]
    assert questions[1]["questionType"] == "code"
    assert questions[1]["options"] == []


def test_module_without_quiz_is_404(client: TestClient) -> None:
    resp = client.get("/v1/modules/999/quiz")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "No quiz for this module"


def test_unknown_quiz_is_404(client: TestClient) -> None:
    token = register(client)
    assert client.get("/v1/quizzes/999/questions").status_code == 404
    resp = client.post(
        "/v1/quizzes/999/attempts", json={"score": 100, "passed": True}, headers=auth(token)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Quiz not found"
    assert client.get("/v1/quizzes/999/attempts", headers=auth(token)).status_code == 404

    # Nothing was recorded, so no quiz achievement can be earned from it.
    granted = client.post("/v1/achievements/check", headers=auth(token)).json()
    assert granted["newAchievements"] == []
