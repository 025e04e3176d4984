import json

from fastapi.testclient import TestClient

from bank import get_default_bank
from main import app
from selection import select_questions

client = TestClient(app)


def test_health():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_selection_for_user():
    r = client.get("/assessment/english/questions", params={"username": "testuser"})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 40
    assert body["using_custom"] is False

    expected = [q.id for q in select_questions("testuser", get_default_bank())]
    assert [q["id"] for q in body["questions"]] == expected

    # answer keys stay on the server
    q = body["questions"][0]
    assert set(q) == {"id", "question", "options", "level"}


def test_selection_normalizes_username():
    a = client.get("/assessment/english/questions", params={"username": "TestUser"}).json()
    b = client.get("/assessment/english/questions", params={"username": "  testuser "}).json()
    assert [q["id"] for q in a["questions"]] == [q["id"] for q in b["questions"]]


def test_selection_level_filter():
    r = client.get(
        "/assessment/english/questions", params={"username": "testuser", "level": "upper-advanced"}
    )
    body = r.json()
    assert body["total"] == 10
    assert {q["level"] for q in body["questions"]} == {"upper-advanced"}


def test_selection_rejects_bad_input():
    assert client.get("/assessment/english/questions", params={"username": "   "}).status_code == 422
    assert client.get("/assessment/english/questions").status_code == 422
    assert client.get("/assessment/history/questions", params={"username": "x"}).status_code == 422
    r = client.get("/assessment/english/questions", params={"username": "x", "level": "expert"})
    assert r.status_code == 422


def test_score_all_correct():
    selected = select_questions("testuser", get_default_bank())
    answers = {q.id: q.correct_answer for q in selected}

    r = client.post("/assessment/english/score", json={"username": "testuser", "answers": answers})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["total"] == 40
    assert body["question_count"] == 40
    assert body["percentage"] == 100
    assert body["level_scores"] == {
        "basic": 10,
        "intermediate": 10,
        "advanced": 10,
        "upper-advanced": 10,
    }
    assert body["incorrect"] == []
    assert body["proficiency"]["label"] == "Proficient"
    assert isinstance(body["attempt_id"], int)


def test_score_unanswered():
    r = client.post("/assessment/english/score", json={"username": "nobody", "answers": {}})
    body = r.json()
    assert body["total"] == 0
    assert body["percentage"] == 0
    assert len(body["incorrect"]) == 40
    first = body["incorrect"][0]
    assert first["user_answer"] is None
    # the full question comes back for the review screen
    assert {"correctAnswer", "explanation"} <= set(first["question"])
    assert body["proficiency"] == {
        "label": "Basic",
        "description": "Foundation level with room for growth",
        "category": "basic",
    }


def test_score_with_mistakes():
    selected = select_questions("mixed", get_default_bank())
    answers = {q.id: q.correct_answer for q in selected}
    wrong = selected[12]
    answers[wrong.id] = (wrong.correct_answer + 1) % 3

    body = client.post("/assessment/english/score", json={"username": "Mixed", "answers": answers}).json()
    assert body["total"] == 39
    assert body["percentage"] == 98
    assert [i["question"]["id"] for i in body["incorrect"]] == [wrong.id]
    assert body["incorrect"][0]["user_answer"] == (wrong.correct_answer + 1) % 3


def test_score_records_attempt():
    r = client.post(
        "/assessment/english/score",
        json={"username": " alice ", "answers": {}, "duration_ms": 1234},
    )
    attempt_id = r.json()["attempt_id"]

    r2 = client.get(f"/attempts/{attempt_id}")
    assert r2.status_code == 200
    body = r2.json()
    assert body["username"] == "alice"
    assert body["category"] == "english"
    assert body["total"] == 0
    assert body["question_count"] == 40
    assert body["label"] == "Basic"
    assert body["duration_ms"] == 1234
    assert len(body["items"]) == 40


def test_score_rejects_blank_username():
    r = client.post("/assessment/english/score", json={"username": " ", "answers": {}})
    assert r.status_code == 422


def test_score_rejects_overlong_username():
    r = client.post("/assessment/english/score", json={"username": "a" * 129, "answers": {}})
    assert r.status_code == 422


def test_score_accepts_lone_surrogate_username():
    name = "\ud800bob"
    answers = {q.id: q.correct_answer for q in select_questions(name, get_default_bank())}

    # json.dumps escapes the surrogate, which keeps the body valid UTF-8
    r = client.post(
        "/assessment/english/score",
        content=json.dumps({"username": name, "answers": answers}),
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 40
    assert body["username"] == "?bob"
    assert isinstance(body["attempt_id"], int)


def test_proficiency_endpoint():
    assert client.get("/proficiency", params={"score": 34}).json()["label"] == "Advanced"
    assert client.get("/proficiency", params={"score": 35}).json()["label"] == "Proficient"
    assert client.get("/proficiency", params={"score": 41}).status_code == 422
