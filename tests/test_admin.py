import json

import httpx
from fastapi.testclient import TestClient

from extraction import QuestionExtractor
from main import app
from routers.admin import get_extractor

client = TestClient(app)

ADMIN = {"x-admin-token": "secret"}


def _item(text, level="basic", correct=0):
    return {
        "question": text,
        "options": ["one", "two", "three"],
        "correctAnswer": correct,
        "explanation": f"because {text}",
        "level": level,
    }


CUSTOM = [
    _item("Basic one ___"),
    _item("Basic two ___", correct=1),
    _item("Advanced one ___", level="advanced", correct=2),
]


def test_admin_requires_token():
    r = client.post("/admin/questions/english", json={"questions": CUSTOM})
    assert r.status_code == 401
    r = client.post("/admin/reload", headers={"x-admin-token": "wrong"})
    assert r.status_code == 401


def test_admin_without_configured_token(monkeypatch):
    monkeypatch.delenv("ADMIN_TOKEN")
    r = client.post("/admin/reload", headers=ADMIN)
    assert r.status_code == 500


def test_admin_reload_ok():
    r = client.post("/admin/reload", headers=ADMIN)
    assert r.status_code == 200
    assert r.json() == {"ok": True, "counts": {"english": 80, "interview": 80}}


def test_default_question_set():
    body = client.get("/questions/english").json()
    assert body["success"] is True
    assert body["use_custom_questions"] is False
    assert body["questions"] == []
    assert body["message"] == "Using default question bank"


def test_save_and_serve_custom_questions():
    r = client.post("/admin/questions/english", json={"questions": CUSTOM}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["saved_count"] == 3

    body = client.get("/questions/english").json()
    assert body["use_custom_questions"] is True
    assert body["total_count"] == 3
    assert [q["question"] for q in body["questions"]] == [c["question"] for c in CUSTOM]
    assert all(q["id"].startswith("custom_") for q in body["questions"])
    assert body["questions"][2]["correctAnswer"] == 2

    # other categories are untouched
    assert client.get("/questions/interview").json()["use_custom_questions"] is False

    sel = client.get("/assessment/english/questions", params={"username": "bob"}).json()
    assert sel["using_custom"] is True
    assert sel["total"] == 3
    assert [q["level"] for q in sel["questions"]] == ["basic", "basic", "advanced"]


def test_score_against_custom_questions():
    client.post("/admin/questions/english", json={"questions": CUSTOM}, headers=ADMIN)
    saved = client.get("/questions/english").json()["questions"]
    answers = {q["id"]: q["correctAnswer"] for q in saved}

    body = client.post("/assessment/english/score", json={"username": "bob", "answers": answers}).json()
    assert body["total"] == 3
    assert body["question_count"] == 3
    assert body["percentage"] == 100
    # thresholds are absolute, not relative to a short quiz
    assert body["proficiency"]["label"] == "Basic"


def test_question_detail_from_active_bank():
    assert client.get("/questions/english/b1").json()["id"] == "b1"
    assert client.get("/questions/english/missing").status_code == 404

    client.post("/admin/questions/english", json={"questions": CUSTOM}, headers=ADMIN)
    qid = client.get("/questions/english").json()["questions"][0]["id"]
    assert client.get(f"/questions/english/{qid}").status_code == 200
    assert client.get("/questions/english/b1").status_code == 404


def test_replace_and_append():
    client.post("/admin/questions/english", json={"questions": CUSTOM}, headers=ADMIN)
    client.post("/admin/questions/english", json={"questions": CUSTOM[:1]}, headers=ADMIN)
    assert client.get("/questions/english").json()["total_count"] == 1

    client.post(
        "/admin/questions/english",
        json={"questions": CUSTOM[1:], "replaceExisting": False},
        headers=ADMIN,
    )
    assert client.get("/questions/english").json()["total_count"] == 3


def test_save_defaults_level_and_rejects_bad_items():
    item = _item("No level ___")
    del item["level"]
    r = client.post("/admin/questions/english", json={"questions": [item]}, headers=ADMIN)
    assert r.status_code == 200
    assert client.get("/questions/english").json()["questions"][0]["level"] == "intermediate"

    bad = {**_item("Four ___"), "options": ["a", "b", "c", "d"]}
    r = client.post("/admin/questions/english", json={"questions": [bad]}, headers=ADMIN)
    assert r.status_code == 422

    r = client.post("/admin/questions/english", json={"questions": []}, headers=ADMIN)
    assert r.status_code == 400


def test_toggle_custom_questions():
    client.post("/admin/questions/english", json={"questions": CUSTOM}, headers=ADMIN)

    r = client.put("/admin/settings/english", json={"useCustomQuestions": False}, headers=ADMIN)
    assert r.json() == {"ok": True, "category": "english", "use_custom_questions": False}
    sel = client.get("/assessment/english/questions", params={"username": "bob"}).json()
    assert sel["using_custom"] is False
    assert sel["total"] == 40

    client.put("/admin/settings/english", json={"useCustomQuestions": True}, headers=ADMIN)
    assert client.get("/questions/english").json()["total_count"] == 3


def test_enabled_flag_without_questions_uses_default():
    client.put("/admin/settings/interview", json={"useCustomQuestions": True}, headers=ADMIN)
    body = client.get("/questions/interview").json()
    assert body["use_custom_questions"] is False
    assert body["message"] == "No custom questions found, using default"
    sel = client.get("/assessment/interview/questions", params={"username": "bob"}).json()
    assert sel["total"] == 40


def _fake_extractor(reply):
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": reply}}]})

    return QuestionExtractor(ai_api_key="k", transport=httpx.MockTransport(handler))


def test_extract_then_save():
    reply = json.dumps({"questions": [_item("Pasted ___", level="bogus"), {"question": "broken"}]})
    app.dependency_overrides[get_extractor] = lambda: _fake_extractor(reply)

    r = client.post("/admin/extract", json={"textContent": "1. Pasted ___"}, headers=ADMIN)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["total_extracted"] == 1
    q = body["questions"][0]
    assert q["id"].startswith("imported_")
    assert q["level"] == "intermediate"

    r = client.post("/admin/questions/english", json={"questions": body["questions"]}, headers=ADMIN)
    assert r.json()["saved_count"] == 1


def test_extract_errors_are_reported():
    app.dependency_overrides[get_extractor] = lambda: _fake_extractor("not json at all")

    r = client.post("/admin/extract", json={"textContent": "something"}, headers=ADMIN)
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Failed to parse extracted questions"}

    r = client.post("/admin/extract", json={"url": "  "}, headers=ADMIN)
    assert r.status_code == 400
    assert r.json()["error"] == "No content provided or extracted"
