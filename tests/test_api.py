from datetime import timedelta

from conftest import EXAM_START, SIGNUP
from recruitment_exam.models.question_model import Category
from recruitment_exam.services.question_bank import get_question
from recruitment_exam.store.base import RESULTS_COLLECTION, STATUS_COLLECTION


def _start(client):
    resp = client.post("/api/exam/start")
    assert resp.status_code == 200, resp.text
    return resp.json()


def _all_correct(questions):
    return {q["id"]: get_question(q["id"]).correct_option for q in questions}


# ── accounts ─────────────────────────────────────────────────────────────────

def test_signup_login_logout(client, signed_in):
    assert signed_in["admissionNumber"] == "123456"
    assert client.get("/api/me").json()["user"]["email"] == SIGNUP["email"]

    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/me").status_code == 401

    resp = client.post("/api/login", json={"email": SIGNUP["email"], "password": SIGNUP["password"]})
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == signed_in["id"]


def test_signup_validation_runs_before_provider(client, store):
    resp = client.post("/api/signup", json={**SIGNUP, "phone": "123"})
    assert resp.status_code == 422
    assert store.query("users") == []


def test_login_failure_is_a_single_message(client, signed_in):
    client.post("/api/logout")
    resp = client.post("/api/login", json={"email": SIGNUP["email"], "password": "wrong-one"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid email or password."}


def test_reset_password(client):
    resp = client.post("/api/reset-password", json={"email": "someone@example.com"})
    assert resp.status_code == 200
    assert client.post("/api/reset-password", json={"email": "bad"}).status_code == 422


def test_branches_match_signup_choices(client):
    branches = client.get("/api/branches").json()["branches"]
    assert SIGNUP["branch"] in branches
    assert "Electronics & Communication" in branches


def test_exam_endpoints_require_login(client):
    assert client.post("/api/exam/start").status_code == 401
    assert client.get("/api/exam/status").status_code == 401


# ── exam window ──────────────────────────────────────────────────────────────

def test_settings_follow_injected_clock(client, clock):
    clock.now = EXAM_START - timedelta(minutes=5)
    before = client.get("/api/exam/settings").json()
    assert before["available"] is False
    assert before["remaining_seconds"] == 600

    clock.now = EXAM_START + timedelta(minutes=4)
    during = client.get("/api/exam/settings").json()
    assert during["available"] is True
    assert during["closed"] is False
    assert during["remaining_seconds"] == 360
    assert during["max_tab_switches"] == 5


def test_start_refused_outside_window(client, signed_in, clock):
    clock.now = EXAM_START - timedelta(seconds=1)
    assert client.post("/api/exam/start").status_code == 403
    clock.now = EXAM_START + timedelta(minutes=10)
    assert client.post("/api/exam/start").status_code == 403


# ── full attempt ─────────────────────────────────────────────────────────────

def test_computer_science_attempt_end_to_end(client, signed_in, store, clock):
    started = _start(client)
    questions = started["questions"]

    assert 0 < len(questions) <= 20
    assert all("correctAnswer" not in q for q in questions)
    categories = [get_question(q["id"]).category for q in questions]
    assert categories.count(Category.TECHNICAL) <= 15
    assert categories.count(Category.GENERAL) <= 5
    assert Category.ELECTRONICS not in categories

    # reload keeps the draw
    assert [q["id"] for q in _start(client)["questions"]] == [q["id"] for q in questions]

    clock.advance(minutes=3)
    resp = client.post("/api/exam/submit", json={"answers": _all_correct(questions)})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["score"] == len(questions)
    assert body["percentage"] == 100
    assert body["grade"] == "A+"

    status = client.get("/api/exam/status").json()
    assert status["hasSubmitted"] is True
    assert status["phase"] == "submitted"

    results = store.query(RESULTS_COLLECTION, filters=[("userId", "==", signed_in["id"])])
    assert len(results) == 1
    assert results[0].id == body["result_id"]
    assert results[0].data["timeSpent"] == 180
    assert results[0].data["totalQuestions"] == len(questions)

    mine = client.get("/api/results/me").json()["results"]
    assert [r["id"] for r in mine] == [body["result_id"]]


def test_partial_answers_score_against_all_questions(client, signed_in):
    questions = _start(client)["questions"]
    first = questions[0]
    body = client.post(
        "/api/exam/submit",
        json={"answers": {first["id"]: get_question(first["id"]).correct_option}},
    ).json()
    assert body["score"] == 1
    assert body["total"] == len(questions)
    assert body["percentage"] == int(100 / len(questions) + 0.5)


def test_second_submission_is_refused(client, signed_in, store):
    questions = _start(client)["questions"]
    client.post("/api/exam/submit", json={"answers": _all_correct(questions)})

    assert client.post("/api/exam/start").status_code == 409
    resp = client.post("/api/exam/submit", json={"answers": {}})
    assert resp.status_code == 409
    assert len(store.query(RESULTS_COLLECTION)) == 1


def test_submit_rejects_out_of_range_option(client, signed_in):
    questions = _start(client)["questions"]
    resp = client.post("/api/exam/submit", json={"answers": {questions[0]["id"]: 7}})
    assert resp.status_code == 422


def test_submit_without_start(client, signed_in):
    assert client.post("/api/exam/submit", json={"answers": {}}).status_code == 400


# ── tab switches / cancellation ──────────────────────────────────────────────

def test_tab_switches_cancel_after_limit(client, signed_in, store):
    _start(client)
    for expected in range(1, 6):
        body = client.post("/api/exam/tab-switch").json()
        assert body["tab_switch_count"] == expected
        assert body["cancelled"] is False

    body = client.post("/api/exam/tab-switch").json()
    assert body["tab_switch_count"] == 6
    assert body["cancelled"] is True

    doc = store.get(STATUS_COLLECTION, signed_in["id"])
    assert doc["isTestCancelled"] is True
    assert client.post("/api/exam/start").status_code == 409
    assert client.post("/api/exam/submit", json={"answers": {}}).status_code == 409
    assert client.post("/api/exam/tab-switch").status_code == 409


def test_submission_stays_final(client, signed_in, store):
    questions = _start(client)["questions"]
    client.post("/api/exam/submit", json={"answers": _all_correct(questions)})

    for _ in range(6):
        assert client.post("/api/exam/tab-switch").status_code == 409
    assert client.post("/api/exam/cancel").status_code == 409

    status = client.get("/api/exam/status").json()
    assert status["phase"] == "submitted"
    assert status["isTestCancelled"] is False
    assert status["tabSwitchCount"] == 0


def test_tab_switch_and_cancel_need_a_started_test(client, signed_in, store):
    assert client.post("/api/exam/tab-switch").status_code == 400
    assert client.post("/api/exam/cancel").status_code == 400

    doc = store.get(STATUS_COLLECTION, signed_in["id"])
    assert doc["tabSwitchCount"] == 0
    assert doc["isTestCancelled"] is False


def test_voluntary_cancel(client, signed_in):
    _start(client)
    assert client.post("/api/exam/cancel").status_code == 200
    assert client.get("/api/exam/status").json()["phase"] == "cancelled"


# ── results listing ──────────────────────────────────────────────────────────

def test_all_results_admin_only(client, signed_in):
    assert client.get("/api/results").status_code == 403

    client.post("/api/logout")
    admin = {**SIGNUP, "email": "admin@example.com", "admissionNumber": "999999"}
    assert client.post("/api/signup", json=admin).status_code == 200
    resp = client.get("/api/results")
    assert resp.status_code == 200
    assert resp.json() == {"results": []}


def test_store_failures_surface_as_503(client, signed_in, store, monkeypatch):
    from recruitment_exam.errors import StoreError, StoreErrorKind

    def broken(*args, **kwargs):
        raise StoreError(StoreErrorKind.TRANSIENT, "backend unavailable")

    _start(client)
    monkeypatch.setattr(store, "increment", broken)
    resp = client.post("/api/exam/tab-switch")
    assert resp.status_code == 503
    assert "Failed to increment tab switch count" in resp.json()["detail"]
