import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.app import build_services, create_app
from recruitment_exam.services.auth_service import LocalAuthProvider
from recruitment_exam.services.result_recorder import ResultRecorder
from recruitment_exam.services.status_tracker import SessionStatusTracker
from recruitment_exam.services.window_policy import WindowPolicy
from recruitment_exam.store.memory import InMemoryDocumentStore

EXAM_START = datetime(2025, 8, 30, 16, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(EXAM_START + timedelta(minutes=1))


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def tracker(store, clock):
    return SessionStatusTracker(store, clock)


@pytest.fixture
def recorder(store, tracker, clock):
    return ResultRecorder(store, tracker, clock)


@pytest.fixture
def policy():
    return WindowPolicy(start_time=EXAM_START, duration_minutes=10, max_tab_switches=5)


@pytest.fixture
def services(store, clock, policy):
    return build_services(
        store=store,
        auth_provider=LocalAuthProvider(),
        policy=policy,
        clock=clock,
        question_count=20,
        admin_emails=frozenset({"admin@example.com"}),
        rng=random.Random(7),
    )


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


SIGNUP = {
    "name": "Asha Verma",
    "email": "asha@example.com",
    "phone": "9876543210",
    "admissionNumber": "123456",
    "branch": "Computer Science Engineering",
    "password": "secret123",
    "confirmPassword": "secret123",
}


@pytest.fixture
def signed_in(client):
    resp = client.post("/api/signup", json=SIGNUP)
    assert resp.status_code == 200, resp.text
    return resp.json()["user"]
