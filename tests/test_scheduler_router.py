# tests/test_scheduler_router.py
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from rollcall.main import app
from rollcall.db.session import engine, SessionLocal
from rollcall.models import AvailabilityResponse, Base, CandidateEvent, Participant, SchedulerState
from rollcall.services.webhook_client import get_optional_webhook_client


class FakeWebhookClient:
    def __init__(self):
        self.sent = []

    def send_message(self, content: str) -> int:
        self.sent.append(content)
        return 204


fake_client = FakeWebhookClient()


def override_webhook_client():
    return fake_client


client = TestClient(app)


def setup_module(module):
    Base.metadata.create_all(bind=engine)
    # Override the real webhook dependency with our fake
    app.dependency_overrides[get_optional_webhook_client] = override_webhook_client


def teardown_module(module):
    app.dependency_overrides.pop(get_optional_webhook_client, None)


def _clean_db():
    db: Session = SessionLocal()
    try:
        db.query(AvailabilityResponse).delete()
        db.query(CandidateEvent).delete()
        db.query(Participant).delete()
        db.query(SchedulerState).delete()
        db.commit()
    finally:
        db.close()


def test_run_without_roster_is_conflict():
    _clean_db()
    resp = client.post("/scheduler/run", params={"today": "2025-01-06"})
    assert resp.status_code == 409


def test_run_schedules_and_notifies():
    _clean_db()
    fake_client.sent.clear()

    for name in ("A", "B", "C", "D"):
        client.post("/participants", json={"name": name})

    tue = client.post("/candidate-events", json={"event_date": "2025-01-07"}).json()["id"]
    thu = client.post("/candidate-events", json={"event_date": "2025-01-09"}).json()["id"]
    client.put(
        f"/candidate-events/{tue}/responses",
        json={"responses": {"A": "y", "B": "y", "C": "y", "D": "18-21"}},
    )
    client.put(
        f"/candidate-events/{thu}/responses",
        json={"responses": {"A": "y", "B": "y", "C": "y", "D": "y"}},
    )

    resp = client.post("/scheduler/run", params={"today": "2025-01-06"})
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert data["scheduled"] == ["2025-01-09"]
    assert data["status_changes"]["2025-01-07"] == "SUPERSEDED"
    assert data["restriction_notices"] == 1
    assert data["notifications_sent"] == 2
    assert len(fake_client.sent) == 2

    assert client.get(f"/candidate-events/{thu}").json()["status"] == "SCHEDULED"

    resp = client.get("/scheduler/last-run")
    assert resp.json() == {"last_run_date": "2025-01-06"}
