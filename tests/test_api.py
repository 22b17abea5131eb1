"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import get_settings, get_store
from hours_tool.config import Settings
from hours_tool.store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore(
        manual=[
            {"id": "m1", "technician_id": "T1", "date": "2024-06-10", "hours_worked": 8},
            {"id": "m2", "technician_id": "T2", "date": "2024-06-10", "hours_worked": 8},
        ],
        imported=[
            {"id": "w1", "technician_id": "T1", "date": "2024-06-10", "hours": 8},
            {"id": "w2", "technician_id": "T2", "date": "2024-06-10", "hours": 6},
        ],
        rates=[{"technician_id": "T1", "hourly_rate": 20, "billable_rate": 50}],
    )


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: Settings(store_timeout=1.0)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"


class TestReconcile:
    def test_pass(self, client, store):
        resp = client.post("/api/v1/reconcile", json={"as_of": "2024-06-12"})
        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["summary"]["slot_counts"]["match"] == 1
        assert body["summary"]["slot_counts"]["discrepancy"] == 1
        assert body["summary"]["total_revenue"] == 400.0
        statuses = {s["technician_id"]: s for s in body["slots"]}
        assert statuses["T1"]["verified"] is True
        assert statuses["T2"]["difference"] == -2.0
        assert store.verify_calls == [["w1"]]
        assert body["audit"] is None

    def test_week_with_audit(self, client):
        resp = client.post(
            "/api/v1/reconcile",
            json={"as_of": "2024-06-12", "period": "week", "include_audit": True},
        )
        body = resp.json()
        assert body["summary"]["date_range"] == {"start": "2024-06-10", "end": "2024-06-16"}
        assert body["audit"]["period"]["kind"] == "week"
        assert len(body["weekly"]) == 1

    def test_unknown_period(self, client):
        body = client.post("/api/v1/reconcile", json={"period": "decade"}).json()
        assert body["success"] is False
        assert body["error_type"] == "invalid_request"


class TestAgree:
    def test_agree_discrepancy(self, client, store):
        body = client.post("/api/v1/agree", json={"technician_id": "T2", "date": "2024-06-10"}).json()
        assert body["success"] is True
        assert body["slot"]["verified"] is True
        assert body["slot"]["status"] == "discrepancy"
        assert ["w2"] in store.verify_calls

    def test_agree_not_found(self, client):
        body = client.post("/api/v1/agree", json={"technician_id": "T9", "date": "2024-06-10"}).json()
        assert body["success"] is False
        assert body["error_type"] == "not_found"


class TestWrites:
    def test_webhook_hours(self, client, store):
        resp = client.post("/api/v1/webhook-hours", json={
            "technician_id": "T3", "date": "2024-06-11", "hours": 4.5,
        })
        body = resp.json()
        assert body["success"] is True
        assert store.imported[-1]["technician_id"] == "T3"
        assert store.imported[-1]["hours_worked"] == 4.5
        assert store.imported[-1]["verified"] is False
        assert store.imported[-1]["id"] == body["id"]

    @pytest.mark.parametrize("payload", [
        {"date": "2024-06-11", "hours": 4},
        {"technician_id": "T3", "hours": 4},
        {"technician_id": "T3", "date": "2024-06-11", "hours": 0},
        {"technician_id": "T3", "date": "2024-06-11", "hours": 25},
        {"technician_id": "T3", "date": "not-a-date", "hours": 4},
    ])
    def test_webhook_rejects_invalid(self, client, store, payload):
        resp = client.post("/api/v1/webhook-hours", json=payload)
        assert resp.status_code == 422
        assert len(store.imported) == 2

    def test_create_manual_entry(self, client, store):
        body = client.post("/api/v1/entries", json={
            "id": "m9", "technician_id": "T1", "date": "2024-06-15", "hours_worked": 5,
            "customer_id": "C1",
        }).json()
        assert body == {"success": True, "id": "m9", "error_type": None, "errors": None}
        assert store.manual[-1]["source"] == "manual"

    def test_put_rate_upserts(self, client, store):
        body = client.put("/api/v1/rates", json={
            "technician_id": "T1", "hourly_rate": 25, "billable_rate": 60,
        }).json()
        assert body["success"] is True
        assert body["id"] == "T1"
        assert len(store.rates) == 1
        assert store.rates[0]["hourly_rate"] == 25

    def test_put_rate_rejects_negative(self, client):
        resp = client.put("/api/v1/rates", json={"technician_id": "T1", "hourly_rate": -1})
        assert resp.status_code == 422

    def test_put_travel(self, client, store):
        body = client.put("/api/v1/travel", json={
            "customer_id": "C1", "technician_id": "T1",
            "travel_expense_to_technician": 10, "travel_expense_from_client": 25,
        }).json()
        assert body["success"] is True
        assert body["id"] == "C1/T1"
        assert len(store.travel) == 1
