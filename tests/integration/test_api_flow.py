"""
Integration Tests for the REST API.

Drives a full engine (in-memory SQLite, manual clock, scripted oracle and
recording channel) through the HTTP surface.

Usage:
    pytest tests/integration/test_api_flow.py -v
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app

pytestmark = pytest.mark.integration


@pytest.fixture
def client(settings, engine):
    with TestClient(create_app(settings, engine=engine, start_scheduler=False)) as test_client:
        yield test_client


class TestHealth:
    def test_root_and_health(self, client):
        assert client.get("/").json()["service"] == "vigilant"

        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["components"]["scheduler"] == "disabled"
        assert body["components"]["notifications"] == "log"


class TestProfileEndpoints:
    def test_guest_profile_by_default(self, client):
        body = client.get("/api/user").json()

        assert body == {"name": "Guest", "role": "it_worker", "daily_limit_minutes": 360}

    def test_update_profile(self, client):
        response = client.post("/api/user", json={"name": "Sam", "role": "worker", "daily_limit_minutes": 90})

        assert response.status_code == 200
        assert response.json()["lock_state"] == "unlocked"
        assert client.get("/api/user").json() == {"name": "Sam", "role": "it_worker", "daily_limit_minutes": 90}

    def test_rejects_zero_limit(self, client):
        response = client.post("/api/user", json={"name": "Sam", "role": "student", "daily_limit_minutes": 0})

        assert response.status_code == 422

    def test_lowering_limit_locks_immediately(self, client):
        client.post("/api/usage", json={"duration_seconds": 120})

        response = client.post("/api/user", json={"name": "Sam", "role": "student", "daily_limit_minutes": 1})

        assert response.json()["lock_state"] == "locked"


class TestUsageAndLock:
    def test_budget_scenario(self, client):
        client.post("/api/user", json={"name": "Sam", "role": "student", "daily_limit_minutes": 1})

        first = client.post("/api/usage", json={"duration_seconds": 30}).json()
        assert first["total_seconds"] == 30
        assert first["lock_state"] == "unlocked"

        second = client.post("/api/usage", json={"duration_seconds": 31, "app_name": "Browser"}).json()
        assert second["total_seconds"] == 61
        assert second["lock_state"] == "locked"
        assert client.get("/api/lock").json()["lock_state"] == "locked"

        unlocked = client.post("/api/lock/unlock", json={"actor": "guardian"}).json()
        assert unlocked["lock_state"] == "unlocked"

        history = client.get("/api/lock").json()["history"]
        assert [h["to"] for h in history] == ["locked", "unlocked"]

    def test_stats_and_usage_log(self, client):
        client.post("/api/usage", json={"duration_seconds": 600, "app_name": "Editor"})
        client.post("/api/usage", json={"duration_seconds": -5})

        stats = client.get("/api/stats").json()
        assert stats["total_seconds"] == 600
        assert stats["remaining_seconds"] == 360 * 60 - 600

        logs = client.get("/api/usage").json()
        assert len(logs) == 1
        assert logs[0]["app_name"] == "Editor"

    def test_lock_history_limit(self, client):
        client.post("/api/user", json={"name": "Sam", "role": "student", "daily_limit_minutes": 1})
        client.post("/api/usage", json={"duration_seconds": 61})
        client.post("/api/lock/unlock")

        history = client.get("/api/lock", params={"limit": 1}).json()["history"]

        assert [h["to"] for h in history] == ["unlocked"]
        assert client.get("/api/lock", params={"limit": 0}).status_code == 422

    def test_unlock_without_body(self, client):
        assert client.post("/api/lock/unlock").json()["lock_state"] == "unlocked"

    def test_invalid_actor_rejected(self, client):
        assert client.post("/api/lock/unlock", json={"actor": "stranger"}).status_code == 422


class TestRoutineEndpoints:
    def test_routine_crud(self, client):
        late = client.post("/api/routines", json={"time": "22:30", "activity": "Sleep"}).json()["id"]
        client.post("/api/routines", json={"time": "07:00", "activity": "Run"})

        assert [r["time"] for r in client.get("/api/routines").json()] == ["07:00", "22:30"]
        assert client.patch(f"/api/routines/{late}", json={"completed": True}).status_code == 200
        assert client.delete(f"/api/routines/{late}").status_code == 200
        assert client.delete(f"/api/routines/{late}").status_code == 404

    def test_rejects_bad_time(self, client):
        assert client.post("/api/routines", json={"time": "25:00", "activity": "x"}).status_code == 422


class TestAdvisoryEndpoints:
    def test_neutral_until_refreshed(self, client):
        body = client.get("/api/advisory").json()
        assert body["source"] == "default"

        refreshed = client.post("/api/advisory/refresh").json()
        assert refreshed["score"] == 42
        assert refreshed["source"] == "oracle"

        history = client.get("/api/advisory/history").json()
        assert [h["score"] for h in history] == [42]


class TestEmergencyEndpoints:
    def test_no_guardians(self, client):
        body = client.post("/api/emergency").json()

        assert body["status"] == "no_guardians"

    def test_alerts_each_guardian(self, client, channel):
        client.post("/api/guardians", json={"name": "Ana", "phone": "+15550001"})
        client.post("/api/guardians", json={"name": "Ben", "email": "ben@example.com"})

        body = client.post("/api/emergency").json()

        assert body["status"] == "dispatched"
        assert sorted(body["notified"]) == ["Ana", "Ben"]
        assert sorted(channel.attempts) == ["Ana", "Ben"]

        state = client.get("/api/emergency").json()
        assert state["active"] is False
        assert state["last_outcome"]["status"] == "dispatched"
