# tests/test_health.py

from fastapi.testclient import TestClient


def test_health_app(client: TestClient):
    response = client.get("/health/app")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db_ok(client: TestClient, fake_db):
    response = client.get("/health/db")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_db_degraded(client: TestClient, fake_db):
    fake_db.fail("properties")

    response = client.get("/health/db")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["details"]["tables"]["properties"] == {"status": "error"}
    assert data["details"]["tables"]["staff_tasks"]["status"] == "ok"
