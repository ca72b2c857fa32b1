"""Integration tests for GET /api/health."""

from fastapi.testclient import TestClient

from api_helpers import build_test_app
from fakes import AsyncDatabase


class TestHealthEndpoint:
    def test_healthy_when_mongo_ok(self, app_settings, email_sender):
        app = build_test_app(app_settings, AsyncDatabase(healthy=True), email_sender)
        with TestClient(app) as client:
            resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "checks": {"mongodb": "ok"}}

    def test_unhealthy_when_mongo_fails(self, app_settings, email_sender):
        app = build_test_app(app_settings, AsyncDatabase(healthy=False), email_sender)
        with TestClient(app) as client:
            resp = client.get("/api/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["mongodb"] == "error"
