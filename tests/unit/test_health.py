"""Tests for health check endpoints."""

from fastapi.testclient import TestClient

from backoffice.db.migrations import MigrationReport, MigrationStatus


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_basic_health_check(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_liveness_probe(self, client: TestClient):
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_after_fresh_install(self, client: TestClient):
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["migration"]["migration_status"] == "fresh_install"

    def test_readiness_reports_failed_migration(self, client: TestClient):
        client.app.state.migration_report = MigrationReport(
            status=MigrationStatus.FAILED, error="boom",
        )
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["migration"]["status"] == "degraded"
        assert data["checks"]["migration"]["error"] == "boom"
