"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

import server
from display_audit.audit import AuditFacts, OrientationAudit
from display_audit.collectors.drm import DrmConnector, DrmFacts


class FakeHostAudit(OrientationAudit):
    """Audit that skips probing and analyzes a fixed laptop panel."""

    def collect(self):
        assert not self.config.use_input_tools
        return AuditFacts(drm=DrmFacts(connectors=[
            DrmConnector("card0-eDP-1", "connected", panel_orientation="right_side_up"),
        ]))


@pytest.fixture
def client():
    return TestClient(server.app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "1.0.0"}


class TestAudit:
    """Tests for GET /audit."""

    def test_audit(self, client, monkeypatch):
        monkeypatch.setattr(server, "OrientationAudit", FakeHostAudit)

        response = client.get("/audit", params={"timeout": 1.0, "compositor": False, "input_tools": False})

        assert response.status_code == 200
        data = response.json()
        assert data["primary"] == "eDP-1"
        assert data["records"][0]["sources"]["kernel_panel"]["degrees"] == 270

    def test_invalid_timeout(self, client):
        response = client.get("/audit", params={"timeout": 0})
        assert response.status_code == 400
        assert "probe_timeout" in response.json()["detail"]

    def test_audit_failure(self, client, monkeypatch):
        class BrokenAudit(OrientationAudit):
            def collect(self):
                raise RuntimeError("sysfs exploded")

        monkeypatch.setattr(server, "OrientationAudit", BrokenAudit)

        response = client.get("/audit")

        assert response.status_code == 500
        assert "sysfs exploded" in response.json()["detail"]


class TestReconcile:
    """Tests for POST /reconcile."""

    def test_reconcile(self, client):
        response = client.post("/reconcile", json={
            "cmdline": "1",
            "panel": "normal",
            "compositor": "right",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["display_id"] == "console"
        assert data["effective_console"] == 90
        assert data["effective_gui"] == 270
        assert [c["kind"] for c in data["conflicts"]] == [
            "kernel_fbcon_mismatch",
            "compositor_double_rotation",
        ]

    def test_reconcile_empty(self, client):
        response = client.post("/reconcile", json={"display_id": "DSI-1"})
        data = response.json()
        assert data["effective_gui"] is None
        assert data["conflicts"][0]["kind"] == "no_orientation_signal"


class TestTouchMatrix:
    """Tests for GET /touch-matrix/{rotation}."""

    def test_degrees(self, client):
        response = client.get("/touch-matrix/180")
        assert response.status_code == 200
        assert response.json() == {
            "degrees": 180,
            "matrix": "-1 0 1 0 -1 1 0 0 1",
            "libinput_calibration": "-1 0 1 0 -1 1",
        }

    def test_word(self, client):
        assert client.get("/touch-matrix/right").json()["degrees"] == 270

    def test_unknown(self, client):
        response = client.get("/touch-matrix/diagonal")
        assert response.status_code == 400
