"""Tests for the healthcheck endpoint."""

from __future__ import annotations

from otobook import Config, create_app


class TestConfig(Config):
    """Configuration used during testing."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    RPA_STORE = "memory"
    ENABLE_DEMO_API = False


def create_test_app():
    """Create an application instance configured for tests."""

    return create_app(TestConfig)


def test_health_endpoint_returns_ok():
    """The healthcheck endpoint should report ok and the workflow store in use."""

    app = create_test_app()
    client = app.test_client()

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "store": "memory"}


def test_demo_endpoint_can_be_disabled():
    app = create_test_app()
    client = app.test_client()

    response = client.post("/api/rpa/demo", json={})

    assert response.status_code == 404
