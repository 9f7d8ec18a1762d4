"""Tests for the application factory, health checks and stats endpoint."""

from __future__ import annotations

from fastapi.testclient import TestClient

from bortmax.infrastructure.config.schema import AppConfig
from bortmax.interfaces.app import create_app
from bortmax.interfaces.app_state import AppState


def _config() -> AppConfig:
    return AppConfig.model_validate({"upstream": {"base_url": "http://vault.test/"}})


class TestHealthChecks:
    def test_health_without_startup(self) -> None:
        resp = TestClient(create_app(_config())).get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_not_ready_before_lifespan(self) -> None:
        resp = TestClient(create_app(_config())).get("/ready")
        assert resp.status_code == 503

    def test_ready_after_lifespan_startup(self) -> None:
        with TestClient(create_app(_config())) as client:
            resp = client.get("/ready")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ready"}

    def test_health_checks_carry_cors_headers(self) -> None:
        resp = TestClient(create_app(_config())).get("/health")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"


class TestLifespanWiring:
    def test_services_are_wired(self) -> None:
        app = create_app(_config())
        with TestClient(app):
            state: AppState = app.state  # type: ignore[assignment]
            assert state.catalog_cache is not None
            assert state.stremio_stream_uc is not None
            assert not state.http_client.is_closed
            client = state.http_client
        assert client.is_closed

    def test_graceful_shutdown_not_ready_after_exit(self) -> None:
        app = create_app(_config())
        with TestClient(app):
            pass
        assert not app.state.graceful_shutdown.is_ready


class TestStats:
    def test_metrics_snapshot(self) -> None:
        with TestClient(create_app(_config())) as client:
            data = client.get("/stats/metrics").json()

        assert set(data) >= {
            "uptime_seconds",
            "upstream_fetch",
            "catalog_cache",
            "streams",
            "active_requests",
        }
        # The stats request itself is in flight while the snapshot is taken.
        assert data["active_requests"] == 1
