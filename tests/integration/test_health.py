"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sentry_sdk.integrations.logging import LoggingIntegration

from app import create_app
from config import AppSettings, SentrySettings
from dependencies import get_provider_directory
from errors import register_error_handlers
from infrastructure.providers.memory_directory import InMemoryProviderDirectory
from routes.health_routes import router as health_router


def _build_test_app(
    redis_ok: bool = True,
    in_memory: bool = False,
    sweeper_running: bool = True,
) -> FastAPI:
    """
    Build a minimal FastAPI app with a mocked provider store injected via lifespan.
    No real network connections are made.
    """
    if in_memory:
        directory = InMemoryProviderDirectory()
    else:
        directory = AsyncMock()
        if redis_ok:
            directory.ping = AsyncMock(return_value=True)
        else:
            directory.ping = AsyncMock(side_effect=Exception("redis down"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.provider_directory = directory
        app.state.sweeper = SimpleNamespace(running=sweeper_running)
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


class TestHealthEndpoint:
    def test_healthy_when_redis_ok(self):
        app = _build_test_app(redis_ok=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["provider_store"] == "ok"
        assert body["checks"]["sweeper"] == "running"

    def test_unhealthy_when_redis_fails(self):
        app = _build_test_app(redis_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["provider_store"] == "error"

    def test_degraded_when_in_memory(self):
        app = _build_test_app(in_memory=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["provider_store"] == "in_memory"

    def test_reports_stopped_sweeper(self):
        app = _build_test_app(sweeper_running=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.json()["checks"]["sweeper"] == "stopped"


def test_full_app_health_and_sweeper_lifecycle(directory, generator):
    app = create_app(AppSettings(), provider_directory=directory, generator=generator)
    with TestClient(app) as client:
        resp = client.get("/health")
        sweeper = client.app.state.sweeper
        assert sweeper.running is True
    assert resp.json()["checks"]["sweeper"] == "running"
    assert sweeper.running is False


def test_provider_directory_resolved_through_dependency():
    app = _build_test_app(in_memory=True)
    unreachable = AsyncMock()
    unreachable.ping = AsyncMock(return_value=False)
    app.dependency_overrides[get_provider_directory] = lambda: unreachable
    with TestClient(app) as client:
        resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json()["checks"]["provider_store"] == "error"


def test_health_schema_documented():
    with TestClient(_build_test_app()) as client:
        schema = client.get("/openapi.json").json()
    assert "HealthResponse" in schema["components"]["schemas"]


def test_sentry_initialised_with_logging_integration(mocker, directory, generator):
    init = mocker.patch("app.sentry_sdk.init")
    settings = AppSettings(sentry=SentrySettings(sentry_dsn="https://key@o0.ingest.sentry.io/0"))
    create_app(settings, provider_directory=directory, generator=generator)
    init.assert_called_once()
    integrations = init.call_args.kwargs["integrations"]
    assert any(isinstance(i, LoggingIntegration) for i in integrations)
