from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from dedupmq.api.app import create_app
from dedupmq.application.engine import DedupEngine, EngineConfig
from dedupmq.config.settings import Settings, get_settings
from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.infra.store_memory import InMemoryBackend
from dedupmq.observability.logging import CorrelationIdFilter


class FakeClock:
    """Relógio monotônico controlado pelo teste."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_dedupmq_logging():
    """Remove o handler instalado por configure_logging ao fim do teste."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_backend(clock: FakeClock) -> InMemoryBackend:
    return InMemoryBackend(clock=clock)


@pytest.fixture()
def store_client(memory_backend: InMemoryBackend) -> DedupStoreClient:
    return DedupStoreClient(memory_backend)


@pytest.fixture()
def sensors_engine(store_client: DedupStoreClient) -> DedupEngine:
    """Engine com filtro sensors/+/temp e TTL de 5s."""
    config = EngineConfig.build(["sensors/+/temp"], ttl_seconds=5)
    return DedupEngine(config, store_client)


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DEDUPMQ_TOPICS", "sensors/+/temp")
    monkeypatch.setenv("DEDUPMQ_TTL_SECONDS", "5")
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()


@pytest.fixture()
def default_settings() -> Settings:
    return Settings(topics=["sensors/+/temp"], ttl_seconds=5)
