"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dedupmq.api.routes import router
from dedupmq.application.engine import DedupEngine
from dedupmq.config.settings import Settings, get_settings
from dedupmq.observability.counters import DecisionCounters
from dedupmq.observability.logging import configure_logging, get_logger
from dedupmq.observability.middleware import DecisionTraceMiddleware

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, engine: DedupEngine | None = None) -> FastAPI:
    """Cria a aplicação FastAPI.

    Raises:
        ConfigurationError: Configuração inválida (aborta a inicialização)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.log_format)

    if engine is None:
        engine = DedupEngine.from_settings(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        engine.store_client.close()

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(DecisionTraceMiddleware)
    app.include_router(router)

    app.state.settings = settings
    app.state.engine = engine
    app.state.counters = DecisionCounters()

    logger.info(
        "Serviço de decisão iniciado",
        extra={
            "topics": len(engine.config.topic_filters),
            "ttl_seconds": engine.config.ttl_seconds,
        },
    )
    return app
