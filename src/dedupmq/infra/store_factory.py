"""Factory backend-agnóstica para DedupStoreClient.

Responsabilidades:
- Criar o backend de vistos conforme settings.store_backend
- Configurar cliente Redis com pool e timeouts
- Registrar escolha de backend
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import redis

from dedupmq.domain.errors import ConfigurationError
from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.infra.store_memory import InMemoryBackend
from dedupmq.infra.store_redis import RedisBackend
from dedupmq.observability.logging import get_logger

if TYPE_CHECKING:
    from dedupmq.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_redis_client(settings: Settings) -> Any:
    """Cria cliente Redis com pool de conexões (lazy: não conecta aqui).

    Timeout de socket limita o bloqueio no caminho de entrega; estouro
    surge como redis.exceptions.TimeoutError.
    """
    options: dict[str, Any] = {
        "socket_timeout": settings.store_timeout_seconds,
        "socket_connect_timeout": settings.store_timeout_seconds,
        "max_connections": settings.store_max_connections,
        "decode_responses": True,
    }
    if settings.redis_url:
        return redis.Redis.from_url(settings.redis_url, **options)
    return redis.Redis(
        host=settings.store_host,
        port=settings.store_port,
        db=settings.store_db,
        **options,
    )


def create_store_client(
    settings: Settings,
    redis_client: Any | None = None,
) -> DedupStoreClient:
    """Factory para DedupStoreClient.

    Args:
        settings: Configurações já validadas
        redis_client: Cliente Redis pré-construído (opcional, útil em testes)

    Raises:
        ConfigurationError: Se backend não reconhecido
    """
    backend = settings.store_backend.lower()

    if backend == "memory":
        logger.warning("Usando store de dedupe em memória (não compartilhado entre nós)")
        kv = InMemoryBackend()
    elif backend == "redis":
        client = redis_client if redis_client is not None else create_redis_client(settings)
        logger.info(
            "Usando store de dedupe Redis",
            extra={
                "endpoint": _describe_endpoint(settings),
                "timeout_seconds": settings.store_timeout_seconds,
            },
        )
        kv = RedisBackend(client)
    else:
        raise ConfigurationError(f"Backend de store não reconhecido: {backend}")

    return DedupStoreClient(
        kv,
        key_prefix=settings.store_key_prefix,
        use_atomic_add=settings.store_atomic_add,
    )


def _describe_endpoint(settings: Settings) -> str:
    """Endpoint sem credenciais, para logs."""
    if settings.redis_url:
        return settings.redis_url.split("@")[-1]
    return f"{settings.store_host}:{settings.store_port}/{settings.store_db}"
