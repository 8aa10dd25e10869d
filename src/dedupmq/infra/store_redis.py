"""Backend Redis para produção.

Responsabilidades:
- Implementar KeyValueBackend usando redis-py
- Usar SET NX EX para add atômico
- TTL nativo do Redis
- Converter toda RedisError (timeout, conexão, protocolo) em StoreError

O cliente redis-py usa pool de conexões e é seguro para uso concorrente.
"""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import RedisError

from dedupmq.domain.errors import StoreError
from dedupmq.domain.seen_store import KeyValueBackend
from dedupmq.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class RedisBackend(KeyValueBackend):
    """Store Redis para produção.

    Estrutura Redis:
        KEY: {key} (já com prefixo aplicado pelo cliente)
        VALUE: "1"
        EXPIRE: TTL segundos (automático)
    """

    supports_atomic_add = True

    def __init__(self, redis_client: Any) -> None:
        self._redis = redis_client

    def get(self, key: str) -> str | None:
        try:
            value = self._redis.get(key)
        except RedisError as e:
            raise StoreError("get", f"Redis indisponível: {e}") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._redis.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise StoreError("set", f"Redis indisponível: {e}") from e

    def add(self, key: str, value: str, ttl_seconds: int) -> bool:
        """SET NX EX: grava apenas se não existir."""
        try:
            was_set = self._redis.set(key, value, nx=True, ex=ttl_seconds)
        except RedisError as e:
            raise StoreError("add", f"Redis indisponível: {e}") from e
        return bool(was_set)

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except RedisError as e:
            raise StoreError("ping", f"Redis indisponível: {e}") from e

    def close(self) -> None:
        try:
            self._redis.close()
        except RedisError as e:
            logger.warning(
                "Falha ao encerrar conexões Redis",
                extra={"error_type": type(e).__name__},
            )
