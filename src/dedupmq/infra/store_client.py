"""Dedup Store Client: check-and-mark sobre o backend de vistos.

seen_and_mark é uma única operação lógica construída de:
- add atômico (set-if-not-exists) quando o backend oferece e está habilitado
- senão, leitura de existência seguida de escrita com expiração

No caminho em dois passos há janela de corrida: duas chamadas simultâneas
com o mesmo fingerprint podem ambas observar "não visto". Dedupe é
best-effort.

Qualquer StoreError vira SeenStatus.STORE_ERROR; nunca NOVEL/DUPLICATE.
"""

from __future__ import annotations

import logging

from dedupmq.domain.errors import StoreError
from dedupmq.domain.seen_store import SEEN_MARKER, KeyValueBackend, SeenStatus
from dedupmq.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

DEFAULT_KEY_PREFIX = "dedupmq:"


class DedupStoreClient:
    """Cliente do store de vistos recentemente, compartilhado entre chamadas."""

    def __init__(
        self,
        backend: KeyValueBackend,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        use_atomic_add: bool = True,
    ) -> None:
        self._backend = backend
        self._key_prefix = key_prefix
        self._atomic = use_atomic_add and backend.supports_atomic_add

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    @property
    def atomic(self) -> bool:
        """True se seen_and_mark usa add atômico (sem janela de corrida)."""
        return self._atomic

    def _make_key(self, fingerprint: str) -> str:
        return f"{self._key_prefix}{fingerprint}"

    def seen_and_mark(self, fingerprint: str, ttl_seconds: int) -> SeenStatus:
        """Verifica se o fingerprint já foi visto; se não, marca com TTL.

        Returns:
            DUPLICATE se havia entrada não expirada
            NOVEL se não havia e a marcação foi gravada
            STORE_ERROR se leitura ou escrita falhou
        """
        key = self._make_key(fingerprint)
        try:
            if self._atomic:
                is_new = self._backend.add(key, SEEN_MARKER, ttl_seconds)
                return SeenStatus.NOVEL if is_new else SeenStatus.DUPLICATE

            if self._backend.get(key) is not None:
                return SeenStatus.DUPLICATE
            self._backend.set(key, SEEN_MARKER, ttl_seconds)
            return SeenStatus.NOVEL

        except StoreError as e:
            logger.warning(
                "Falha no store de dedupe",
                extra={
                    "operation": e.operation,
                    "fingerprint": fingerprint,
                    "error": str(e),
                },
            )
            return SeenStatus.STORE_ERROR

    def ping(self) -> bool:
        """Retorna True se o backend responde; nunca levanta."""
        try:
            return self._backend.ping()
        except StoreError as e:
            logger.warning("Store de dedupe indisponível", extra={"error": str(e)})
            return False

    def close(self) -> None:
        self._backend.close()
