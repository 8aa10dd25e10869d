"""Backend em memória para desenvolvimento, testes e nó único.

Responsabilidades:
- Implementar KeyValueBackend com dict protegido por lock
- Gerenciar TTL com relógio monotônico injetável
- Oferecer add atômico (set-if-not-exists)

⚠️ Não compartilha estado entre instâncias do broker.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from dedupmq.domain.seen_store import KeyValueBackend
from dedupmq.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

# Varredura completa de expirados a cada N escritas
_SWEEP_EVERY_WRITES = 1024


class InMemoryBackend(KeyValueBackend):
    """Store em memória com expiração por entrada.

    Estrutura interna:
        {key: (value, expire_at)}
    """

    supports_atomic_add = True

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._writes = 0

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._get_live(key, self._clock())

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            self._entries[key] = (value, now + ttl_seconds)
            self._after_write(now)

    def add(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Set-if-not-exists sob lock: sem janela de corrida."""
        with self._lock:
            now = self._clock()
            if self._get_live(key, now) is not None:
                return False
            self._entries[key] = (value, now + ttl_seconds)
            self._after_write(now)
            return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._sweep(self._clock())
            return len(self._entries)

    def _get_live(self, key: str, now: float) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expire_at = entry
        if expire_at <= now:
            del self._entries[key]
            return None
        return value

    def _after_write(self, now: float) -> None:
        self._writes += 1
        if self._writes % _SWEEP_EVERY_WRITES == 0:
            self._sweep(now)

    def _sweep(self, now: float) -> None:
        """Remove entradas expiradas."""
        expired = [k for k, (_, expire_at) in self._entries.items() if expire_at <= now]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("Entradas expiradas removidas", extra={"removed": len(expired)})
