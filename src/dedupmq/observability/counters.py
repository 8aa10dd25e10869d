"""Contadores de decisão para operabilidade dos adapters de host.

Ocorrências de StoreError são contadas aqui (o engine apenas faz fail-open).
"""

from __future__ import annotations

import threading
from collections import Counter

from dedupmq.application.engine import DecisionOutcome, DecisionReason


class DecisionCounters:
    """Contadores thread-safe por motivo de decisão."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[str] = Counter()

    def record(self, outcome: DecisionOutcome) -> None:
        with self._lock:
            self._counts[outcome.reason.value] += 1

    def snapshot(self) -> dict[str, int]:
        """Retorna cópia dos contadores (todas as chaves presentes)."""
        with self._lock:
            return {reason.value: self._counts[reason.value] for reason in DecisionReason}

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
