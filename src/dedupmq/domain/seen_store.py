"""Contrato do store de "vistos recentemente": Protocolo e Tipos.

Responsabilidades:
- Definir o contrato mínimo de backend chave-valor com expiração
- Definir os resultados de check-and-mark e as decisões do engine

O engine nunca lê o conteúdo do marcador; apenas presença/ausência.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum

SEEN_MARKER = "1"


class SeenStatus(StrEnum):
    """Resultado de seen_and_mark."""

    NOVEL = "novel"
    DUPLICATE = "duplicate"
    STORE_ERROR = "store_error"


class Decision(StrEnum):
    """Decisão terminal do engine para uma mensagem."""

    PASS = "pass"
    DROP = "drop"


class KeyValueBackend(ABC):
    """Contrato abstrato para o store externo de vistos recentemente.

    Implementações devem:
    - Ser seguras para uso concorrente
    - Levantar StoreError em qualquer falha operacional
    - Respeitar o TTL informado em set/add
    """

    supports_atomic_add: bool = False

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Retorna o marcador se existir e não tiver expirado.

        Raises:
            StoreError: Em falha de comunicação com o backend
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Grava o marcador com expiração.

        Raises:
            StoreError: Em falha de comunicação com o backend
        """
        ...

    def add(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Grava apenas se ausente, com expiração.

        A implementação padrão é get seguido de set, sem atomicidade. Backends
        com set-if-not-exists nativo sobrescrevem e declaram
        supports_atomic_add = True.

        Returns:
            True se gravou agora (novo), False se já existia

        Raises:
            StoreError: Em falha de comunicação com o backend
        """
        if self.get(key) is not None:
            return False
        self.set(key, value, ttl_seconds)
        return True

    @abstractmethod
    def ping(self) -> bool:
        """Verifica disponibilidade do backend.

        Raises:
            StoreError: Se o backend não responde
        """
        ...

    def close(self) -> None:  # noqa: B027
        """Libera conexões (opcional)."""
