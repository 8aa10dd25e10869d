"""Taxonomia de erros do dedupmq.

- ConfigurationError: configuração inválida, fatal no carregamento
- StoreError: falha transitória no store externo, recuperada por chamada
"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Configuração inválida: impede a inicialização do engine."""

    pass


class InvalidTopicFilterError(ConfigurationError):
    """Filtro de tópico com sintaxe inválida."""

    def __init__(self, topic_filter: str, reason: str) -> None:
        super().__init__(f"Filtro de tópico inválido {topic_filter!r}: {reason}")
        self.topic_filter = topic_filter
        self.reason = reason


class StoreError(Exception):
    """Falha ao operar o store externo (timeout, conexão recusada, protocolo).

    Nunca deve ser convertida silenciosamente em novo/duplicado.
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
