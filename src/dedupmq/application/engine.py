"""Dedup Engine: decisão PASS/DROP por mensagem.

Fluxo por mensagem (sem estado entre chamadas além do store externo):
1. Casa o tópico contra os filtros configurados
2. Sem casamento → PASS (sem hash, sem acesso ao store)
3. Casou → fingerprint do payload
4. seen_and_mark(fingerprint, ttl)
5. DUPLICATE → DROP; NOVEL → PASS; STORE_ERROR → PASS (fail-open)

A configuração é imutável e injetada na construção; não há globais, então
várias instâncias independentes podem coexistir.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from dedupmq.domain.errors import ConfigurationError
from dedupmq.domain.fingerprint import fingerprint
from dedupmq.domain.seen_store import Decision, SeenStatus
from dedupmq.domain.topics import DEFAULT_MAX_FILTERS, TopicFilter, TopicFilterSet
from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.infra.store_factory import create_store_client
from dedupmq.observability.logging import get_logger

if TYPE_CHECKING:
    from dedupmq.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 60


class DecisionReason(StrEnum):
    """Motivo que levou à decisão."""

    UNFILTERED = "unfiltered"
    NOVEL = "novel"
    DUPLICATE = "duplicate"
    STORE_ERROR = "store_error"


_STATUS_TO_OUTCOME: dict[SeenStatus, tuple[Decision, DecisionReason]] = {
    SeenStatus.NOVEL: (Decision.PASS, DecisionReason.NOVEL),
    SeenStatus.DUPLICATE: (Decision.DROP, DecisionReason.DUPLICATE),
    SeenStatus.STORE_ERROR: (Decision.PASS, DecisionReason.STORE_ERROR),
}


@dataclass(slots=True, frozen=True)
class StoreEndpoint:
    """Endereço do store externo."""

    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(slots=True, frozen=True)
class EngineConfig:
    """Configuração imutável do engine (carregada uma vez)."""

    topic_filters: TopicFilterSet
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    store_endpoint: StoreEndpoint | None = None
    verbose: bool = False

    @classmethod
    def build(
        cls,
        topic_filters: Iterable[str],
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        store_endpoint: StoreEndpoint | None = None,
        verbose: bool = False,
        max_filters: int = DEFAULT_MAX_FILTERS,
    ) -> EngineConfig:
        """Valida e constrói a configuração.

        Raises:
            ConfigurationError: Filtro inválido, TTL não positivo ou
                filtros demais
        """
        if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int) or ttl_seconds <= 0:
            raise ConfigurationError(f"TTL deve ser inteiro positivo (recebido {ttl_seconds!r})")
        filters = TopicFilterSet.parse(topic_filters, max_filters=max_filters)
        return cls(
            topic_filters=filters,
            ttl_seconds=ttl_seconds,
            store_endpoint=store_endpoint,
            verbose=verbose,
        )


def _store_endpoint(settings: Settings) -> StoreEndpoint:
    if settings.redis_url:
        parsed = urlparse(settings.redis_url)
        return StoreEndpoint(parsed.hostname or "localhost", parsed.port or 6379)
    return StoreEndpoint(settings.store_host, settings.store_port)


def load_engine_config(settings: Settings) -> EngineConfig:
    """Valida settings e retorna EngineConfig.

    Raises:
        ConfigurationError: Com todos os problemas encontrados
    """
    settings.validate_all()
    return EngineConfig.build(
        settings.topics,
        ttl_seconds=settings.ttl_seconds,
        store_endpoint=_store_endpoint(settings),
        verbose=settings.verbose_log,
        max_filters=settings.max_topics,
    )


@dataclass(slots=True, frozen=True)
class DecisionOutcome:
    """Decisão com contexto para os adapters (contadores, logs)."""

    decision: Decision
    reason: DecisionReason
    matched_filter: TopicFilter | None = None
    fingerprint: str | None = None


class DedupEngine:
    """Orquestra matcher, fingerprint e store client por mensagem.

    Seguro para chamadas concorrentes: sem estado mutável interno.
    """

    def __init__(self, config: EngineConfig, store_client: DedupStoreClient) -> None:
        self._config = config
        self._store = store_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store_client: DedupStoreClient | None = None,
    ) -> DedupEngine:
        """Valida configuração e monta o engine.

        Raises:
            ConfigurationError: Configuração inválida (aborta a inicialização)
        """
        config = load_engine_config(settings)
        if store_client is None:
            store_client = create_store_client(settings)
        return cls(config, store_client)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def store_client(self) -> DedupStoreClient:
        return self._store

    def decide(self, topic: str, payload: bytes) -> Decision:
        """Retorna PASS ou DROP para a mensagem."""
        return self.evaluate(topic, payload).decision

    def evaluate(self, topic: str, payload: bytes) -> DecisionOutcome:
        """Igual a decide, com motivo, filtro casado e fingerprint."""
        verbose = self._config.verbose

        matched = self._config.topic_filters.first_match(topic)
        if matched is None:
            if verbose:
                logger.info("topic_unfiltered", extra={"topic": topic})
            return DecisionOutcome(Decision.PASS, DecisionReason.UNFILTERED)

        key = fingerprint(payload)
        if verbose:
            logger.info(
                "topic_matched",
                extra={
                    "topic": topic,
                    "topic_filter": matched.pattern,
                    "fingerprint": key,
                    "payload_size": len(payload),
                },
            )

        status = self._store.seen_and_mark(key, self._config.ttl_seconds)
        decision, reason = _STATUS_TO_OUTCOME[status]

        if reason is DecisionReason.DUPLICATE:
            logger.info(
                "duplicate_dropped",
                extra={"topic": topic, "fingerprint": key, "payload_size": len(payload)},
            )
        elif reason is DecisionReason.STORE_ERROR:
            logger.warning(
                "store_error_fail_open",
                extra={"topic": topic, "fingerprint": key},
            )
        elif verbose:
            logger.info(
                "fingerprint_marked",
                extra={"fingerprint": key, "ttl_seconds": self._config.ttl_seconds},
            )

        return DecisionOutcome(decision, reason, matched_filter=matched, fingerprint=key)
