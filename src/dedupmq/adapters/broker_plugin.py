"""Adapter de plugin de broker (ciclo de vida estilo Mosquitto).

Responsabilidades:
- Traduzir opções do plugin (chave/valor) em Settings
- Configurar logging do processo e montar engine e contadores na inicialização
- Converter Decision em código de retorno do broker
- Liberar o store no cleanup

Opções reconhecidas:
    topic            (repetível) filtro de tópico
    ttl              janela de dedupe em segundos
    verbose_log      "true" ou "1" habilita log detalhado
    store_backend    memory | redis
    store_host       host do store (alias: memcached_host)
    store_port       porta do store (alias: memcached_port)
    redis_url        URL completa do Redis
    log_level        nível de log (default INFO)
    log_format       json | text

Um endereço de store (host, porta ou redis_url) sem store_backend explícito
seleciona o backend redis. Endereço com backend memory é erro de configuração.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from dedupmq.application.engine import DedupEngine
from dedupmq.config.settings import Settings
from dedupmq.domain.errors import ConfigurationError
from dedupmq.domain.seen_store import Decision
from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.observability.counters import DecisionCounters
from dedupmq.observability.logging import configure_logging, get_logger

logger: logging.Logger = get_logger(__name__)

# Códigos de retorno do callback de mensagem
MOSQ_ERR_SUCCESS = 0
MOSQ_ERR_PLUGIN_IGNORE = 17

_OPTION_ALIASES = {
    "ttl": "ttl_seconds",
    "store_host": "store_host",
    "memcached_host": "store_host",
    "store_port": "store_port",
    "memcached_port": "store_port",
    "redis_url": "redis_url",
    "store_backend": "store_backend",
    "log_level": "log_level",
    "log_format": "log_format",
}

_STORE_ADDRESS_FIELDS = frozenset({"store_host", "store_port", "redis_url"})


def parse_plugin_options(options: Iterable[tuple[str, str]]) -> Settings:
    """Constrói Settings a partir das opções do plugin.

    Valores ausentes caem no ambiente (DEDUPMQ_*) e nos defaults.

    Raises:
        ConfigurationError: Valor com tipo inválido (ex.: ttl não numérico) ou
            endereço de store combinado com backend memory
    """
    topics: list[str] = []
    values: dict[str, Any] = {}

    for key, value in options:
        if key == "topic":
            topics.append(value)
        elif key == "verbose_log":
            values["verbose_log"] = value.strip().lower() in ("true", "1")
        elif key in _OPTION_ALIASES:
            values[_OPTION_ALIASES[key]] = value
        else:
            logger.warning("Opção de plugin desconhecida ignorada", extra={"option": key})

    if topics:
        values["topics"] = topics

    try:
        settings = Settings(**values)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(f"Opções de plugin inválidas: {fields}") from e

    address_options = sorted(_STORE_ADDRESS_FIELDS & values.keys())
    if not address_options:
        return settings

    # store_backend vindo de opção ou de DEDUPMQ_STORE_BACKEND conta como explícito
    if "store_backend" not in settings.model_fields_set:
        logger.info(
            "Endereço de store informado; usando backend redis",
            extra={"options": address_options},
        )
        return settings.model_copy(update={"store_backend": "redis"})

    if settings.store_backend.lower() == "memory":
        raise ConfigurationError(
            f"Opções {', '.join(address_options)} exigem store compartilhado; "
            "store_backend=memory ignoraria o endereço"
        )
    return settings


class BrokerPlugin:
    """Ponte entre os callbacks do broker e o DedupEngine."""

    def __init__(self, engine: DedupEngine, counters: DecisionCounters | None = None) -> None:
        self._engine = engine
        self._counters = counters or DecisionCounters()

    @classmethod
    def init(
        cls,
        options: Iterable[tuple[str, str]],
        store_client: DedupStoreClient | None = None,
    ) -> BrokerPlugin:
        """Inicializa o plugin; falha de configuração aborta o carregamento.

        Instala o handler de log do dedupmq (como create_app), para que os
        registros de verbose_log cheguem ao log do broker.

        Raises:
            ConfigurationError: Opções ou configuração inválidas
        """
        settings = parse_plugin_options(options)
        engine = DedupEngine.from_settings(settings, store_client=store_client)
        configure_logging(settings.log_level, settings.service_name, settings.log_format)
        logger.info(
            "Plugin carregado",
            extra={
                "topics": len(engine.config.topic_filters),
                "ttl_seconds": engine.config.ttl_seconds,
                "store_backend": settings.store_backend,
                "store_endpoint": str(engine.config.store_endpoint),
            },
        )
        return cls(engine, DecisionCounters())

    @property
    def engine(self) -> DedupEngine:
        return self._engine

    @property
    def counters(self) -> DecisionCounters:
        return self._counters

    def on_message(self, topic: str, payload: bytes) -> int:
        """Callback por mensagem: SUCCESS entrega, PLUGIN_IGNORE descarta."""
        outcome = self._engine.evaluate(topic, payload)
        self._counters.record(outcome)
        if outcome.decision is Decision.DROP:
            return MOSQ_ERR_PLUGIN_IGNORE
        return MOSQ_ERR_SUCCESS

    def cleanup(self) -> None:
        self._engine.store_client.close()
        logger.info("Plugin finalizado", extra={"counters": self._counters.snapshot()})
