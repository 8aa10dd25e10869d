"""Configurações do dedupmq via variáveis de ambiente.

Todas as configurações são carregadas de env vars com prefixo DEDUPMQ_.
Carregadas uma vez na inicialização; imutáveis durante o processo.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from dedupmq.domain.errors import ConfigurationError
from dedupmq.domain.topics import DEFAULT_MAX_FILTERS, TopicFilterSet

VALID_STORE_BACKENDS = {"memory", "redis"}
VALID_LOG_FORMATS = {"json", "text"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="DEDUPMQ_",
        case_sensitive=False,
    )

    # Aplicação
    service_name: str = "dedupmq"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text

    # Filtros e janela de dedupe
    topics: Annotated[list[str], NoDecode] = []  # Lista JSON ou separada por vírgula
    max_topics: int = DEFAULT_MAX_FILTERS
    ttl_seconds: int = 60
    verbose_log: bool = False  # Nunca loga payload, apenas tamanho e fingerprint

    # Store de vistos recentemente
    store_backend: str = "memory"  # memory | redis
    store_host: str = "127.0.0.1"
    store_port: int = 6379
    store_db: int = 0
    redis_url: str | None = None  # Sobrescreve host/port/db quando definido
    store_timeout_seconds: float = 0.25  # Timeout de socket; estouro vira StoreError
    store_key_prefix: str = "dedupmq:"
    store_atomic_add: bool = True  # Preferir SET NX EX quando disponível
    store_max_connections: int = 50

    @field_validator("topics", mode="before")
    @classmethod
    def _split_topics(cls, value: Any) -> Any:
        """Aceita '["a/#", "b/+"]' ou 'a/#,b/+' vindos do ambiente."""
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [item.strip() for item in stripped.split(",") if item.strip()]
        return value

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def validate_engine_config(self) -> list[str]:
        """Valida filtros, TTL e limites do engine.

        Retorna lista de erros (vazia = OK).
        """
        errors: list[str] = []
        if self.ttl_seconds <= 0:
            errors.append(f"DEDUPMQ_TTL_SECONDS deve ser positivo (recebido {self.ttl_seconds})")
        if self.max_topics <= 0:
            errors.append("DEDUPMQ_MAX_TOPICS deve ser positivo")
        else:
            try:
                TopicFilterSet.parse(self.topics, max_filters=self.max_topics)
            except ConfigurationError as e:
                errors.append(str(e))
        if self.log_format.lower() not in VALID_LOG_FORMATS:
            errors.append("DEDUPMQ_LOG_FORMAT inválido: use json | text")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"DEDUPMQ_LOG_LEVEL inválido: {self.log_level!r}")
        return errors

    def validate_store_config(self) -> list[str]:
        """Valida backend e endpoint do store de vistos.

        Em staging/prod, memory é proibido (cada nó teria sua própria janela).
        """
        errors: list[str] = []
        backend = self.store_backend.lower()
        if backend not in VALID_STORE_BACKENDS:
            errors.append(
                f"DEDUPMQ_STORE_BACKEND '{backend}' inválido. "
                f"Valores válidos: {sorted(VALID_STORE_BACKENDS)}"
            )

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "DEDUPMQ_STORE_BACKEND=memory é proibido em staging/production. "
                "Configure Redis para dedupe compartilhado."
            )

        if self.redis_url:
            parsed = urlparse(self.redis_url)
            if parsed.scheme not in ("redis", "rediss", "unix") or (
                parsed.scheme != "unix" and not parsed.hostname
            ):
                errors.append(f"DEDUPMQ_REDIS_URL malformada: {self.redis_url!r}")
        else:
            if not self.store_host.strip():
                errors.append("DEDUPMQ_STORE_HOST não pode ser vazio")
            if not 0 < self.store_port < 65536:
                errors.append(
                    f"DEDUPMQ_STORE_PORT fora do intervalo 1-65535 (recebido {self.store_port})"
                )
            if self.store_db < 0:
                errors.append("DEDUPMQ_STORE_DB não pode ser negativo")

        if self.store_timeout_seconds <= 0:
            errors.append("DEDUPMQ_STORE_TIMEOUT_SECONDS deve ser positivo")
        if self.store_max_connections <= 0:
            errors.append("DEDUPMQ_STORE_MAX_CONNECTIONS deve ser positivo")
        return errors

    def validate_all(self) -> None:
        """Executa todas as validações e falha explicitamente.

        Raises:
            ConfigurationError: Com todos os problemas encontrados
        """
        errors = [*self.validate_engine_config(), *self.validate_store_config()]
        if errors:
            raise ConfigurationError(f"Configuração inválida: {'; '.join(errors)}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings."""
    return Settings()
