"""Casamento de tópicos contra filtros hierárquicos (sintaxe MQTT).

Regras:
- Níveis separados por "/"
- "+" casa exatamente um nível (inclusive nível vazio)
- "#" apenas no último nível; casa o nível corrente e todos os seguintes
- Tópicos iniciados por "$" (sistema) não casam filtros com curinga no
  primeiro nível
- Filtros são validados no carregamento; nunca no momento do casamento

Funções puras, sem estado compartilhado: seguras para uso concorrente.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from dedupmq.domain.errors import ConfigurationError, InvalidTopicFilterError

LEVEL_SEPARATOR = "/"
SINGLE_LEVEL_WILDCARD = "+"
MULTI_LEVEL_WILDCARD = "#"
SYSTEM_TOPIC_PREFIX = "$"

# Limite herdado do plugin de broker (MAX_TOPICS)
DEFAULT_MAX_FILTERS = 64


def _validate_filter(topic_filter: str) -> tuple[str, ...]:
    """Valida sintaxe do filtro e retorna seus níveis."""
    if not topic_filter:
        raise InvalidTopicFilterError(topic_filter, "filtro vazio")
    if "\x00" in topic_filter:
        raise InvalidTopicFilterError(topic_filter, "caractere NUL não permitido")

    levels = tuple(topic_filter.split(LEVEL_SEPARATOR))
    last_index = len(levels) - 1
    for index, level in enumerate(levels):
        if MULTI_LEVEL_WILDCARD in level:
            if level != MULTI_LEVEL_WILDCARD:
                raise InvalidTopicFilterError(topic_filter, "'#' deve ocupar o nível inteiro")
            if index != last_index:
                raise InvalidTopicFilterError(topic_filter, "'#' só é permitido no último nível")
        if SINGLE_LEVEL_WILDCARD in level and level != SINGLE_LEVEL_WILDCARD:
            raise InvalidTopicFilterError(topic_filter, "'+' deve ocupar o nível inteiro")
    return levels


def _is_publish_topic(topic: str) -> bool:
    """Tópico de publicação válido: não vazio e sem curingas."""
    return bool(topic) and SINGLE_LEVEL_WILDCARD not in topic and MULTI_LEVEL_WILDCARD not in topic


def _match_levels(levels: tuple[str, ...], topic: str) -> bool:
    if not _is_publish_topic(topic):
        return False

    topic_levels = topic.split(LEVEL_SEPARATOR)

    # Tópicos de sistema só casam filtros com primeiro nível literal
    if topic_levels[0].startswith(SYSTEM_TOPIC_PREFIX) and levels[0] in (
        SINGLE_LEVEL_WILDCARD,
        MULTI_LEVEL_WILDCARD,
    ):
        return False

    for index, level in enumerate(levels):
        if level == MULTI_LEVEL_WILDCARD:
            return True
        if index >= len(topic_levels):
            return False
        if level != SINGLE_LEVEL_WILDCARD and level != topic_levels[index]:
            return False

    return len(levels) == len(topic_levels)


@dataclass(slots=True, frozen=True)
class TopicFilter:
    """Filtro de tópico já validado (imutável)."""

    pattern: str
    levels: tuple[str, ...]

    @classmethod
    def parse(cls, pattern: str) -> TopicFilter:
        """Valida e constrói o filtro.

        Raises:
            InvalidTopicFilterError: Se a sintaxe for inválida
        """
        return cls(pattern=pattern, levels=_validate_filter(pattern))

    @property
    def has_wildcards(self) -> bool:
        return any(
            level in (SINGLE_LEVEL_WILDCARD, MULTI_LEVEL_WILDCARD) for level in self.levels
        )

    def matches(self, topic: str) -> bool:
        """Retorna True se o tópico casa com este filtro."""
        return _match_levels(self.levels, topic)

    def __str__(self) -> str:
        return self.pattern


def topic_matches(topic_filter: str, topic: str) -> bool:
    """Avalia um tópico contra um filtro em forma de string.

    O filtro é validado antes do casamento; filtros inválidos levantam
    InvalidTopicFilterError. Para o caminho quente use TopicFilter.parse uma
    única vez e chame TopicFilter.matches.
    """
    return _match_levels(_validate_filter(topic_filter), topic)


@dataclass(slots=True, frozen=True)
class TopicFilterSet:
    """Conjunto ordenado e imutável de filtros configurados."""

    filters: tuple[TopicFilter, ...] = ()

    @classmethod
    def parse(
        cls,
        patterns: Iterable[str],
        max_filters: int = DEFAULT_MAX_FILTERS,
    ) -> TopicFilterSet:
        """Valida todos os filtros; duplicatas exatas são descartadas.

        Raises:
            InvalidTopicFilterError: Filtro com sintaxe inválida
            ConfigurationError: Quantidade de filtros acima de max_filters
        """
        parsed: list[TopicFilter] = []
        seen: set[str] = set()
        for pattern in patterns:
            if pattern in seen:
                continue
            seen.add(pattern)
            parsed.append(TopicFilter.parse(pattern))

        if len(parsed) > max_filters:
            raise ConfigurationError(
                f"Quantidade de filtros ({len(parsed)}) excede o máximo de {max_filters}"
            )
        return cls(filters=tuple(parsed))

    def first_match(self, topic: str) -> TopicFilter | None:
        """Retorna o primeiro filtro que casa (interrompe a varredura) ou None."""
        for topic_filter in self.filters:
            if topic_filter.matches(topic):
                return topic_filter
        return None

    def matches_any(self, topic: str) -> bool:
        return self.first_match(topic) is not None

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self) -> Iterator[TopicFilter]:
        return iter(self.filters)

    @property
    def patterns(self) -> list[str]:
        return [f.pattern for f in self.filters]
