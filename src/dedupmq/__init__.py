"""dedupmq: deduplicação de mensagens pub/sub por fingerprint de payload.

Uso típico:
    from dedupmq import DedupEngine, EngineConfig, DedupStoreClient, InMemoryBackend

    config = EngineConfig.build(["sensors/+/temp"], ttl_seconds=5)
    engine = DedupEngine(config, DedupStoreClient(InMemoryBackend()))
    engine.decide("sensors/room1/temp", b"22.5")  # Decision.PASS
"""

from dedupmq.application.engine import (
    DecisionOutcome,
    DecisionReason,
    DedupEngine,
    EngineConfig,
    StoreEndpoint,
    load_engine_config,
)
from dedupmq.domain.errors import ConfigurationError, InvalidTopicFilterError, StoreError
from dedupmq.domain.fingerprint import fingerprint
from dedupmq.domain.seen_store import Decision, KeyValueBackend, SeenStatus
from dedupmq.domain.topics import TopicFilter, TopicFilterSet, topic_matches
from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.infra.store_memory import InMemoryBackend

__all__ = [
    "ConfigurationError",
    "Decision",
    "DecisionOutcome",
    "DecisionReason",
    "DedupEngine",
    "DedupStoreClient",
    "EngineConfig",
    "InMemoryBackend",
    "InvalidTopicFilterError",
    "KeyValueBackend",
    "SeenStatus",
    "StoreEndpoint",
    "StoreError",
    "TopicFilter",
    "TopicFilterSet",
    "fingerprint",
    "load_engine_config",
    "topic_matches",
]
