"""Camada de infraestrutura: backends do store de vistos recentemente.

- Memory: InMemoryBackend (dev/testes/nó único)
- Redis: RedisBackend (produção, SET NX EX)
- Cliente: DedupStoreClient.seen_and_mark
- Factory: create_store_client

Infraestrutura não decide PASS/DROP; apenas reporta NOVEL/DUPLICATE/STORE_ERROR.
"""

from dedupmq.infra.store_client import DedupStoreClient
from dedupmq.infra.store_factory import create_redis_client, create_store_client
from dedupmq.infra.store_memory import InMemoryBackend
from dedupmq.infra.store_redis import RedisBackend

__all__ = [
    "DedupStoreClient",
    "InMemoryBackend",
    "RedisBackend",
    "create_redis_client",
    "create_store_client",
]
