"""Testes para RedisBackend com cliente mockado."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from dedupmq.domain.errors import StoreError
from dedupmq.infra.store_redis import RedisBackend


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock de cliente Redis."""
    return MagicMock()


class TestRedisBackend:
    """Testes de mapeamento para comandos Redis."""

    def test_get_returns_value(self, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = "1"
        backend = RedisBackend(mock_redis)

        assert backend.get("dedupmq:abc") == "1"
        mock_redis.get.assert_called_once_with("dedupmq:abc")

    def test_get_decodes_bytes(self, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = b"1"
        assert RedisBackend(mock_redis).get("k") == "1"

    def test_get_missing(self, mock_redis: MagicMock) -> None:
        mock_redis.get.return_value = None
        assert RedisBackend(mock_redis).get("k") is None

    def test_set_uses_expiry(self, mock_redis: MagicMock) -> None:
        RedisBackend(mock_redis).set("k", "1", 60)
        mock_redis.set.assert_called_once_with("k", "1", ex=60)

    def test_add_uses_set_nx_ex(self, mock_redis: MagicMock) -> None:
        mock_redis.set.return_value = True
        assert RedisBackend(mock_redis).add("k", "1", 60) is True
        mock_redis.set.assert_called_once_with("k", "1", nx=True, ex=60)

    def test_add_existing_key_returns_false(self, mock_redis: MagicMock) -> None:
        # SET NX retorna None quando a chave já existe
        mock_redis.set.return_value = None
        assert RedisBackend(mock_redis).add("k", "1", 60) is False

    def test_supports_atomic_add(self, mock_redis: MagicMock) -> None:
        assert RedisBackend(mock_redis).supports_atomic_add is True

    @pytest.mark.parametrize(
        "error",
        [
            RedisConnectionError("Connection refused"),
            RedisTimeoutError("Timeout reading from socket"),
            ResponseError("WRONGTYPE"),
        ],
    )
    def test_get_errors_become_store_error(self, mock_redis: MagicMock, error: Exception) -> None:
        mock_redis.get.side_effect = error
        with pytest.raises(StoreError) as exc_info:
            RedisBackend(mock_redis).get("k")
        assert exc_info.value.operation == "get"

    def test_set_error_becomes_store_error(self, mock_redis: MagicMock) -> None:
        mock_redis.set.side_effect = RedisTimeoutError("timeout")
        with pytest.raises(StoreError, match="set"):
            RedisBackend(mock_redis).set("k", "1", 60)

    def test_add_error_becomes_store_error(self, mock_redis: MagicMock) -> None:
        mock_redis.set.side_effect = RedisConnectionError("refused")
        with pytest.raises(StoreError, match="add"):
            RedisBackend(mock_redis).add("k", "1", 60)

    def test_ping(self, mock_redis: MagicMock) -> None:
        mock_redis.ping.return_value = True
        assert RedisBackend(mock_redis).ping() is True

    def test_ping_failure(self, mock_redis: MagicMock) -> None:
        mock_redis.ping.side_effect = RedisConnectionError("refused")
        with pytest.raises(StoreError):
            RedisBackend(mock_redis).ping()

    def test_close_swallows_redis_errors(self, mock_redis: MagicMock) -> None:
        mock_redis.close.side_effect = RedisConnectionError("gone")
        RedisBackend(mock_redis).close()
        mock_redis.close.assert_called_once()
