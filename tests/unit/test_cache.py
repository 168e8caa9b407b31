"""Unit tests for answer stores and the cache gateway."""

import pytest
import redis
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from argo_assistant.cache import (
    CacheGateway,
    InMemoryAnswerStore,
    PostgresAnswerStore,
    RedisAnswerStore,
    build_answer_store,
)
from argo_assistant.config import Settings
from argo_assistant.errors import CacheError


class BrokenStore:
    """Store whose every operation fails."""

    def get(self, question):
        raise CacheError("connection refused")

    def put_if_absent(self, question, answer):
        raise CacheError("connection refused")


@pytest.mark.asyncio
async def test_first_writer_wins(memory_cache):
    """A second put for the same question leaves the first answer."""
    assert await memory_cache.put("Q", "A") is True
    assert await memory_cache.put("Q", "B") is False
    assert await memory_cache.get("Q") == "A"


@pytest.mark.asyncio
async def test_unknown_key_is_a_miss(memory_cache):
    """Missing keys return None rather than raising."""
    assert await memory_cache.get("never asked") is None


@pytest.mark.asyncio
async def test_keys_are_exact_strings(memory_cache):
    """Questions differing only in case or punctuation are different keys."""
    await memory_cache.put("What is a tide?", "A")
    assert await memory_cache.get("what is a tide") is None


@pytest.mark.asyncio
async def test_store_errors_are_swallowed():
    """Read failures become misses and write failures no-ops."""
    gateway = CacheGateway(BrokenStore())
    assert await gateway.get("Q") is None
    assert await gateway.put("Q", "A") is False


def test_redis_store_uses_set_nx(mocker):
    """Redis writes use NX under a hashed, namespaced key."""
    client = mocker.Mock()
    client.set.return_value = None
    store = RedisAnswerStore("redis://unused", client=client)
    assert store.put_if_absent("Q", "A") is False
    key = RedisAnswerStore.key_for("Q")
    assert key.startswith("argo:qa:v1:")
    client.set.assert_called_once_with(key, "A", nx=True)


def test_redis_errors_become_cache_errors(mocker):
    """Redis client failures surface as CacheError."""
    client = mocker.Mock()
    client.get.side_effect = redis.ConnectionError("down")
    store = RedisAnswerStore("redis://unused", client=client)
    with pytest.raises(CacheError):
        store.get("Q")


def test_postgres_errors_become_cache_errors(mocker):
    """Database failures surface as CacheError."""
    mocker.patch(
        "argo_assistant.cache.session_scope",
        side_effect=OperationalError("SELECT", {}, Exception("db down")),
    )
    with pytest.raises(CacheError):
        PostgresAnswerStore().get("Q")


def test_postgres_put_reports_insert(mocker):
    """rowcount 1 means inserted, 0 means a conflicting row was kept."""
    session = mocker.MagicMock()
    scope = mocker.patch("argo_assistant.cache.session_scope")
    scope.return_value.__enter__.return_value = session
    session.execute.return_value.rowcount = 1
    assert PostgresAnswerStore().put_if_absent("Q", "A") is True
    session.execute.return_value.rowcount = 0
    assert PostgresAnswerStore().put_if_absent("Q", "B") is False
    stmt = session.execute.call_args.args[0]
    assert "ON CONFLICT (question) DO NOTHING" in str(stmt.compile(dialect=postgresql.dialect()))


def test_build_answer_store_selects_backend():
    """CACHE_BACKEND picks the store implementation."""
    assert isinstance(build_answer_store(Settings(CACHE_BACKEND="memory")), InMemoryAnswerStore)
    assert isinstance(build_answer_store(Settings(CACHE_BACKEND="Postgres")), PostgresAnswerStore)
    with pytest.raises(ValueError):
        build_answer_store(Settings(CACHE_BACKEND="memcached"))
