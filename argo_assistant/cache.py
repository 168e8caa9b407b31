"""Answer cache: pluggable stores behind a never-failing cache-aside gateway.

Provides:
- AnswerStore: read/insert-if-absent contract keyed by the exact question string
- PostgresAnswerStore: question_cache table, INSERT ... ON CONFLICT DO NOTHING
- RedisAnswerStore: SET NX under a namespaced sha256 key, no TTL
- InMemoryAnswerStore: process-local dict (tests, local runs)
- build_answer_store: selects a store from settings.CACHE_BACKEND
- CacheGateway: async facade; store errors become misses / no-ops

Keys are never normalized: 'What is a tide?' and 'what is a tide' are different
entries. Entries are never updated (first writer wins) and never expired here.
"""
import hashlib
import logging
import threading
from typing import Dict, Optional, Protocol

import redis
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError

from argo_assistant.config import Settings, settings
from argo_assistant.db import session_scope
from argo_assistant.errors import CacheError
from argo_assistant.models import QuestionCache

logger = logging.getLogger(__name__)


class AnswerStore(Protocol):
    """Backing store contract for cached answers."""

    def get(self, question: str) -> Optional[str]:
        """Return the stored answer or None; raise CacheError on store failure."""

    def put_if_absent(self, question: str, answer: str) -> bool:
        """Insert unless a row exists; True if inserted. Raise CacheError on failure."""


class PostgresAnswerStore:
    """Answers stored in the question_cache table (unique question column)."""

    def get(self, question: str) -> Optional[str]:
        try:
            with session_scope() as db:
                return db.execute(
                    select(QuestionCache.answer).where(QuestionCache.question == question)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CacheError(f"cache read failed: {e}") from e

    def put_if_absent(self, question: str, answer: str) -> bool:
        stmt = (
            pg_insert(QuestionCache)
            .values(question=question, answer=answer)
            .on_conflict_do_nothing(index_elements=["question"])
        )
        try:
            with session_scope() as db:
                result = db.execute(stmt)
                return bool(result.rowcount)
        except SQLAlchemyError as e:
            raise CacheError(f"cache write failed: {e}") from e


class RedisAnswerStore:
    """Answers stored as plain Redis strings written with SET NX."""

    def __init__(self, url: str, client: Optional[redis.Redis] = None) -> None:
        self._client = client or redis.from_url(url, decode_responses=True)

    @staticmethod
    def key_for(question: str) -> str:
        """Namespaced key derived from the exact question string."""
        h = hashlib.sha256(question.encode("utf-8")).hexdigest()
        return f"argo:qa:v1:{h}"

    def get(self, question: str) -> Optional[str]:
        try:
            return self._client.get(self.key_for(question))
        except redis.RedisError as e:
            raise CacheError(f"cache read failed: {e}") from e

    def put_if_absent(self, question: str, answer: str) -> bool:
        try:
            return bool(self._client.set(self.key_for(question), answer, nx=True))
        except redis.RedisError as e:
            raise CacheError(f"cache write failed: {e}") from e


class InMemoryAnswerStore:
    """Process-local store with the same first-writer-wins semantics."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, question: str) -> Optional[str]:
        with self._lock:
            return self._data.get(question)

    def put_if_absent(self, question: str, answer: str) -> bool:
        with self._lock:
            if question in self._data:
                return False
            self._data[question] = answer
            return True

    def __len__(self) -> int:
        return len(self._data)


def build_answer_store(cfg: Settings = settings) -> AnswerStore:
    """Create the answer store selected by cfg.CACHE_BACKEND."""
    backend = cfg.CACHE_BACKEND.strip().lower()
    if backend == "postgres":
        return PostgresAnswerStore()
    if backend == "redis":
        return RedisAnswerStore(cfg.REDIS_URL)
    if backend == "memory":
        return InMemoryAnswerStore()
    raise ValueError(f"Unknown CACHE_BACKEND: {cfg.CACHE_BACKEND!r}")


class CacheGateway:
    """Cache-aside facade that never lets the store break the answer path.

    Owns no data. Any store exception on read is a miss; on write it is logged
    and ignored.
    """

    def __init__(self, store: AnswerStore) -> None:
        self.store = store

    async def get(self, question: str) -> Optional[str]:
        """Cached answer for the exact question, or None on miss or store failure."""
        try:
            answer = await run_in_threadpool(self.store.get, question)
        except Exception as e:
            logger.error("Cache read error: %s", e)
            return None
        if answer is None:
            logger.info("Cache miss")
        else:
            logger.info("Cache hit")
        return answer

    async def put(self, question: str, answer: str) -> bool:
        """Insert-if-absent; returns True only if this call created the entry."""
        try:
            inserted = await run_in_threadpool(self.store.put_if_absent, question, answer)
        except Exception as e:
            logger.error("Cache store error: %s", e)
            return False
        if not inserted:
            logger.info("Cache entry already present, left untouched")
        return bool(inserted)
