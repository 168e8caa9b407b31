"""Context retrieval with internal-first, web-fallback ordering.

This module implements:
- ContextSource / ContextBundle: retrieved context text plus its provenance tag
- RetrievalStep: per-source result value; empty text means the step degraded
  and `reason` says why (no exception ever leaves a step)
- query_vector_index: pgvector cosine search over the chunks table
- ContextRetriever: composes the vector step and the web step

Steps, short-circuiting on the first usable context:
1) Embed the normalized query and fetch the top-k chunks from the vector index.
2) Keep matches scoring above the threshold, join them and run the relevance filter.
3) Otherwise query web search and use the top snippets.
Vector similarity is 1 - cosine distance.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import text

from argo_assistant.config import settings
from argo_assistant.db import session_scope
from argo_assistant.embedding import embed_query
from argo_assistant.relevance import is_context_relevant
from argo_assistant.vocab import DEFAULT_RELEVANCE_VOCABULARY, RelevanceVocabulary
from argo_assistant.web_search import format_results, search_google

logger = logging.getLogger(__name__)


class ContextSource(str, Enum):
    """Provenance of the context handed to the model."""
    NONE = "none"
    INTERNAL = "Internal Database"
    EXTERNAL = "External Search"


@dataclass(frozen=True)
class ContextBundle:
    """Context text and its source. Text is empty iff source is NONE."""
    text: str = ""
    source: ContextSource = ContextSource.NONE

    def __post_init__(self) -> None:
        if bool(self.text) != (self.source is not ContextSource.NONE):
            raise ValueError("context text must be empty exactly when source is NONE")


@dataclass(frozen=True)
class RetrievalStep:
    """Outcome of one retrieval source.

    Attributes:
        source: Which source produced (or failed to produce) the text.
        text: Usable context, or '' when the step degraded.
        reason: Why the step degraded, or 'ok'.
    """
    source: ContextSource
    text: str = ""
    reason: str = "ok"

    @property
    def ok(self) -> bool:
        return bool(self.text)

    @classmethod
    def degraded(cls, source: ContextSource, reason: str) -> "RetrievalStep":
        return cls(source=source, text="", reason=reason)


@dataclass
class RetrievalResult:
    """Final context bundle plus the trail of attempted steps."""
    bundle: ContextBundle
    steps: List[RetrievalStep] = field(default_factory=list)


def query_vector_index(qvec: Sequence[float], top_k: int) -> List[Dict[str, Any]]:
    """Return the top_k nearest chunks with their cosine similarity scores.

    Args:
        qvec: Query embedding.
        top_k: Number of neighbours to fetch.

    Returns:
        List[Dict[str, Any]]: Rows with id, url, title, section, content, score.
    """
    qvec_str = "[" + ",".join(f"{x:.6f}" for x in qvec) + "]"
    sql = text(
        """
        SELECT id, url, title, section, content,
            (embedding <=> CAST(:qvec AS vector)) AS distance
        FROM chunks
        ORDER BY embedding <=> CAST(:qvec AS vector)
        LIMIT :limit
        """
    )
    with session_scope() as db:
        rows = db.execute(sql, {"qvec": qvec_str, "limit": top_k}).mappings().all()
    return [
        {
            "id": int(r["id"]),
            "url": r["url"],
            "title": r["title"],
            "section": r["section"],
            "content": r["content"] or "",
            "score": 1.0 - float(r["distance"]),
        }
        for r in rows
    ]


class ContextRetriever:
    """Produces a ContextBundle for a question, preferring curated knowledge.

    Collaborators are injectable (all synchronous, run in the threadpool):
    embed(query) -> vector, vector_search(vector, top_k) -> matches,
    web_search(query) -> result items.
    """

    def __init__(
        self,
        embed: Callable[[str], List[float]] = embed_query,
        vector_search: Callable[[Sequence[float], int], List[Dict[str, Any]]] = query_vector_index,
        web_search: Optional[Callable[[str], List[Dict[str, Any]]]] = search_google,
        top_k: int = settings.VECTOR_TOP_K,
        min_score: float = settings.VECTOR_MIN_SCORE,
        vocab: RelevanceVocabulary = DEFAULT_RELEVANCE_VOCABULARY,
    ) -> None:
        self.embed = embed
        self.vector_search = vector_search
        # None disables the web fallback (no credentials configured)
        self.web_search = web_search
        self.top_k = top_k
        self.min_score = min_score
        self.vocab = vocab

    async def vector_step(self, question: str, query: str) -> RetrievalStep:
        """Internal vector index lookup followed by the relevance filter."""
        src = ContextSource.INTERNAL
        try:
            qvec = await run_in_threadpool(self.embed, query)
        except Exception as e:
            logger.warning("Embedding failed: %s", e)
            return RetrievalStep.degraded(src, "embedding failed")
        try:
            matches = await run_in_threadpool(self.vector_search, qvec, self.top_k)
        except Exception as e:
            logger.warning("Vector index search failed: %s", e)
            return RetrievalStep.degraded(src, "vector search failed")
        if not matches:
            return RetrievalStep.degraded(src, "no matches")

        try:
            relevant = [m for m in matches if float(m.get("score") or 0.0) > self.min_score]
            candidate = "\n\n".join(str(m["content"]) for m in relevant if m.get("content"))
        except Exception as e:
            logger.warning("Malformed vector matches: %s", e)
            return RetrievalStep.degraded(src, "invalid matches")
        if not candidate:
            return RetrievalStep.degraded(src, "no matches above threshold")
        try:
            relevant_context = is_context_relevant(question, candidate, self.vocab)
        except Exception as e:
            logger.warning("Relevance check failed: %s", e)
            return RetrievalStep.degraded(src, "relevance check failed")
        if not relevant_context:
            logger.info("Database context found but deemed not relevant.")
            return RetrievalStep.degraded(src, "context rejected")
        return RetrievalStep(source=src, text=candidate)

    async def web_step(self, query: str) -> RetrievalStep:
        """Web search fallback; only titles and snippets are used."""
        src = ContextSource.EXTERNAL
        if self.web_search is None:
            logger.info("Web search not configured, returning empty")
            return RetrievalStep.degraded(src, "search not configured")
        try:
            items = await run_in_threadpool(self.web_search, query)
            combined = format_results(items or [])
        except Exception as e:
            logger.warning("Web search error: %s", e)
            return RetrievalStep.degraded(src, "search failed")
        if not combined:
            logger.info("No web search results found")
            return RetrievalStep.degraded(src, "no results")
        return RetrievalStep(source=src, text=combined)

    async def retrieve(self, question: str, query: str) -> RetrievalResult:
        """Run the vector step, then the web step if needed.

        Args:
            question: Raw question (used by the relevance filter).
            query: Normalized query (used for embedding and search).

        Returns:
            RetrievalResult: The chosen bundle and every attempted step.
        """
        steps: List[RetrievalStep] = []
        for step_fn in (lambda: self.vector_step(question, query), lambda: self.web_step(query)):
            step = await step_fn()
            steps.append(step)
            if step.ok:
                logger.info("Using context from %s", step.source.value)
                return RetrievalResult(bundle=ContextBundle(step.text, step.source), steps=steps)
            logger.info("%s yielded no context: %s", step.source.value, step.reason)
        return RetrievalResult(bundle=ContextBundle(), steps=steps)
