"""Embedding helpers wrapping OpenAI's embeddings API.

Provides:
- get_client: Cached OpenAI client (shared with generation).
- embed_texts: Batch embedding for ingestion.
- embed_query: Single query embedding for retrieval.
"""
from typing import List, Optional

from openai import OpenAI

from argo_assistant.config import settings

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    """Return a cached OpenAI client initialized with the configured API key."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=settings.OPENAI_API_KEY)
    return _client


def embed_texts(texts: List[str]) -> List[List[float]]:
    """Embed a batch of texts with the configured embedding model."""
    if not texts:
        return []
    resp = get_client().embeddings.create(model=settings.OPENAI_EMBEDDING_MODEL, input=texts)
    return [d.embedding for d in resp.data]


def embed_query(text: str) -> List[float]:
    """Embed a single (normalized) query string."""
    resp = get_client().embeddings.create(model=settings.OPENAI_EMBEDDING_MODEL, input=[text])
    return resp.data[0].embedding
