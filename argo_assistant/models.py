"""Database ORM models.

Defines the persistent entities:
- Chunk: a searchable passage of curated oceanography content with a pgvector
  embedding. This table is the internal vector index queried before web search.
- QuestionCache: answers keyed by the exact question string. Rows are only ever
  inserted (first writer wins) and never updated or expired here.
"""
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from argo_assistant.config import settings
from argo_assistant.db import Base


class Chunk(Base):
    """Vector-embedded document chunk used for retrieval.

    Each row carries document metadata (doc_id, url, title, section), the chunk
    text and its embedding. The embedding dimension follows settings.EMBEDDING_DIM.
    """
    __tablename__ = "chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(String(64), nullable=False)  # stable hash of URL
    url = Column(String(1024), nullable=False)
    title = Column(String(512), nullable=True)
    section = Column(String(512), nullable=True)

    position = Column(Integer, nullable=False, default=0)  # order within a doc
    content = Column(Text, nullable=False)

    embedding = Column(Vector(dim=settings.EMBEDDING_DIM), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_chunks_doc", "doc_id"),
        Index("idx_chunks_url", "url"),
    )


class QuestionCache(Base):
    """Cached final answer for an exact, un-normalized question string."""
    __tablename__ = "question_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False, unique=True)
    answer = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
