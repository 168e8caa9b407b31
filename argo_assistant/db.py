"""Database setup and session utilities for SQLAlchemy.

This module centralizes engine/session initialization, metadata base, and helpers:
- require_database_url: Refuses to continue when DATABASE_URL is not configured.
- get_engine / get_sessionmaker: Lazily built engine and session factory. In production
  (APP_ENV=production) the connection uses TLS without certificate verification.
- init_db: Ensures the pgvector extension exists and creates the chunks and
  question_cache tables plus the IVFFLAT index over chunks.embedding.
- session_scope: Context-managed transactional scope for imperative workflows.

Configuration is read from argo_assistant.config.settings.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from argo_assistant.config import Settings, settings
from argo_assistant.errors import ConfigurationError

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def require_database_url(cfg: Settings = settings) -> str:
    """Return the configured connection string or raise ConfigurationError."""
    url = (cfg.DATABASE_URL or "").strip()
    if not url:
        raise ConfigurationError("FATAL: DATABASE_URL is not set in the environment or .env file.")
    return url


def get_engine() -> Engine:
    """Return the process-wide SQLAlchemy engine, creating it on first use."""
    global _engine
    if _engine is None:
        connect_args = {}
        if settings.IS_PRODUCTION:
            # encrypted transport, server certificate not verified
            logger.info("Production environment detected, enabling SSL for database connection.")
            connect_args["sslmode"] = "require"
        _engine = create_engine(
            require_database_url(),
            pool_pre_ping=True,
            future=True,
            connect_args=connect_args,
        )
    return _engine


def get_sessionmaker() -> sessionmaker:
    """Return the session factory bound to the engine."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine(), future=True)
    return _SessionLocal


def init_db() -> None:
    """Initialize database extensions, tables, and vector indexes.

    Ensures pgvector extension is available, creates tables from SQLAlchemy metadata,
    and creates the IVFFLAT index over chunks.embedding if missing.

    This function is idempotent and safe to run multiple times.
    """
    engine = get_engine()
    with engine.connect() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        conn.commit()

    # Import models after Base is defined
    from argo_assistant import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(
            text(
                """
                DO $$
                BEGIN
                    IF NOT EXISTS (
                        SELECT 1 FROM pg_indexes WHERE indexname = 'idx_chunks_embedding_ivfflat'
                    ) THEN
                        CREATE INDEX idx_chunks_embedding_ivfflat
                        ON chunks USING ivfflat (embedding vector_cosine_ops)
                        WITH (lists = 100);
                    END IF;
                END$$;
                """
            )
        )
        conn.commit()
    logger.info("Database schema ready")


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    Commits on successful exit, rolls back and re-raises on exception, and
    always closes the session.
    """
    session = get_sessionmaker()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
