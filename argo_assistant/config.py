"""Application configuration and environment-driven settings.

Defines the Settings class based on pydantic-settings to centralize configuration for:
- The persistent store (PostgreSQL) and the answer cache backend
- OpenAI keys and model names for embeddings and generation
- Google Custom Search credentials for the web fallback
- Retrieval thresholds and retry/backoff knobs
- HTTP surface (allowed origin, port) and logging
- Ingestion parameters (seed URLs, chunking)
- Optional observability (Langfuse)

DATABASE_URL has no usable default; the API refuses to start without it (see
argo_assistant.main.lifespan).
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed application settings loaded from environment variables.

    Uses pydantic-settings to populate fields from a .env file or process env.
    """
    # Required
    DATABASE_URL: str = Field(default="", description="PostgreSQL connection string")
    APP_ENV: str = "development"

    # OpenAI
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_FALLBACK_MODELS: str = ""  # comma separated, tried after OPENAI_MODEL
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"  # 1536 dims
    GENERATION_TEMPERATURE: float = 0.5
    MAX_OUTPUT_TOKENS: int = 2048

    # Retrieval
    VECTOR_TOP_K: int = 5
    VECTOR_MIN_SCORE: float = 0.5  # 0-1, strict lower bound

    # Web search (optional)
    GOOGLE_API_KEY: str = ""
    GOOGLE_CSE_ID: str = ""
    SEARCH_NUM_RESULTS: int = 5
    SEARCH_TIMEOUT_SECONDS: int = 15

    # Retry/backoff around generation
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 10000

    # Answer cache
    CACHE_BACKEND: str = "postgres"  # postgres | redis | memory
    REDIS_URL: str = "redis://localhost:6379/0"

    # Conversation
    HISTORY_MAX_TURNS: int = 20
    SESSION_MAX_COUNT: int = 1000  # least recently used sessions evicted beyond this

    # HTTP
    ALLOWED_ORIGIN: str = "http://localhost:5000"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Ingestion
    DOCS_SEED_URLS: str = (
        "https://oceanservice.noaa.gov/facts/,"
        "https://www.noaa.gov/education/resource-collections/ocean-coasts"
    )
    MAX_DOCS: int = 30
    CHUNK_SIZE: int = 800
    CHUNK_OVERLAP: int = 150

    # Observability (optional)
    LANGFUSE_HOST: str = ""
    LANGFUSE_PUBLIC_KEY: str = ""
    LANGFUSE_SECRET_KEY: str = ""

    # Derived
    @property
    def EMBEDDING_DIM(self) -> int:
        """Embedding dimension for the configured embedding model."""
        model = self.OPENAI_EMBEDDING_MODEL.lower()
        if "text-embedding-3-large" in model:
            return 3072
        return 1536

    @property
    def IS_PRODUCTION(self) -> bool:
        """True when APP_ENV selects production (TLS to the database)."""
        return self.APP_ENV.strip().lower() == "production"

    @property
    def GENERATION_MODELS(self) -> List[str]:
        """Ordered generative model names: primary first, then fallbacks."""
        names = [self.OPENAI_MODEL]
        names += [m.strip() for m in self.OPENAI_FALLBACK_MODELS.split(",") if m.strip()]
        # de-dup preserving order
        return list(dict.fromkeys(names))

    @property
    def SEARCH_CONFIGURED(self) -> bool:
        """Whether both Google Custom Search credentials are present."""
        return bool(self.GOOGLE_API_KEY and self.GOOGLE_CSE_ID)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


settings = Settings()
