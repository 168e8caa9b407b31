"""Unit tests for derived settings."""

from argo_assistant.config import Settings


def test_generation_models_order():
    cfg = Settings(OPENAI_MODEL="gpt-4o-mini", OPENAI_FALLBACK_MODELS=" gpt-4o , gpt-4o-mini,,gpt-4.1-mini")
    assert cfg.GENERATION_MODELS == ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]


def test_production_flag():
    assert Settings(APP_ENV=" Production ").IS_PRODUCTION
    assert not Settings(APP_ENV="development").IS_PRODUCTION


def test_search_configured_needs_both_credentials():
    assert not Settings(GOOGLE_API_KEY="k", GOOGLE_CSE_ID="").SEARCH_CONFIGURED
    assert Settings(GOOGLE_API_KEY="k", GOOGLE_CSE_ID="cx").SEARCH_CONFIGURED


def test_embedding_dim():
    assert Settings(OPENAI_EMBEDDING_MODEL="text-embedding-3-small").EMBEDDING_DIM == 1536
    assert Settings(OPENAI_EMBEDDING_MODEL="text-embedding-3-large").EMBEDDING_DIM == 3072
