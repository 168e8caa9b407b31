"""ARGO oceanography question-answering service.

Submodules overview:
- main: FastAPI application bootstrap, lifecycle, and routes.
- pipeline: End-to-end answer pipeline (cache, topic gate, retrieval, generation).
- config: Application settings and environment variable loading.
- log: Logging setup.
- errors: Exception types.
- db: Database engine/session management helpers.
- models: ORM models (vector-indexed chunks, question cache).
- schemas: Pydantic request/response models for API contracts.
- vocab: Versioned keyword vocabularies for topic and relevance checks.
- topics: Greeting / off-topic / on-topic gate.
- relevance: Context relevance filter.
- retrieval: Vector index lookup with web search fallback.
- web_search: Google Custom Search client.
- embedding: OpenAI embedding helpers.
- generation: Prompt building and model calls with fallback.
- retry: Exponential backoff for async operations.
- cache: Answer stores and the cache-aside gateway.
- history: Per-session conversation history.
- obs: Optional tracing/spans.
- utils: Query normalization, HTML extraction, and chunking helpers.
- ingestion: Offline crawler populating the vector index.
"""
