"""FastAPI application entrypoint and routes.

Exposes liveness endpoints and the question-answering endpoint, configures CORS
for a single allowed origin, and wires the answer pipeline at startup. Startup
fails fast when DATABASE_URL is missing.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from argo_assistant.cache import CacheGateway, build_answer_store
from argo_assistant.config import settings
from argo_assistant.db import init_db, require_database_url
from argo_assistant.generation import FALLBACK_ANSWER, AnswerGenerator
from argo_assistant.history import SessionStore
from argo_assistant.log import configure_logging
from argo_assistant.pipeline import AnswerPipeline
from argo_assistant.retrieval import ContextRetriever
from argo_assistant.schemas import AskRequest, AskResponse, ErrorResponse, HealthResponse
from argo_assistant.web_search import search_google

logger = logging.getLogger(__name__)


def build_pipeline() -> AnswerPipeline:
    """Assemble the production pipeline from settings."""
    return AnswerPipeline(
        cache=CacheGateway(build_answer_store()),
        retriever=ContextRetriever(web_search=search_google if settings.SEARCH_CONFIGURED else None),
        generator=AnswerGenerator(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration, prepare the schema, and build the pipeline."""
    configure_logging()
    require_database_url()
    try:
        init_db()
    except Exception:
        # cache reads/writes degrade to misses/no-ops until the database is reachable
        logger.exception("Database initialization failed")
    app.state.pipeline = build_pipeline()
    app.state.sessions = SessionStore(settings.HISTORY_MAX_TURNS, settings.SESSION_MAX_COUNT)
    logger.info("Allowed origin: %s", settings.ALLOWED_ORIGIN)
    yield


app = FastAPI(title="ARGO Oceanography Assistant", version="0.1.0", lifespan=lifespan)

_origins = ["*"] if settings.ALLOWED_ORIGIN.strip() == "*" else [settings.ALLOWED_ORIGIN]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_credentials=True,
    allow_headers=["*"],
)


def get_pipeline(request: Request) -> AnswerPipeline:
    """FastAPI dependency returning the pipeline built at startup."""
    return request.app.state.pipeline


def get_sessions(request: Request) -> SessionStore:
    """FastAPI dependency returning the per-process session store."""
    return request.app.state.sessions


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content=ErrorResponse(error="Invalid request body.").model_dump(exclude_none=True))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal Server Error", reply=FALLBACK_ANSWER).model_dump(),
    )


@app.get("/", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Liveness probe endpoint."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc).isoformat())


@app.post("/ask", response_model=AskResponse, responses={400: {"model": ErrorResponse}})
@app.post("/api/chat", response_model=AskResponse, responses={400: {"model": ErrorResponse}})
async def ask(
    req: AskRequest,
    pipeline: AnswerPipeline = Depends(get_pipeline),
    sessions: SessionStore = Depends(get_sessions),
):
    """Answer an oceanography question.

    Workflow:
    - Reject a missing or blank question with 400 before any downstream call
    - Run the answer pipeline (cache, topic gate, retrieval, generation)
    - Return the answer with cache and provenance metadata
    """
    question = req.question or ""
    if not question.strip():
        return JSONResponse(status_code=400, content=ErrorResponse(error="Question is required.").model_dump(exclude_none=True))

    result = await pipeline.answer(question, sessions.get(req.session_id))
    return AskResponse(
        answer=result.answer,
        reply=result.answer,
        used_cache=result.used_cache,
        context_source=result.context_source.value,
        latency_ms=result.latency_ms,
    )


def run() -> None:
    """Console entrypoint: serve the API with uvicorn on settings.PORT."""
    configure_logging()
    uvicorn.run("argo_assistant.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
