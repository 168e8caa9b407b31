"""Pydantic request/response schemas for the API.

Defines the public contracts used by the FastAPI endpoints:
- AskRequest: Input payload for the question-answering endpoint.
- AskResponse: Answer text plus cache/provenance metadata.
- ErrorResponse: Generic error payload.
- HealthResponse: Liveness payload.

The question is optional at the schema level so a missing or blank value can be
reported as a 400 with an explicit message by the endpoint.
"""
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class AskRequest(BaseModel):
    """Request body for asking the assistant a question.

    Attributes:
        question: The user question ('message' is accepted as an alias).
        session_id: Optional client session id grouping conversation history.
    """
    question: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("question", "message"),
        description="User question",
    )
    session_id: Optional[str] = Field(default=None, max_length=128)


class AskResponse(BaseModel):
    """Response body returned by the assistant.

    Attributes:
        answer: The answer text.
        reply: Same text as answer, for clients of the chat endpoint.
        used_cache: Whether the answer was served from cache.
        context_source: Provenance of the grounding context.
        latency_ms: Time spent answering in milliseconds.
    """
    answer: str
    reply: str
    used_cache: bool = False
    context_source: str = "none"
    latency_ms: int = 0


class ErrorResponse(BaseModel):
    error: str
    reply: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
