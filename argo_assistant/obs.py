"""Optional observability: Langfuse traces and OpenTelemetry spans.

Both integrations are optional extras. When the packages are not installed or
Langfuse credentials are not configured, span() and Trace are no-ops, so the
pipeline can call them unconditionally.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from argo_assistant.config import settings

logger = logging.getLogger(__name__)

try:
    from langfuse import Langfuse
except ImportError:  # pragma: no cover
    Langfuse = None  # type: ignore

try:
    from opentelemetry import trace
except ImportError:  # pragma: no cover
    trace = None  # type: ignore

_langfuse_client: Optional[Any] = None


def _get_langfuse() -> Optional[Any]:
    """Memoized Langfuse client, or None when unavailable or unconfigured."""
    global _langfuse_client
    if _langfuse_client is not None:
        return _langfuse_client
    if Langfuse is None or not (
        settings.LANGFUSE_HOST and settings.LANGFUSE_PUBLIC_KEY and settings.LANGFUSE_SECRET_KEY
    ):
        return None
    _langfuse_client = Langfuse(
        host=settings.LANGFUSE_HOST,
        public_key=settings.LANGFUSE_PUBLIC_KEY,
        secret_key=settings.LANGFUSE_SECRET_KEY,
    )
    return _langfuse_client


@contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """OpenTelemetry span around a pipeline stage (no-op without OTel)."""
    if trace is None:
        yield
        return
    tracer = trace.get_tracer("argo_assistant")
    with tracer.start_as_current_span(name) as otel_span:
        for k, v in (attributes or {}).items():
            otel_span.set_attribute(k, v)
        yield


class Trace:
    """Thin Langfuse trace wrapper whose methods never raise."""

    def __init__(self, name: str, input: Optional[Dict[str, Any]] = None):
        self._trace = None
        client = _get_langfuse()
        if client is None:
            return
        try:
            self._trace = client.trace(name=name, input=input or {})
        except Exception as e:
            logger.debug("Langfuse trace init failed: %s", e)

    @property
    def enabled(self) -> bool:
        return self._trace is not None

    def event(self, name: str, data: Optional[Dict[str, Any]] = None) -> None:
        if self._trace is None:
            return
        try:
            self._trace.event(name=name, input=data or {})
        except Exception as e:
            logger.debug("Langfuse event %s failed: %s", name, e)

    def generation(self, name: str, prompt: str, output: str, model: Optional[str]) -> None:
        if self._trace is None:
            return
        try:
            self._trace.generation(name=name, input=prompt, output=output, model=model or "fallback")
        except Exception as e:
            logger.debug("Langfuse generation %s failed: %s", name, e)

    def end(self, output: Optional[Dict[str, Any]] = None) -> None:
        if self._trace is None:
            return
        try:
            self._trace.update(output=output or {})
        except Exception as e:
            logger.debug("Langfuse trace end failed: %s", e)
