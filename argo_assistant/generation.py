"""Answer generation using OpenAI chat completions.

Provides:
- SYSTEM_PROMPT / FALLBACK_ANSWER: fixed persona instructions and the static answer
  used when every model attempt fails
- ModelDescriptor / default_models: ordered candidate models built from settings
- build_prompt: single instruction prompt from persona, labeled context and question
- extract_text: defensive text extraction from a completion response
- AnswerGenerator: tries each model through retry_with_backoff, then falls back

The generator never raises: model failures and empty outputs degrade to
FALLBACK_ANSWER.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from openai import OpenAI

from argo_assistant.config import settings
from argo_assistant.embedding import get_client
from argo_assistant.retrieval import ContextBundle
from argo_assistant.retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

OVERLOAD_PAUSE_SECONDS = 2.0

FALLBACK_ANSWER = (
    "I am currently experiencing high demand and cannot generate a detailed response. "
    "Please try again in a moment. For urgent oceanographic data inquiries, I recommend "
    "consulting official sources like NOAA or Copernicus."
)

SYSTEM_PROMPT = """You are ARGO, an expert Oceanography Assistant. Your primary goal is to provide accurate, direct, and helpful answers to user questions about marine science.

**Core Instructions:**
1.  **Synthesize, Don't Recite:** Use the provided "Context" below as your primary source of information. Do NOT just repeat what the context says or talk about the context. Synthesize the information into a complete, coherent answer that directly addresses the user's question.
2.  **Fill the Gaps:** If the provided context is insufficient or doesn't directly answer the question, you MUST use your own extensive knowledge of oceanography to provide the best possible answer.
3.  **Never Expose Your Tools:** Do NOT mention "the provided context," "the search results," or "the database." The user should feel like they are talking to a single, knowledgeable expert.
4.  **No Excuses:** NEVER say "I don't have information," "I cannot answer," or that you lack data. If you don't have a precise value (e.g., temperature at exact coordinates), provide a scientifically-backed estimate, a typical range for that region/season, and explain the factors that influence the value.
5.  **Be Factual and Concise:** Prioritize data like salinity, temperature, nutrients, oxygen, etc. If the user asks for a simple fact or definition, provide a short, direct answer. Only provide longer, more detailed explanations when the question requires it (e.g., asking "how" or "why")."""

NO_CONTEXT_NOTICE = "**Context:** None provided. Rely entirely on your internal knowledge."


@dataclass(frozen=True)
class ModelDescriptor:
    """A generative model candidate and its sampling parameters."""
    name: str
    temperature: float = 0.5
    max_output_tokens: int = 2048


@dataclass
class GenerationResult:
    """Generated answer and which model produced it (None when falling back)."""
    answer: str
    model: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.model is None


def default_models() -> Tuple[ModelDescriptor, ...]:
    """Ordered model candidates from settings (primary first)."""
    return tuple(
        ModelDescriptor(
            name=name,
            temperature=settings.GENERATION_TEMPERATURE,
            max_output_tokens=settings.MAX_OUTPUT_TOKENS,
        )
        for name in settings.GENERATION_MODELS
    )


def build_prompt(question: str, bundle: ContextBundle) -> str:
    """Assemble persona, labeled context (or a no-context notice) and the verbatim question."""
    parts = [SYSTEM_PROMPT, ""]
    if bundle.text:
        parts.append(f"**Context from {bundle.source.value}:**\n{bundle.text}\n")
    else:
        parts.append(f"{NO_CONTEXT_NOTICE}\n")
    parts.append(f"**User Question:** {question}\n\n**Answer:**")
    return "\n".join(parts)


def extract_text(response: Any) -> str:
    """Return the completion text, or '' if the response shape is unusable."""
    try:
        content = response.choices[0].message.content
        return (content or "").strip()
    except Exception as e:
        logger.error("Error extracting text: %s", e)
        return ""


def is_overloaded(err: BaseException) -> bool:
    """Heuristic for rate limiting / overload errors worth pausing after."""
    status = getattr(err, "status_code", None)
    if status in (429, 503):
        return True
    msg = str(err)
    return "overloaded" in msg or "503" in msg or "429" in msg


class AnswerGenerator:
    """Generates answers by trying an ordered list of models with retries."""

    def __init__(
        self,
        client_factory: Callable[[], OpenAI] = get_client,
        models: Optional[Sequence[ModelDescriptor]] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client_factory = client_factory
        self.models: Tuple[ModelDescriptor, ...] = tuple(models) if models is not None else default_models()
        self.policy = policy or RetryPolicy.from_settings()
        self.sleep = sleep

    async def _complete(self, model: ModelDescriptor, prompt: str) -> Any:
        client = self.client_factory()
        return await run_in_threadpool(
            client.chat.completions.create,
            model=model.name,
            messages=[{"role": "user", "content": prompt}],
            temperature=model.temperature,
            max_tokens=model.max_output_tokens,
        )

    async def generate_from_prompt(self, prompt: str) -> GenerationResult:
        """Try each model in order; return the first non-empty answer or the fallback."""
        for model in self.models:
            logger.info("Trying model: %s", model.name)
            try:
                response = await retry_with_backoff(
                    lambda: self._complete(model, prompt), policy=self.policy, sleep=self.sleep
                )
            except Exception as e:
                logger.error("Model %s failed: %s", model.name, e)
                if is_overloaded(e):
                    await self.sleep(OVERLOAD_PAUSE_SECONDS)
                continue
            answer = extract_text(response)
            if answer:
                logger.info("Successfully generated response using %s", model.name)
                return GenerationResult(answer=answer, model=model.name)
            logger.warning("Model %s returned empty output", model.name)
        logger.warning("All models failed, providing fallback response")
        return GenerationResult(answer=FALLBACK_ANSWER)

    async def generate(self, question: str, bundle: ContextBundle) -> GenerationResult:
        """Generate an answer for question grounded on bundle."""
        return await self.generate_from_prompt(build_prompt(question, bundle))
