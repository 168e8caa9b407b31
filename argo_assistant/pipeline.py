"""End-to-end answer pipeline.

Sequence for one question:
    cache lookup -> (hit) done
                 -> topic gate -> greeting / off-topic: fixed reply, done
                               -> normalize -> retrieve context -> generate -> cache write

AnswerPipeline.answer is the outermost failure boundary: any exception escaping
a stage is logged with its traceback and turned into the static fallback
answer, never surfaced to the caller. The caller owns the ConversationHistory;
every answered exchange except cache hits and the catch-all fallback is appended.
"""
import logging
import time
from dataclasses import dataclass
from typing import Literal, Optional

from argo_assistant.cache import CacheGateway
from argo_assistant.generation import FALLBACK_ANSWER, AnswerGenerator
from argo_assistant.history import ConversationHistory
from argo_assistant.obs import Trace, span
from argo_assistant.retrieval import ContextRetriever, ContextSource
from argo_assistant.topics import classify_question
from argo_assistant.utils import normalize_query
from argo_assistant.vocab import DEFAULT_TOPIC_VOCABULARY, TopicVocabulary

logger = logging.getLogger(__name__)

Stage = Literal["cache", "greeting", "off_topic", "generated", "fallback"]


@dataclass
class PipelineResult:
    """Answer plus how it was produced.

    Attributes:
        answer: Text shown to the user.
        stage: Terminal stage that produced the answer.
        context_source: Provenance of grounding context (NONE unless generated).
        model: Model that produced the answer, if any.
        latency_ms: Wall time spent in the pipeline.
    """
    answer: str
    stage: Stage
    context_source: ContextSource = ContextSource.NONE
    model: Optional[str] = None
    latency_ms: int = 0

    @property
    def used_cache(self) -> bool:
        return self.stage == "cache"


class AnswerPipeline:
    """Sequences cache, topic gate, retrieval, and generation for one question."""

    def __init__(
        self,
        cache: CacheGateway,
        retriever: ContextRetriever,
        generator: AnswerGenerator,
        topic_vocab: TopicVocabulary = DEFAULT_TOPIC_VOCABULARY,
    ) -> None:
        self.cache = cache
        self.retriever = retriever
        self.generator = generator
        self.topic_vocab = topic_vocab

    async def answer(self, question: str, history: ConversationHistory) -> PipelineResult:
        """Produce an answer for question; never raises.

        Args:
            question: Raw, non-blank question text (validated by the caller).
            history: Conversation history of the caller's session.

        Returns:
            PipelineResult: The answer and its provenance.
        """
        t0 = time.time()
        trace = Trace("answer", input={"question": question})
        try:
            result = await self._run(question, history, trace)
        except Exception:
            logger.exception("Critical error while answering question")
            result = PipelineResult(answer=FALLBACK_ANSWER, stage="fallback")
        result.latency_ms = int((time.time() - t0) * 1000)
        trace.end(output={"stage": result.stage, "latency_ms": result.latency_ms})
        return result

    async def _run(self, question: str, history: ConversationHistory, trace: Trace) -> PipelineResult:
        logger.info("Checking cache for question: %s", question)
        cached = await self.cache.get(question)
        if cached is not None:
            trace.event("cache_hit")
            return PipelineResult(answer=cached, stage="cache")

        decision = classify_question(question, self.topic_vocab)
        trace.event("topic", {"topic": decision.topic, "reason": decision.reason})
        if decision.topic != "on_topic":
            history.append_exchange(question, decision.reply)
            return PipelineResult(answer=decision.reply, stage=decision.topic)

        query = normalize_query(question)
        logger.info("Cleaned query: %s", query)

        with span("retrieve", {"query": query}):
            retrieval = await self.retriever.retrieve(question, query)
        bundle = retrieval.bundle
        trace.event(
            "retrieval_result",
            {"source": bundle.source.value, "steps": [s.reason for s in retrieval.steps]},
        )

        with span("generate", {"context_source": bundle.source.value}):
            generated = await self.generator.generate(question, bundle)
        trace.generation("answer", prompt=question, output=generated.answer, model=generated.model)

        history.append_exchange(question, generated.answer)

        if generated.used_fallback:
            # fallback answers are never cached
            return PipelineResult(answer=generated.answer, stage="fallback", context_source=bundle.source)

        await self.cache.put(question, generated.answer)
        return PipelineResult(
            answer=generated.answer,
            stage="generated",
            context_source=bundle.source,
            model=generated.model,
        )
