"""Heuristic topic gate deciding whether a question reaches retrieval.

Defines:
- Topic: Literal type alias of allowed outcomes.
- TopicDecision: Dataclass carrying the outcome and a short rationale.
- is_greeting / is_ocean_related: The two keyword checks.
- classify_question: Runs both checks in order and returns a TopicDecision.

Greetings and off-topic questions receive fixed replies and never reach retrieval.
"""
import logging
import re
from dataclasses import dataclass
from typing import Literal

from argo_assistant.vocab import DEFAULT_TOPIC_VOCABULARY, TopicVocabulary

logger = logging.getLogger(__name__)

Topic = Literal["greeting", "off_topic", "on_topic"]

GREETING_REPLY = (
    "Hello! I am ARGO, your Oceanography Assistant. How can I help you with marine data today?"
)
OFF_TOPIC_REPLY = (
    "I am an oceanography assistant. My knowledge is focused on marine science, so I can only "
    "respond to questions related to the ocean. Please ask me something about a marine topic."
)


@dataclass
class TopicDecision:
    """Topic gate outcome.

    Attributes:
        topic: One of 'greeting', 'off_topic', or 'on_topic'.
        reason: Short human-readable rationale for the decision.
    """
    topic: Topic
    reason: str

    @property
    def reply(self) -> str:
        """Fixed reply for short-circuited outcomes ('' when on-topic)."""
        if self.topic == "greeting":
            return GREETING_REPLY
        if self.topic == "off_topic":
            return OFF_TOPIC_REPLY
        return ""


def _has_word(term: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(term.lower())}\b", text, flags=re.IGNORECASE) is not None


def is_greeting(question: str, vocab: TopicVocabulary = DEFAULT_TOPIC_VOCABULARY) -> bool:
    """True when any greeting appears in the question as a whole word."""
    q = question.lower().strip()
    return any(_has_word(g, q) for g in vocab.greetings)


def is_ocean_related(question: str, vocab: TopicVocabulary = DEFAULT_TOPIC_VOCABULARY) -> bool:
    """Keyword test for ocean relevance with ambiguous-term disambiguation.

    A question carrying an ambiguous term (e.g. 'biology') is only accepted when an
    ocean-context term (e.g. 'marine') is also present. Otherwise any term from the
    combined vocabulary is enough, or an acronym standing as a whole word.
    """
    ql = question.lower()
    has_ambiguous = any(t.lower() in ql for t in vocab.ambiguous)
    has_context = any(t.lower() in ql for t in vocab.ocean_context)
    if has_ambiguous and not has_context:
        logger.info("Ambiguous term found without ocean context. Rejecting.")
        return False
    if any(t in ql for t in vocab.all_terms()):
        return True
    return any(_has_word(a, ql) for a in vocab.acronyms)


def classify_question(question: str, vocab: TopicVocabulary = DEFAULT_TOPIC_VOCABULARY) -> TopicDecision:
    """Classify a raw question as greeting, off-topic, or on-topic.

    Args:
        question: The raw user question.
        vocab: Keyword vocabulary; defaults to the shipped oceanography lists.

    Returns:
        TopicDecision: The outcome and its rationale.
    """
    if is_greeting(question, vocab):
        return TopicDecision(topic="greeting", reason="greeting word present")
    if not is_ocean_related(question, vocab):
        return TopicDecision(topic="off_topic", reason=f"no ocean vocabulary (v{vocab.version})")
    return TopicDecision(topic="on_topic", reason="ocean vocabulary present")
