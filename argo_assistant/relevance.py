"""Context relevance filter for retrieved passages.

is_context_relevant decides whether retrieved text is usable grounding for a
question. It rejects:
- context shorter than MIN_CONTEXT_CHARS after trimming;
- context without any ocean term when the question itself is about the ocean
  or about coordinates;
- context sharing too few words with the question (lexical overlap below
  MIN_OVERLAP_RATIO, counting only question words longer than three characters,
  exact token match, no stemming).
"""
import logging
from typing import Set

from argo_assistant.vocab import DEFAULT_RELEVANCE_VOCABULARY, RelevanceVocabulary

logger = logging.getLogger(__name__)

MIN_CONTEXT_CHARS = 20
MIN_OVERLAP_RATIO = 0.1
MIN_WORD_LEN = 4


def overlap_ratio(question: str, context: str) -> float:
    """Fraction of significant question tokens that also appear in the context."""
    q_words: Set[str] = {w for w in question.lower().split() if len(w) >= MIN_WORD_LEN}
    c_words: Set[str] = set(context.lower().split())
    common = q_words & c_words
    return len(common) / max(len(q_words), 1)


def is_context_relevant(
    question: str,
    context: str,
    vocab: RelevanceVocabulary = DEFAULT_RELEVANCE_VOCABULARY,
) -> bool:
    """Return True if context is usable grounding for question.

    Args:
        question: Raw user question.
        context: Candidate context text.
        vocab: Ocean and coordinate term lists.

    Returns:
        bool: Whether the context passes every check.
    """
    if not context or len(context.strip()) < MIN_CONTEXT_CHARS:
        return False

    ql = question.lower()
    cl = context.lower()
    asks_ocean = any(t in ql for t in vocab.ocean_terms)
    asks_coords = any(t in ql for t in vocab.coordinate_terms)
    if asks_ocean or asks_coords:
        if not any(t in cl for t in vocab.ocean_terms):
            logger.info("Question is about the ocean, but context is not.")
            return False

    ratio = overlap_ratio(question, context)
    if ratio < MIN_OVERLAP_RATIO:
        logger.info("Low keyword overlap: %.2f", ratio)
        return False
    return True
