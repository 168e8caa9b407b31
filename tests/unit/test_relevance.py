"""Unit tests for the context relevance filter."""

from argo_assistant.relevance import is_context_relevant, overlap_ratio


def test_short_context_rejected():
    """Context under 20 characters is never relevant."""
    assert not is_context_relevant("salinity", "salinity salinity")
    assert not is_context_relevant("anything", "   " + "x" * 19 + "   ")
    assert not is_context_relevant("anything", "")


def test_coordinate_question_requires_ocean_context():
    """A latitude question with non-ocean context is rejected despite overlap."""
    question = "latitude longitude mountains elevation"
    context = "latitude longitude mountains elevation summit rocks granite"
    assert overlap_ratio(question, context) == 1.0
    assert not is_context_relevant(question, context)


def test_low_overlap_rejected():
    """Context sharing under 10% of significant question words is rejected."""
    question = "how does thermohaline circulation affect deep water formation"
    context = "The ocean is large and blue, with many fish swimming around."
    assert not is_context_relevant(question, context)


def test_relevant_context_accepted():
    """Ocean question with ocean context and overlap is accepted."""
    question = "what is the average salinity of the pacific ocean"
    context = "The average salinity of seawater in the pacific ocean is about 35 parts per thousand."
    assert is_context_relevant(question, context)


def test_overlap_ignores_short_words():
    """Words of three characters or fewer do not count."""
    assert overlap_ratio("is the sea", "is the sea") == 0.0
