"""Unit tests for prompt building and answer generation."""

import pytest

from argo_assistant.generation import (
    FALLBACK_ANSWER,
    NO_CONTEXT_NOTICE,
    SYSTEM_PROMPT,
    AnswerGenerator,
    ModelDescriptor,
    build_prompt,
    default_models,
    extract_text,
)
from argo_assistant.retrieval import ContextBundle, ContextSource
from argo_assistant.retry import RetryPolicy
from tests.unit.utils import SleepRecorder, completion

QUESTION = "What is the salinity of the Pacific Ocean?"


def test_prompt_with_context_labels_source():
    """Context is labeled with its source name and the question is verbatim."""
    bundle = ContextBundle("Pacific salinity is ~34.5 PSU.", ContextSource.INTERNAL)
    prompt = build_prompt(QUESTION, bundle)
    assert prompt.startswith(SYSTEM_PROMPT)
    assert "**Context from Internal Database:**\nPacific salinity is ~34.5 PSU." in prompt
    assert prompt.endswith(f"**User Question:** {QUESTION}\n\n**Answer:**")


def test_prompt_without_context_has_notice():
    """An empty bundle yields the rely-on-internal-knowledge notice."""
    prompt = build_prompt(QUESTION, ContextBundle())
    assert NO_CONTEXT_NOTICE in prompt
    assert "Context from" not in prompt


def test_extract_text_handles_bad_shapes():
    """Malformed responses extract as empty text instead of raising."""
    assert extract_text(completion("  hi  ")) == "hi"
    assert extract_text(completion(None)) == ""
    assert extract_text(object()) == ""


def test_default_models_from_settings(mocker):
    """Primary model first, then configured fallbacks, with settings parameters."""
    mocker.patch("argo_assistant.config.settings.OPENAI_MODEL", "primary")
    mocker.patch("argo_assistant.config.settings.OPENAI_FALLBACK_MODELS", "second, third,primary")
    models = default_models()
    assert [m.name for m in models] == ["primary", "second", "third"]
    assert all(m.temperature == 0.5 and m.max_output_tokens == 2048 for m in models)


@pytest.mark.asyncio
async def test_generate_passes_model_parameters(generator, openai_client):
    """The model is called once with its temperature and token cap."""
    result = await generator.generate(QUESTION, ContextBundle())
    assert result.answer == "Average ocean salinity is about 35 PSU."
    assert result.model == "test-model"
    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["temperature"] == 0.5
    assert kwargs["max_tokens"] == 2048
    assert kwargs["messages"][0]["content"].endswith("**Answer:**")


@pytest.mark.asyncio
async def test_generate_retries_then_succeeds(generator, openai_client, sleep_recorder):
    """Transient failures are retried with backoff."""
    openai_client.chat.completions.create.side_effect = [
        RuntimeError("timeout"),
        completion("Tides are driven by the moon."),
    ]
    result = await generator.generate(QUESTION, ContextBundle())
    assert result.answer == "Tides are driven by the moon."
    assert sleep_recorder.calls == [1.0]


@pytest.mark.asyncio
async def test_generate_falls_back_after_exhausting_attempts(generator, openai_client, sleep_recorder):
    """All attempts failing produces the static fallback answer."""
    openai_client.chat.completions.create.side_effect = RuntimeError("model unavailable")
    result = await generator.generate(QUESTION, ContextBundle())
    assert result.answer == FALLBACK_ANSWER
    assert result.used_fallback
    assert openai_client.chat.completions.create.call_count == 3
    assert sleep_recorder.calls == [1.0, 2.0]


@pytest.mark.asyncio
async def test_generate_empty_output_falls_back(generator, openai_client):
    """Empty model output is treated as failure."""
    openai_client.chat.completions.create.return_value = completion("   ")
    result = await generator.generate(QUESTION, ContextBundle())
    assert result.answer == FALLBACK_ANSWER


@pytest.mark.asyncio
async def test_next_model_tried_after_overload(mocker):
    """An overloaded model pauses 2s, then the next descriptor answers."""
    client = mocker.Mock()

    def create(**kwargs):
        if kwargs["model"] == "busy":
            raise RuntimeError("503 model overloaded")
        return completion("From the backup model.")

    client.chat.completions.create.side_effect = create
    sleep = SleepRecorder()
    gen = AnswerGenerator(
        client_factory=lambda: client,
        models=[ModelDescriptor("busy"), ModelDescriptor("backup")],
        policy=RetryPolicy(max_attempts=2),
        sleep=sleep,
    )
    result = await gen.generate(QUESTION, ContextBundle())
    assert result.answer == "From the backup model."
    assert result.model == "backup"
    assert sleep.calls == [1.0, 2.0]
