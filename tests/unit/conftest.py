"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

import pytest

from argo_assistant.cache import CacheGateway, InMemoryAnswerStore
from argo_assistant.generation import AnswerGenerator, ModelDescriptor
from argo_assistant.retry import RetryPolicy
from tests.unit.utils import SleepRecorder, completion


@pytest.fixture(name="sleep_recorder")
def sleep_recorder_fixture() -> SleepRecorder:
    """Fresh sleep recorder per test."""
    return SleepRecorder()


@pytest.fixture(name="memory_cache")
def memory_cache_fixture() -> CacheGateway:
    """Cache gateway over an empty in-memory store."""
    return CacheGateway(InMemoryAnswerStore())


@pytest.fixture(name="openai_client")
def openai_client_fixture(mocker):
    """Mock OpenAI client answering every completion with a fixed text."""
    client = mocker.Mock()
    client.chat.completions.create.return_value = completion("Average ocean salinity is about 35 PSU.")
    return client


@pytest.fixture(name="generator")
def generator_fixture(openai_client, sleep_recorder) -> AnswerGenerator:
    """Single-model generator over the mock client with recorded sleeps."""
    return AnswerGenerator(
        client_factory=lambda: openai_client,
        models=[ModelDescriptor(name="test-model")],
        policy=RetryPolicy(max_attempts=3),
        sleep=sleep_recorder,
    )
