"""Test helpers shared by unit tests."""

from types import SimpleNamespace
from typing import List


def completion(content):
    """Build an object shaped like an OpenAI chat completion response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class SleepRecorder:
    """Async sleep replacement recording requested delays (seconds)."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
