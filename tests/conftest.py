"""Shared fixtures and fakes for the test suite."""

import asyncio
import json
from typing import get_origin

import pytest

from chronicle_cache.errors import RateLimitedError
from chronicle_cache.repositories import InMemorySessionStore


def run(coro):
    return asyncio.run(coro)


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep stand-in that records delays and advances a clock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._clock is not None:
            self._clock.advance(seconds)


class ScriptedOperation:
    """Async operation returning or raising the scripted outcomes in order."""

    def __init__(self, outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeHistoryProvider:
    """HistoryProvider returning canned content and counting calls."""

    model_name = "fake-model"

    def __init__(self) -> None:
        self.text_calls: list[str] = []
        self.json_calls: list[str] = []
        self.image_calls: list[tuple[str, str]] = []
        self.json_replies: dict[str, str] = {}
        self.failures: list[Exception] = []

    def _maybe_fail(self) -> None:
        if self.failures:
            raise self.failures.pop(0)

    async def generate_text(self, prompt: str) -> str:
        self.text_calls.append(prompt)
        self._maybe_fail()
        return f"Narrative #{len(self.text_calls)}"

    async def generate_json(self, prompt: str, schema) -> str:
        self.json_calls.append(prompt)
        self._maybe_fail()
        name = "SearchResults" if get_origin(schema) is list else schema.__name__
        return self.json_replies.get(name, "{}")

    async def generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        self.image_calls.append((prompt, aspect_ratio))
        self._maybe_fail()
        return b"\xff\xd8jpeg"


ROME_JSON = json.dumps(
    {
        "name": "Ancient Rome",
        "summary": "A city-state that grew into an empire.",
        "timeline": [
            {
                "id": "founding-of-rome",
                "date": "753 BCE",
                "title": "Founding of Rome",
                "summary": "Romulus founds the city.",
            }
        ],
        "key_characters": [{"name": "Julius Caesar", "summary": "General and dictator."}],
        "major_wars": [{"name": "Punic Wars", "summary": "Wars against Carthage."}],
        "cultural_topics": [{"name": "Roman Law", "summary": "Foundation of civil law."}],
    }
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def provider():
    provider = FakeHistoryProvider()
    provider.json_replies["Civilization"] = ROME_JSON
    return provider


@pytest.fixture
def rate_limited():
    return RateLimitedError("429 RESOURCE_EXHAUSTED")
