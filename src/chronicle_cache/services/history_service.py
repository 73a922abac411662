"""History service for core business logic.

This service orchestrates generation requests by coordinating the
response cache (session memoization), the retrying invoker (rate limit
backoff) and the history provider (the generative backend).
"""

import base64
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from chronicle_cache import prompts
from chronicle_cache.dto import (
    AspectRatio,
    Character,
    Civilization,
    CivilizationOption,
    MapData,
    MusicParameters,
    SearchResult,
    TimelineEvent,
)
from chronicle_cache.errors import InvalidModelResponseError
from chronicle_cache.protocols import HistoryProvider

from .response_cache import KeyPart, ResponseCache
from .retrying_invoker import RetryingInvoker

logger = logging.getLogger(__name__)

T = TypeVar("T")

CIVILIZATIONS = (
    "Ancient Rome",
    "Ancient Egypt",
    "The Aztec Empire",
    "The Mongol Empire",
    "Feudal Japan",
    "The Viking Age",
)

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")


class HistoryService:
    """Cached, rate-limit aware access to generated history content.

    Every generation call goes through the same composition: look the
    request up in the session cache; on a miss run the provider call
    under the retry policy and cache the result.

    Example:
        ```python
        service = HistoryService(
            provider=GeminiHistoryProvider.create(),
            cache=ResponseCache(store=InMemorySessionStore()),
            invoker=RetryingInvoker(),
        )
        rome = await service.fetch_civilization_data("Ancient Rome", "English", False)
        ```
    """

    def __init__(
        self,
        provider: HistoryProvider,
        cache: ResponseCache,
        invoker: RetryingInvoker,
        retry_deadline_s: float | None = None,
    ) -> None:
        """Initialize the history service.

        Args:
            provider: Generative backend (required).
            cache: Session response cache (required).
            invoker: Retry wrapper for provider calls (required).
            retry_deadline_s: Optional overall budget for each generation call.
        """
        self._provider = provider
        self._cache = cache
        self._invoker = invoker
        self._deadline_s = retry_deadline_s

    async def _cached(
        self,
        key_parts: Sequence[KeyPart],
        call: Callable[[], Awaitable[T]],
        response_type: Any,
    ) -> T:
        return await self._cache.with_cache(
            key_parts,
            lambda: self._invoker.invoke_with_retry(call, deadline_s=self._deadline_s),
            response_type=response_type,
        )

    async def _generate_structured(self, prompt: str, schema: Any) -> Any:
        raw = await self._provider.generate_json(prompt, schema)
        try:
            return TypeAdapter(schema).validate_json(raw)
        except ValidationError as e:
            logger.error("Failed to parse structured response from %s: %s", self._provider.model_name, e)
            raise InvalidModelResponseError(
                "The AI model returned an invalid response. Please try again."
            ) from e

    async def list_civilizations(self) -> list[CivilizationOption]:
        """Return the fixed list of civilizations offered to the user."""
        return [CivilizationOption(name=name) for name in CIVILIZATIONS]

    async def fetch_civilization_data(
        self, civilization: str, language: str, kids_mode: bool
    ) -> Civilization:
        prompt = prompts.civilization_prompt(civilization, language, kids_mode)
        return await self._cached(
            ["civilization", civilization, language, kids_mode],
            lambda: self._generate_structured(prompt, Civilization),
            Civilization,
        )

    async def fetch_event_details(
        self,
        event: TimelineEvent,
        character: Character | None,
        civilization: str,
        language: str,
        kids_mode: bool,
    ) -> str:
        prompt = prompts.event_details_prompt(event, character, civilization, language, kids_mode)
        return await self._cached(
            [
                "event",
                civilization,
                event.id,
                character.name if character else None,
                language,
                kids_mode,
            ],
            lambda: self._provider.generate_text(prompt),
            str,
        )

    async def fetch_character_details(
        self, name: str, civilization: str, language: str, kids_mode: bool
    ) -> str:
        prompt = prompts.character_details_prompt(name, civilization, language, kids_mode)
        return await self._cached(
            ["character", civilization, name, language, kids_mode],
            lambda: self._provider.generate_text(prompt),
            str,
        )

    async def fetch_war_details(
        self, name: str, civilization: str, language: str, kids_mode: bool
    ) -> str:
        prompt = prompts.war_details_prompt(name, civilization, language, kids_mode)
        return await self._cached(
            ["war", civilization, name, language, kids_mode],
            lambda: self._provider.generate_text(prompt),
            str,
        )

    async def fetch_topic_details(
        self, name: str, civilization: str, language: str, kids_mode: bool
    ) -> str:
        prompt = prompts.topic_details_prompt(name, civilization, language, kids_mode)
        return await self._cached(
            ["topic", civilization, name, language, kids_mode],
            lambda: self._provider.generate_text(prompt),
            str,
        )

    async def generate_map_data(
        self, event: TimelineEvent, civilization: str, language: str, kids_mode: bool
    ) -> MapData:
        prompt = prompts.map_data_prompt(event, civilization, language, kids_mode)
        return await self._cached(
            ["map", civilization, event.id, language, kids_mode],
            lambda: self._generate_structured(prompt, MapData),
            MapData,
        )

    async def generate_music_parameters(
        self, event: TimelineEvent, civilization: str, kids_mode: bool
    ) -> MusicParameters:
        prompt = prompts.music_parameters_prompt(event, civilization, kids_mode)
        return await self._cached(
            ["music", civilization, event.id, kids_mode],
            lambda: self._generate_structured(prompt, MusicParameters),
            MusicParameters,
        )

    async def generate_image(self, prompt: str, aspect_ratio: AspectRatio = "16:9") -> str:
        """Generate an illustration and return it as a JPEG data URI.

        Raises:
            ValueError: If the aspect ratio is not supported
        """
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio {aspect_ratio!r}, expected one of {ASPECT_RATIOS}")

        async def render() -> str:
            image_bytes = await self._provider.generate_image(prompt, aspect_ratio)
            return "data:image/jpeg;base64," + base64.b64encode(image_bytes).decode("ascii")

        return await self._cached(["image", prompt, aspect_ratio], render, str)

    async def global_search(
        self,
        query: str,
        civilization: Civilization,
        language: str,
        kids_mode: bool,
    ) -> list[SearchResult]:
        prompt = prompts.global_search_prompt(query, civilization, language, kids_mode)
        return await self._cached(
            ["search", civilization.name, query, language, kids_mode],
            lambda: self._generate_structured(prompt, list[SearchResult]),
            list[SearchResult],
        )

    @property
    def cache(self) -> ResponseCache:
        """Get the underlying response cache (for testing)."""
        return self._cache

    @property
    def invoker(self) -> RetryingInvoker:
        """Get the underlying retrying invoker (for testing)."""
        return self._invoker
