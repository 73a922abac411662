"""Gemini-based history provider.

Uses the google-genai async client to generate history narratives,
structured JSON (civilization overviews, maps, music parameters, search
results) and illustrative images.

Requirements:
    - GEMINI_API_KEY (or API_KEY) set in the environment

Models used by default:
- gemini-2.5-flash for text and structured output
- imagen-4.0-generate-001 for images
"""

import logging
from typing import Any

from google import genai
from google.genai import errors, types

from chronicle_cache.config import settings
from chronicle_cache.errors import InvalidModelResponseError, RateLimitedError

logger = logging.getLogger(__name__)


class GeminiHistoryProvider:
    """Gemini implementation of the HistoryProvider protocol.

    This class satisfies the HistoryProvider protocol through structural
    typing - no explicit inheritance needed.

    Rate limit responses (HTTP 429 / RESOURCE_EXHAUSTED) are re-raised as
    ``RateLimitedError`` so the retrying invoker backs off on them; every
    other API error propagates unchanged.

    Example:
        ```python
        provider = GeminiHistoryProvider.create()
        text = await provider.generate_text("Who was Hannibal?")
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        text_model: str | None = None,
        image_model: str | None = None,
        client: genai.Client | None = None,
    ) -> None:
        """Initialize the Gemini provider.

        Args:
            api_key: Gemini API key. Defaults to settings.gemini_api_key.
            text_model: Model for text and JSON generation. Defaults to settings.
            image_model: Model for image generation. Defaults to settings.
            client: Pre-built genai client (mainly for tests).
        """
        self._api_key = api_key or settings.gemini_api_key
        self._text_model = text_model or settings.gemini_text_model
        self._image_model = image_model or settings.gemini_image_model
        self._client = client

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        text_model: str | None = None,
    ) -> "GeminiHistoryProvider":
        """Factory method to create GeminiHistoryProvider with defaults.

        Args:
            api_key: API key. If None, uses settings.
            text_model: Text model name. If None, uses settings.

        Returns:
            Configured GeminiHistoryProvider
        """
        return cls(api_key=api_key, text_model=text_model)

    @property
    def client(self) -> genai.Client:
        """Lazy-load the genai client.

        Returns:
            The genai.Client instance

        Raises:
            RuntimeError: If no API key is configured
        """
        if self._client is None:
            if not self._api_key:
                raise RuntimeError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    @property
    def model_name(self) -> str:
        return self._text_model

    async def generate_text(self, prompt: str) -> str:
        response = await self._generate_content(prompt)
        if not response.text:
            raise InvalidModelResponseError("The AI model returned an empty response.")
        return response.text

    async def generate_json(self, prompt: str, schema: Any) -> str:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )
        response = await self._generate_content(prompt, config)
        if not response.text:
            raise InvalidModelResponseError("The AI model returned an empty response.")
        return response.text.strip()

    async def generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        try:
            response = await self.client.aio.models.generate_images(
                model=self._image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=1,
                    output_mime_type="image/jpeg",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except errors.APIError as e:
            raise self._translate(e) from e

        images = response.generated_images or []
        if not images or images[0].image is None or not images[0].image.image_bytes:
            raise InvalidModelResponseError("The image model returned no image.")
        return images[0].image.image_bytes

    async def _generate_content(
        self,
        prompt: str,
        config: types.GenerateContentConfig | None = None,
    ) -> types.GenerateContentResponse:
        try:
            return await self.client.aio.models.generate_content(
                model=self._text_model,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            raise self._translate(e) from e

    @staticmethod
    def _translate(error: errors.APIError) -> Exception:
        """Map quota errors to RateLimitedError, leave everything else as is."""
        if error.code == 429 or error.status == "RESOURCE_EXHAUSTED":
            logger.info("Gemini rate limited the request: %s", error.message)
            return RateLimitedError(str(error))
        return error
