"""History provider protocol.

Defines the interface for the generative service that writes history
content. The service's internal behavior is opaque; the only signal the
core layer inspects is whether a failure means rate limiting.

Implementations can include:
- Google Gemini via google-genai (default)
- Scripted fakes for tests and offline demos
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HistoryProvider(Protocol):
    """Protocol for generative history backends.

    Example:
        ```python
        from chronicle_cache.protocols import HistoryProvider

        provider: HistoryProvider = GeminiHistoryProvider.create()
        text = await provider.generate_text("Describe the fall of Rome.")
        ```
    """

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the text model."""
        ...

    async def generate_text(self, prompt: str) -> str:
        """Generate free-form text for a prompt.

        Args:
            prompt: The full prompt text

        Returns:
            The generated text
        """
        ...

    async def generate_json(self, prompt: str, schema: Any) -> str:
        """Generate JSON text that follows a response schema.

        Args:
            prompt: The full prompt text
            schema: A pydantic model or type describing the expected JSON

        Returns:
            The raw JSON text returned by the model
        """
        ...

    async def generate_image(self, prompt: str, aspect_ratio: str) -> bytes:
        """Generate a single JPEG image.

        Args:
            prompt: Image description
            aspect_ratio: One of "1:1", "16:9", "9:16", "4:3", "3:4"

        Returns:
            The encoded JPEG bytes
        """
        ...
