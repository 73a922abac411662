"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from .history import AspectRatio, Character, Civilization, TimelineEvent


class HistoryRequest(BaseModel):
    """Fields shared by every generation request."""

    language: str = Field("English", description="Language of the generated content", min_length=1)
    kids_mode: bool = Field(False, description="Simplify content for young children")


class CivilizationRequest(HistoryRequest):
    """Request DTO for a civilization overview."""

    civilization: str = Field(..., description="Name of the civilization", min_length=1)


class EventDetailsRequest(HistoryRequest):
    """Request DTO for an event narrative."""

    civilization: str = Field(..., min_length=1)
    event: TimelineEvent
    character: Character | None = Field(
        None,
        description="Tell the event from this character's perspective",
    )


class SubjectDetailsRequest(HistoryRequest):
    """Request DTO for character, war or topic details."""

    civilization: str = Field(..., min_length=1)
    name: str = Field(..., description="Name of the character, war or topic", min_length=1)


class EventMediaRequest(HistoryRequest):
    """Request DTO for map data and music parameters of an event."""

    civilization: str = Field(..., min_length=1)
    event: TimelineEvent


class ImageRequest(BaseModel):
    """Request DTO for image generation."""

    prompt: str = Field(..., min_length=1)
    aspect_ratio: AspectRatio = "16:9"


class SearchRequest(HistoryRequest):
    """Request DTO for global search across a civilization."""

    query: str = Field(..., min_length=1)
    civilization: Civilization
