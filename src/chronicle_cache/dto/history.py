"""History content DTOs.

These Pydantic models describe what the generative backend returns and
what the API hands to the UI, using the UI's camelCase field names on the
wire. They double as response schemas for structured generation, so field
descriptions are part of the prompt.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]


class HistoryModel(BaseModel):
    """Base for history content.

    Fields serialize in camelCase (``keyCharacters``) for the browser UI and
    accept either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CivilizationOption(HistoryModel):
    """A civilization the user can pick."""

    name: str


class TimelineEvent(HistoryModel):
    """One major event on a civilization's timeline."""

    id: str = Field(..., description="A unique slug-like ID for the event, e.g. 'founding-of-rome'")
    date: str = Field(..., description="The date of the event, e.g. '753 BCE'")
    title: str
    summary: str
    location: str | None = None


class Character(HistoryModel):
    """A key historical figure."""

    name: str
    summary: str


class War(HistoryModel):
    """A major conflict."""

    name: str
    summary: str


class Topic(HistoryModel):
    """A cultural topic."""

    name: str
    summary: str


class Civilization(HistoryModel):
    """Generated overview of a civilization."""

    name: str
    summary: str
    timeline: list[TimelineEvent] = Field(default_factory=list)
    key_characters: list[Character] = Field(default_factory=list)
    major_wars: list[War] = Field(default_factory=list)
    cultural_topics: list[Topic] = Field(default_factory=list)


class PointOfInterest(HistoryModel):
    name: str
    description: str = Field(
        ...,
        description="A one or two-sentence description of the location's significance to the event.",
    )


class MapData(HistoryModel):
    """Geographical setting of an event."""

    map_description: str = Field(
        ...,
        description="A brief, one-sentence description of the overall geographical area.",
    )
    points_of_interest: list[PointOfInterest] = Field(default_factory=list)


class Lfo(HistoryModel):
    frequency: float
    depth: float


class NoiseFilter(HistoryModel):
    type: Literal["lowpass", "highpass", "bandpass"]
    frequency: float


class MusicLayer(HistoryModel):
    """One layer of a procedural ambient soundscape.

    Oscillator layers need ``oscillator_type`` and ``frequency``; noise
    layers may carry a ``filter``.
    """

    type: Literal["oscillator", "noise"]
    gain: float
    oscillator_type: Literal["sine", "square", "sawtooth", "triangle"] | None = Field(
        None, description="Required if type is 'oscillator'"
    )
    frequency: float | None = Field(None, description="Required if type is 'oscillator'")
    lfo: Lfo | None = None
    filter: NoiseFilter | None = None

    @model_validator(mode="after")
    def _oscillator_fields(self) -> "MusicLayer":
        if self.type == "oscillator" and (self.oscillator_type is None or self.frequency is None):
            raise ValueError("oscillator layers need oscillator_type and frequency")
        return self


class MusicParameters(HistoryModel):
    layers: list[MusicLayer] = Field(default_factory=list)


class SearchResult(HistoryModel):
    """A match returned by global search."""

    type: Literal["event", "character", "war", "topic"]
    id: str | None = Field(None, description="The ID of the event, if applicable")
    name: str | None = Field(None, description="The name of the character, war, or topic")
    title: str | None = Field(None, description="The title of the event")
    summary: str | None = Field(None, description="A brief summary of the item.")
