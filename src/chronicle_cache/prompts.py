"""Prompt builders for history generation."""

import json

from chronicle_cache.dto import Character, Civilization, TimelineEvent

KIDS_MODE_INSTRUCTION = (
    "The response should be simple, engaging, and suitable for a 5-year-old child. "
    "Use short sentences and a friendly, storytelling tone. "
)


def prompt_prefix(language: str, kids_mode: bool) -> str:
    prefix = f"Respond in {language}. "
    if kids_mode:
        prefix += KIDS_MODE_INSTRUCTION
    return prefix


def _perspective(character: Character | None) -> str:
    return f" from the perspective of {character.name}" if character else ""


def civilization_prompt(name: str, language: str, kids_mode: bool) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f"Generate a comprehensive overview of the {name} civilization. "
        "Provide the data in the specified JSON format. "
        "The timeline should have between 8 and 12 major events. "
        "The summaries should be concise, 1-2 sentences."
    )


def event_details_prompt(
    event: TimelineEvent,
    character: Character | None,
    civilization: str,
    language: str,
    kids_mode: bool,
) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f'Provide a detailed, narrative description of the historical event: "{event.title}" '
        f"({event.date}) within the {civilization} civilization{_perspective(character)}. "
        "The description should be a few paragraphs long and bring the event to life."
    )


def character_details_prompt(name: str, civilization: str, language: str, kids_mode: bool) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f"Provide a detailed biography of {name} from the {civilization} civilization. "
        "Focus on their historical significance and key life events. "
        "The response should be a few paragraphs long."
    )


def war_details_prompt(name: str, civilization: str, language: str, kids_mode: bool) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f"Describe the major events, key figures, and outcome of the {name}, "
        f"a significant conflict for the {civilization} civilization. "
        "The response should be a few paragraphs long."
    )


def topic_details_prompt(name: str, civilization: str, language: str, kids_mode: bool) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f'Explain the cultural topic of "{name}" within the {civilization} civilization. '
        "Discuss its importance and impact on their society. "
        "The response should be a few paragraphs long."
    )


def map_data_prompt(event: TimelineEvent, civilization: str, language: str, kids_mode: bool) -> str:
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f'For the historical event "{event.title}" ({event.date}) in the {civilization} '
        "civilization, describe the geographical setting and identify 3-5 key points of "
        "interest relevant to the event. Provide the data in the specified JSON format. "
        "Descriptions should be concise."
    )


def music_parameters_prompt(event: TimelineEvent, civilization: str, kids_mode: bool) -> str:
    if kids_mode:
        mood = (
            "The sound should be simple, cheerful, and magical, suitable for children. "
            "Use major keys and simple oscillator waves like sine or triangle."
        )
    else:
        mood = (
            "The sound should be atmospheric, ambient, and reflect the mood of the event. "
            "Use a mix of oscillators and filtered noise to create a rich texture. "
            "It can be mysterious, tense, or epic depending on the event."
        )
    return "\n".join(
        [
            "Generate parameters for a procedural ambient soundscape to match the "
            f'historical event: "{event.title}" ({event.date}) from the {civilization} civilization.',
            f"Event summary: {event.summary}.",
            mood,
            "Provide the data in the specified JSON format.",
            "- Frequencies should be between 50 and 800 Hz.",
            "- LFO frequencies should be between 0.1 and 8 Hz.",
            "- LFO depths should be between 5 and 50.",
            "- Gains should be very low, between 0.01 and 0.15, to keep the music ambient.",
            "- Create 2 to 4 layers.",
        ]
    )


def global_search_prompt(
    query: str,
    civilization: Civilization,
    language: str,
    kids_mode: bool,
) -> str:
    timeline = json.dumps([{"id": e.id, "title": e.title} for e in civilization.timeline])
    characters = json.dumps([c.name for c in civilization.key_characters])
    wars = json.dumps([w.name for w in civilization.major_wars])
    topics = json.dumps([t.name for t in civilization.cultural_topics])
    return (
        f"{prompt_prefix(language, kids_mode)}"
        f'The user is searching for "{query}" within the context of the {civilization.name} '
        "civilization. Search through the provided timeline events, key characters, major "
        "wars, and cultural topics and return the most relevant results. Each result must "
        "include a 'type' field ('event', 'character', 'war', 'topic'). Return an empty "
        "array if no results are found. The context for the search is as follows: "
        f"Timeline: {timeline}, Characters: {characters}, Wars: {wars}, Topics: {topics}"
    )
