"""
Tests for the history service composition of cache, retry and provider.
"""

import base64
import json

import pytest

from chronicle_cache.dto import Character, Civilization, MapData, MusicParameters, TimelineEvent
from chronicle_cache.entities import RetryPolicy
from chronicle_cache.errors import InvalidModelResponseError, RateLimitedError
from chronicle_cache.services import HistoryService, ResponseCache, RetryingInvoker

from conftest import ROME_JSON, RecordingSleep, run

FOUNDING = TimelineEvent(
    id="founding-of-rome",
    date="753 BCE",
    title="Founding of Rome",
    summary="Romulus founds the city.",
)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def service(provider, store, clock, sleep):
    return HistoryService(
        provider=provider,
        cache=ResponseCache(store=store, ttl=300, clock=clock),
        invoker=RetryingInvoker(policy=RetryPolicy(), sleep=sleep, random_source=lambda a, b: 0.0),
    )


def test_list_civilizations(service, provider):
    names = [option.name for option in run(service.list_civilizations())]

    assert "Ancient Rome" in names
    assert len(names) == 6
    assert provider.json_calls == []


def test_civilization_overview_is_cached(service, provider):
    first = run(service.fetch_civilization_data("Ancient Rome", "English", False))
    second = run(service.fetch_civilization_data("Ancient Rome", "English", False))

    assert isinstance(first, Civilization)
    assert first.key_characters[0].name == "Julius Caesar"
    assert second == first
    assert len(provider.json_calls) == 1
    assert provider.json_calls[0].startswith("Respond in English. ")


def test_kids_mode_is_a_separate_cache_entry(service, provider):
    run(service.fetch_civilization_data("Ancient Rome", "English", False))
    run(service.fetch_civilization_data("Ancient Rome", "English", True))

    assert len(provider.json_calls) == 2
    assert "5-year-old" in provider.json_calls[1]


def test_cache_expiry_triggers_new_generation(service, provider, clock):
    run(service.fetch_character_details("Julius Caesar", "Ancient Rome", "English", False))
    clock.advance(301)
    text = run(service.fetch_character_details("Julius Caesar", "Ancient Rome", "English", False))

    assert text == "Narrative #2"
    assert len(provider.text_calls) == 2


def test_event_details_key_includes_character(service, provider):
    caesar = Character(name="Julius Caesar", summary="General.")

    run(service.fetch_event_details(FOUNDING, None, "Ancient Rome", "English", False))
    run(service.fetch_event_details(FOUNDING, caesar, "Ancient Rome", "English", False))
    run(service.fetch_event_details(FOUNDING, caesar, "Ancient Rome", "English", False))

    assert len(provider.text_calls) == 2
    assert "from the perspective of Julius Caesar" in provider.text_calls[1]


def test_war_and_topic_details(service, provider):
    war = run(service.fetch_war_details("Punic Wars", "Ancient Rome", "Latin", False))
    topic = run(service.fetch_topic_details("Roman Law", "Ancient Rome", "Latin", False))

    assert war != topic
    assert provider.text_calls[0].startswith("Respond in Latin. ")
    assert "Roman Law" in provider.text_calls[1]


def test_rate_limited_generation_is_retried_then_cached(service, provider, sleep):
    provider.failures = [RateLimitedError("429"), RateLimitedError("429")]

    text = run(service.fetch_topic_details("Roman Law", "Ancient Rome", "English", False))
    again = run(service.fetch_topic_details("Roman Law", "Ancient Rome", "English", False))

    assert text == again == "Narrative #3"
    assert len(provider.text_calls) == 3
    assert sleep.delays == [1.5, 3.0]


def test_non_retryable_failure_is_not_cached(service, provider, sleep):
    provider.failures = [RuntimeError("backend exploded")]

    with pytest.raises(RuntimeError):
        run(service.fetch_war_details("Punic Wars", "Ancient Rome", "English", False))
    text = run(service.fetch_war_details("Punic Wars", "Ancient Rome", "English", False))

    assert text == "Narrative #2"
    assert sleep.delays == []


def test_invalid_structured_reply_is_reported_and_not_retried(service, provider, sleep):
    provider.json_replies["Civilization"] = "this is not json"

    with pytest.raises(InvalidModelResponseError):
        run(service.fetch_civilization_data("Ancient Rome", "English", False))
    assert len(provider.json_calls) == 1
    assert sleep.delays == []


def test_map_and_music(service, provider):
    provider.json_replies["MapData"] = json.dumps(
        {
            "map_description": "The seven hills by the Tiber.",
            "points_of_interest": [{"name": "Palatine Hill", "description": "Where Romulus settled."}],
        }
    )
    provider.json_replies["MusicParameters"] = json.dumps(
        {
            "layers": [
                {"type": "oscillator", "oscillator_type": "sine", "frequency": 220, "gain": 0.05},
                {"type": "noise", "gain": 0.02, "filter": {"type": "lowpass", "frequency": 400}},
            ]
        }
    )

    map_data = run(service.generate_map_data(FOUNDING, "Ancient Rome", "English", False))
    music = run(service.generate_music_parameters(FOUNDING, "Ancient Rome", False))
    run(service.generate_music_parameters(FOUNDING, "Ancient Rome", False))

    assert isinstance(map_data, MapData)
    assert map_data.points_of_interest[0].name == "Palatine Hill"
    assert isinstance(music, MusicParameters)
    assert [layer.type for layer in music.layers] == ["oscillator", "noise"]
    assert len(provider.json_calls) == 2


def test_music_oscillator_requires_frequency(service, provider):
    provider.json_replies["MusicParameters"] = json.dumps(
        {"layers": [{"type": "oscillator", "gain": 0.05}]}
    )

    with pytest.raises(InvalidModelResponseError):
        run(service.generate_music_parameters(FOUNDING, "Ancient Rome", False))


def test_generate_image_returns_data_uri(service, provider):
    uri = run(service.generate_image("A Roman forum at dawn", "16:9"))
    run(service.generate_image("A Roman forum at dawn", "16:9"))

    assert uri == "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8jpeg").decode()
    assert provider.image_calls == [("A Roman forum at dawn", "16:9")]


def test_generate_image_rejects_unknown_aspect_ratio(service):
    with pytest.raises(ValueError):
        run(service.generate_image("A Roman forum", "2:1"))


def test_global_search(service, provider):
    rome = Civilization.model_validate_json(ROME_JSON)
    provider.json_replies["SearchResults"] = json.dumps(
        [{"type": "character", "name": "Julius Caesar", "summary": "General."}]
    )

    results = run(service.global_search("caesar", rome, "English", False))
    cached = run(service.global_search("caesar", rome, "English", False))

    assert results[0].type == "character"
    assert cached == results
    assert len(provider.json_calls) == 1
    assert '"founding-of-rome"' in provider.json_calls[0]


def test_global_search_caches_empty_results(service, provider):
    rome = Civilization.model_validate_json(ROME_JSON)
    provider.json_replies["SearchResults"] = "[]"

    assert run(service.global_search("nothing", rome, "English", False)) == []
    assert run(service.global_search("nothing", rome, "English", False)) == []
    assert len(provider.json_calls) == 1


def test_deadline_is_passed_to_invoker(provider, store, clock):
    recorded = []

    class RecordingInvoker(RetryingInvoker):
        async def invoke_with_retry(self, operation, *, deadline_s=None):
            recorded.append(deadline_s)
            return await operation()

    service = HistoryService(
        provider=provider,
        cache=ResponseCache(store=store, ttl=300, clock=clock),
        invoker=RecordingInvoker(),
        retry_deadline_s=12.5,
    )
    run(service.fetch_war_details("Gempei War", "Feudal Japan", "English", False))

    assert recorded == [12.5]
