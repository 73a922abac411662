"""
Tests for the history API.

Dependencies are overridden with in-process fakes, so neither Gemini nor
Redis is needed.
"""

import pytest
from fastapi.testclient import TestClient

from chronicle_cache.api.app import app
from chronicle_cache.api.dependencies import (
    get_cache_statistics,
    get_history_provider,
    get_retrying_invoker,
)
from chronicle_cache.entities import CacheStatistics, RetryPolicy
from chronicle_cache.errors import RateLimitedError, RetryDeadlineExceededError
from chronicle_cache.repositories import InMemorySessionStore
from chronicle_cache.services import RetryingInvoker

from conftest import ROME_JSON, RecordingSleep

EVENT = {
    "id": "founding-of-rome",
    "date": "753 BCE",
    "title": "Founding of Rome",
    "summary": "Romulus founds the city.",
}


@pytest.fixture
def stores():
    return {}


@pytest.fixture
def client(provider, stores):
    """Create a test client wired to fakes."""

    def session_store(session_id):
        return stores.setdefault(session_id, InMemorySessionStore())

    stats = CacheStatistics()
    invoker = RetryingInvoker(
        policy=RetryPolicy(max_attempts=2),
        sleep=RecordingSleep(),
        random_source=lambda a, b: 0.0,
    )

    app.dependency_overrides[get_history_provider] = lambda: provider
    app.dependency_overrides[get_retrying_invoker] = lambda: invoker
    app.dependency_overrides[get_cache_statistics] = lambda: stats
    app.state.session_store_factory = session_store
    yield TestClient(app)
    app.dependency_overrides.clear()
    del app.state.session_store_factory


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Chronicle History API"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "store_healthy": True}


def test_list_civilizations(client):
    response = client.get("/civilizations")
    assert response.status_code == 200
    assert {"name": "Feudal Japan"} in response.json()


def test_overview_is_cached_per_session(client, provider):
    body = {"civilization": "Ancient Rome", "language": "English", "kids_mode": False}

    first = client.post("/civilizations/overview", json=body, headers={"X-Session-Id": "a"})
    second = client.post("/civilizations/overview", json=body, headers={"X-Session-Id": "a"})
    other = client.post("/civilizations/overview", json=body, headers={"X-Session-Id": "b"})

    assert first.status_code == 200
    assert first.json()["timeline"][0]["id"] == "founding-of-rome"
    assert second.json() == first.json()
    assert other.status_code == 200
    assert len(provider.json_calls) == 2


def test_details_endpoints(client, provider):
    event = client.post(
        "/details/event",
        json={"civilization": "Ancient Rome", "event": EVENT, "character": None},
    )
    character = client.post(
        "/details/character",
        json={"civilization": "Ancient Rome", "name": "Julius Caesar"},
    )
    war = client.post("/details/war", json={"civilization": "Ancient Rome", "name": "Punic Wars"})
    topic = client.post("/details/topic", json={"civilization": "Ancient Rome", "name": "Roman Law"})

    assert [r.status_code for r in (event, character, war, topic)] == [200] * 4
    assert event.json() == {"text": "Narrative #1"}
    assert len(provider.text_calls) == 4


def test_image_endpoint(client):
    response = client.post("/images", json={"prompt": "The Colosseum", "aspect_ratio": "4:3"})
    assert response.status_code == 200
    assert response.json()["data_uri"].startswith("data:image/jpeg;base64,")


def test_image_rejects_bad_aspect_ratio(client):
    response = client.post("/images", json={"prompt": "The Colosseum", "aspect_ratio": "2:1"})
    assert response.status_code == 422


def test_search_endpoint(client, provider):
    provider.json_replies["SearchResults"] = '[{"type": "war", "name": "Punic Wars"}]'
    civilization = client.post(
        "/civilizations/overview", json={"civilization": "Ancient Rome"}
    ).json()

    response = client.post("/search", json={"query": "carthage", "civilization": civilization})

    assert response.status_code == 200
    assert response.json()[0]["name"] == "Punic Wars"


def test_rate_limit_exhaustion_maps_to_429(client, provider):
    provider.failures = [RateLimitedError("429"), RateLimitedError("429")]

    response = client.post("/details/war", json={"civilization": "Ancient Rome", "name": "Punic Wars"})

    assert response.status_code == 429
    assert len(provider.text_calls) == 2


def test_invalid_model_reply_maps_to_502(client, provider):
    provider.json_replies["MapData"] = "not json"

    response = client.post("/events/map", json={"civilization": "Ancient Rome", "event": EVENT})

    assert response.status_code == 502


def test_deadline_maps_to_504(client, provider):
    provider.failures = [RetryDeadlineExceededError(1.0, 1)]

    response = client.post("/details/topic", json={"civilization": "Ancient Rome", "name": "Roman Law"})

    assert response.status_code == 504


def test_unexpected_failure_maps_to_500(client, provider):
    provider.failures = [RuntimeError("backend exploded")]

    response = client.post("/details/topic", json={"civilization": "Ancient Rome", "name": "Roman Law"})

    assert response.status_code == 500


def test_stats_and_clear(client, stores):
    body = {"civilization": "Ancient Rome", "name": "Julius Caesar"}
    client.post("/details/character", json=body)
    client.post("/details/character", json=body)

    stats = client.get("/stats").json()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["retry_max_attempts"] == 2

    cleared = client.delete("/cache")
    assert cleared.status_code == 200
    assert cleared.json()["deleted_count"] == 1
    assert len(stores["anonymous"]) == 0


def test_music_endpoint(client, provider):
    provider.json_replies["MusicParameters"] = (
        '{"layers": [{"type": "noise", "gain": 0.03}]}'
    )

    response = client.post(
        "/events/music",
        json={"civilization": "Ancient Rome", "event": EVENT, "kids_mode": True},
    )

    assert response.status_code == 200
    assert response.json()["layers"][0]["type"] == "noise"


def test_overview_payload(client):
    response = client.post("/civilizations/overview", json={"civilization": "Ancient Rome"})
    assert response.json()["name"] == "Ancient Rome"
    assert response.json()["summary"] in ROME_JSON


@pytest.mark.parametrize("session_id", ["*", "a:b", "x" * 129, "session id"])
def test_rejects_malformed_session_ids(client, stores, session_id):
    response = client.post(
        "/details/character",
        json={"civilization": "Ancient Rome", "name": "Julius Caesar"},
        headers={"X-Session-Id": session_id},
    )

    assert response.status_code == 422
    assert stores == {}


def test_clear_with_wildcard_session_id_is_rejected(client, stores):
    body = {"civilization": "Ancient Rome", "name": "Julius Caesar"}
    client.post("/details/character", json=body, headers={"X-Session-Id": "victim"})

    response = client.delete("/cache", headers={"X-Session-Id": "*"})

    assert response.status_code == 422
    assert len(stores["victim"]) == 1


def test_overview_uses_camel_case_fields(client):
    response = client.post("/civilizations/overview", json={"civilization": "Ancient Rome"})

    payload = response.json()
    assert payload["keyCharacters"][0]["name"] == "Julius Caesar"
    assert "key_characters" not in payload
