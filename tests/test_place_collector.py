"""
Tests for the HERE place data collector

Covers the data quality score, per-endpoint failure tolerance, the parser,
the disk cache and forward geocoding.
"""

import os
import time

import random

import pytest
import requests

from conftest import FakeResponse, FakeSession, TIMES_SQUARE, place
from location_insight.config import APIConfig, InsightConfig, get_config
from location_insight.pipeline import LocationAnalysisPipeline
from location_insight.providers import HereMapProvider
from location_insight.collectors.here.cache import PlaceDataCache
from location_insight.collectors.here import (
    HereAPIClient, HerePlacesCollector, HereResponseParser, GeocodingError,
    calculate_data_quality,
)


API = get_config().api


def items(n):
    return {"items": [place(f"Place {i}") for i in range(n)]}


def test_data_quality_all_sources():
    assert calculate_data_quality(items(5), items(1), items(3)) == 90
    assert calculate_data_quality(items(21), items(1), items(3)) == 100


def test_data_quality_partial_and_empty():
    assert calculate_data_quality(None, None, None) == 0
    assert calculate_data_quality(items(0), items(1), None) == 30
    assert calculate_data_quality(items(21), None, None) == 50
    # Exactly 20 places gets no bonus
    assert calculate_data_quality(items(20), None, None) == 40


def test_collector_without_client_returns_empty_bundle():
    bundle = HerePlacesCollector(None).fetch_place_data(TIMES_SQUARE, "Times Square New York")

    assert bundle.data_quality == 0
    assert bundle.error == "HERE API key not configured"
    assert bundle.places is None and bundle.geocode is None and bundle.browse is None
    assert not bundle.any_source


def test_collector_tolerates_partial_failure():
    session = FakeSession({
        API.discover_url: FakeResponse(items(25)),
        API.revgeocode_url: FakeResponse(status_code=503),
        API.browse_url: requests.exceptions.Timeout("read timed out"),
    })
    client = HereAPIClient("test-key", session=session)

    bundle = HerePlacesCollector(client).fetch_place_data(TIMES_SQUARE, "Times Square New York")

    assert bundle.geocode is None
    assert bundle.browse is None
    assert HereResponseParser.item_count(bundle.places) == 25
    assert bundle.data_quality == 50
    assert bundle.any_source
    assert len(session.calls) == 3


def test_collector_all_sources_unreachable():
    client = HereAPIClient("test-key", session=FakeSession())

    bundle = HerePlacesCollector(client).fetch_place_data(TIMES_SQUARE, "Times Square New York")

    assert bundle.data_quality == 0
    assert not bundle.any_source


def test_request_parameters():
    session = FakeSession({API.discover_url: FakeResponse(items(1))})
    client = HereAPIClient("test-key", session=session)

    client.discover(TIMES_SQUARE)

    call = session.calls[0]
    assert call["params"]["apiKey"] == "test-key"
    assert call["params"]["at"] == "40.758,-73.9855"
    assert call["params"]["limit"] == API.discover_limit
    assert call["timeout"] == API.request_timeout
    assert call["headers"]["User-Agent"] == API.user_agent


def test_invalid_json_is_missing_data():
    session = FakeSession({API.browse_url: FakeResponse(invalid_json=True)})
    client = HereAPIClient("test-key", session=session)

    assert client.browse(TIMES_SQUARE) is None


def test_collector_cache_round_trip(tmp_path):
    session = FakeSession({
        API.discover_url: FakeResponse(items(3)),
        API.revgeocode_url: FakeResponse(items(1)),
        API.browse_url: FakeResponse(items(2)),
    })
    collector = HerePlacesCollector(HereAPIClient("test-key", session=session), cache_dir=str(tmp_path))

    first = collector.fetch_place_data(TIMES_SQUARE, "Times Square New York")
    second = collector.fetch_place_data(TIMES_SQUARE, "Times Square")

    assert len(session.calls) == 3  # second call served from disk
    assert second.data_quality == first.data_quality == 90
    assert second.location == "Times Square"
    assert list(tmp_path.glob("here_*.json"))


def test_parser_tolerates_malformed_items():
    data = {"items": [
        {"title": "Central Park", "categories": [{"id": "550-5510-0202", "name": "Park"}]},
        "not-a-dict",
        {"categories": [{"name": None}], "address": {"label": "5th Ave", "postalCode": "10019"}},
    ]}

    parsed = HereResponseParser.parse_items(data)

    assert len(parsed) == 2
    assert parsed[0].category_name_contains("park")
    assert parsed[1].title == ""
    assert parsed[1].categories[0].name == ""
    assert parsed[1].address.postal_code == "10019"
    assert HereResponseParser.parse_items(None) == []
    assert HereResponseParser.item_count({"items": "nope"}) == 0


def test_geocode_returns_first_match():
    session = FakeSession({API.geocode_url: FakeResponse({"items": [{
        "title": "Eiffel Tower, Paris, France",
        "position": {"lat": 48.85837, "lng": 2.29448},
        "address": {"label": "Tour Eiffel, 75007 Paris, France"},
    }]})})
    client = HereAPIClient("test-key", session=session)

    found = client.geocode("  Eiffel Tower Paris ")

    assert found.title == "Eiffel Tower, Paris, France"
    assert found.coordinates == (48.85837, 2.29448)
    assert session.calls[0]["params"]["q"] == "Eiffel Tower Paris"


def test_geocode_errors():
    client = HereAPIClient("test-key", session=FakeSession({API.geocode_url: FakeResponse({"items": []})}))

    with pytest.raises(ValueError, match="Please enter a location"):
        client.geocode("   ")
    with pytest.raises(GeocodingError, match="not found"):
        client.geocode("Atlantis")

    unreachable = HereAPIClient("test-key", session=FakeSession())
    with pytest.raises(GeocodingError, match="failed"):
        unreachable.geocode("Paris")


def test_expired_cache_entry_is_ignored(tmp_path):
    cache = PlaceDataCache(str(tmp_path), max_age_hours=1)
    path = cache.put(TIMES_SQUARE, {"data_quality": 40})
    two_hours_ago = time.time() - 2 * 3600
    os.utime(path, (two_hours_ago, two_hours_ago))

    assert cache.get(TIMES_SQUARE) is None
    assert PlaceDataCache(str(tmp_path), max_age_hours=None).get(TIMES_SQUARE) == {"data_quality": 40}
    assert PlaceDataCache(None).put(TIMES_SQUARE, {}) is None


def live_routes(api):
    return {
        api.discover_url: FakeResponse(items(3)),
        api.revgeocode_url: FakeResponse(items(1)),
        api.browse_url: FakeResponse(items(2)),
    }


@pytest.mark.parametrize("entry", [{"data_quality": 400}, ["not", "a", "bundle"]])
def test_unusable_cache_entry_falls_back_to_live_fetch(tmp_path, entry):
    PlaceDataCache(str(tmp_path)).put(TIMES_SQUARE, entry)
    session = FakeSession(live_routes(API))
    collector = HerePlacesCollector(HereAPIClient("test-key", session=session), cache_dir=str(tmp_path))

    bundle = collector.fetch_place_data(TIMES_SQUARE, "Times Square New York")

    assert len(session.calls) == 3
    assert bundle.data_quality == 90
    # The live result replaced the bad entry
    assert PlaceDataCache(str(tmp_path)).get(TIMES_SQUARE)["data_quality"] == 90


def test_map_analysis_survives_unusable_cache_entry(tmp_path):
    PlaceDataCache(str(tmp_path)).put(TIMES_SQUARE, {"data_quality": 400})
    session = FakeSession(live_routes(API))
    pipeline = LocationAnalysisPipeline(
        config=InsightConfig(),
        rng=random.Random(2),
        place_collector=HerePlacesCollector(HereAPIClient("test-key", session=session), cache_dir=str(tmp_path))
    )

    result = pipeline.analyze_map("Times Square New York", TIMES_SQUARE)

    assert result.detection.here_api_called is True
    assert result.place_data.data_quality == 90


def test_injected_api_config_reaches_client_and_collector():
    api = APIConfig(
        discover_url="https://places.example.test/discover",
        revgeocode_url="https://places.example.test/revgeocode",
        browse_url="https://places.example.test/browse",
        request_timeout=3,
        user_agent="insight-test/0.1",
        max_workers=1,
    )
    config = InsightConfig(api=api)
    provider = HereMapProvider(api_key="test-key", config=config)
    provider.initialize()
    provider.client.session = FakeSession(live_routes(api))

    pipeline = LocationAnalysisPipeline(config=config, rng=random.Random(4), provider=provider)
    result = pipeline.analyze_map("Times Square New York", TIMES_SQUARE)

    calls = provider.client.session.calls
    assert sorted(call["url"] for call in calls) == sorted([api.discover_url, api.revgeocode_url, api.browse_url])
    assert {call["timeout"] for call in calls} == {3}
    assert {call["headers"]["User-Agent"] for call in calls} == {"insight-test/0.1"}
    assert pipeline.place_collector.api.max_workers == 1
    assert result.place_data.data_quality == 90
    pipeline.close()
