"""
Tests for the map (aerial) analysis generator
"""

import random

import pytest

from conftest import FakeResponse, FakeSession, TIMES_SQUARE, place
from location_insight.config import InsightConfig, get_config
from location_insight.collectors.here import HereAPIClient, HerePlacesCollector
from location_insight.pipeline import LocationAnalysisPipeline, AnalysisError
from location_insight.analysis import (
    LocationProfile, calculate_map_object_counts, create_spatial_grid, profile_location,
)
from location_insight.analysis.object_counts import MapObjectCounts
from location_insight.analysis.map_detection import URBAN_INFRASTRUCTURE, RURAL_INFRASTRUCTURE
from location_insight.analysis.map_scoring import (
    calculate_air_quality_index, calculate_development_level, calculate_environmental_score,
    calculate_infrastructure_score, calculate_overall_confidence,
)


API = get_config().api
CATEGORIES = ("buildings", "roads", "trees", "water", "vehicles", "infrastructure")


class FixedRandom(random.Random):
    """random() always returns the same draw"""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class ExplodingCollector:
    def fetch_place_data(self, coordinates, location):
        raise RuntimeError("collector crashed")


def unreachable_pipeline(seed=1):
    client = HereAPIClient("test-key", session=FakeSession())
    return LocationAnalysisPipeline(
        config=InsightConfig(),
        rng=random.Random(seed),
        place_collector=HerePlacesCollector(client)
    )


def rich_session():
    places = [place(f"Tower {i}", [("shopping-mall", "Shopping Mall")]) for i in range(24)]
    places += [
        place("Hudson River Greenway", [("natural-geographical", "River")]),
        place("Bryant Park", [("park-recreation", "Park")]),
        place("Penn Station", [("transport-rail", "Train Station")]),
        place("Hotel Edison", [("accommodation-hotel", "Hotel")]),
        place("Lake Pavilion"),
        place("42nd Street Garage", [("parking-garage", "Parking")]),
    ]
    address = {
        "title": "W 34th St, New York",
        "address": {"label": "W 34th St", "city": "New York", "street": "W 34th St", "postalCode": "10001"},
    }
    return FakeSession({
        API.discover_url: FakeResponse({"items": places}),
        API.revgeocode_url: FakeResponse({"items": [address]}),
        API.browse_url: FakeResponse({"items": places[:10]}),
    })


def test_times_square_with_api_unreachable():
    result = unreachable_pipeline().analyze_map("Times Square New York", TIMES_SQUARE)

    assert result.detection.here_api_called is False
    assert result.place_data.data_quality == 0
    # Heuristic minimums for an urban location without a place list
    detection = result.detection
    assert len(detection.buildings) == 45
    assert len(detection.roads) == 25
    assert len(detection.trees) == 30
    assert len(detection.water) == 1
    assert len(detection.vehicles) == 35
    assert len(detection.infrastructure) == 15
    assert all(obj.subtype in RURAL_INFRASTRUCTURE for obj in detection.infrastructure)


def test_total_objects_is_sum_of_categories(offline_pipeline):
    for location in ("Times Square New York", "Quiet Farm Road", ""):
        result = offline_pipeline.analyze_map(location, (51.5, -0.12))
        expected = sum(len(getattr(result.detection, name)) for name in CATEGORIES)
        assert result.detection.total_objects == expected


@pytest.mark.parametrize("seed", range(5))
def test_confidence_bands(seed):
    result = unreachable_pipeline(seed).analyze_map("Downtown Market", TIMES_SQUARE)

    for name in CATEGORIES:
        for obj in getattr(result.detection, name):
            assert 0.65 <= obj.confidence <= 0.98
    assert result.detection.buildings


def test_every_category_floored_to_one():
    counts = calculate_map_object_counts(LocationProfile(latitude=0.0, longitude=0.0))
    assert counts == MapObjectCounts(buildings=15, roads=8, trees=70, water=1, vehicles=8, infrastructure=5)

    empty_list = LocationProfile(latitude=0.0, longitude=0.0, has_place_list=True)
    assert calculate_map_object_counts(empty_list) == MapObjectCounts(
        buildings=12, roads=6, trees=60, water=1, vehicles=5, infrastructure=4
    )


def test_density_and_commercial_multipliers():
    profile = LocationProfile(latitude=0.0, longitude=0.0, is_urban=True, is_dense=True, is_commercial=True)
    counts = calculate_map_object_counts(profile)

    assert counts.buildings == 75
    assert counts.vehicles == 78
    assert counts.infrastructure == 19
    assert counts.roads == 25


def test_rich_place_data():
    client = HereAPIClient("test-key", session=rich_session())
    pipeline = LocationAnalysisPipeline(
        config=InsightConfig(),
        rng=random.Random(3),
        place_collector=HerePlacesCollector(client)
    )

    result = pipeline.analyze_map("Hudson Yards Manhattan", (40.7536, -74.0014))

    assert result.detection.here_api_called is True
    assert result.place_data.data_quality == 100
    assert result.detection.confidence == pytest.approx(0.95)
    assert all(obj.subtype in URBAN_INFRASTRUCTURE for obj in result.detection.infrastructure)
    assert {obj.subtype for obj in result.detection.water} == {"river"}
    assert len(result.water_bodies) == len(result.detection.water)


def test_profile_from_place_data():
    client = HereAPIClient("test-key", session=rich_session())
    bundle = HerePlacesCollector(client).fetch_place_data((40.7536, -74.0014), "Somewhere")

    profile = profile_location("Somewhere", (40.7536, -74.0014), bundle)

    # No urban keyword, but the reverse-geocoded address has city + street + postcode
    assert profile.is_urban
    assert profile.is_dense
    assert profile.has_parks
    assert profile.near_water
    assert profile.is_coastal
    assert not profile.is_commercial


def test_development_level_boundaries():
    assert calculate_development_level(40, 0) == "low"
    assert calculate_development_level(41, 0) == "medium"
    assert calculate_development_level(80, 0) == "medium"
    assert calculate_development_level(81, 0) == "high"
    assert calculate_development_level(1, 40) == "high"


def test_air_quality_clamped():
    clean = LocationProfile(latitude=0.0, longitude=0.0, has_parks=True, near_water=True)
    assert calculate_air_quality_index(clean, FixedRandom(0.0)) == 20

    smoggy = LocationProfile(latitude=0.0, longitude=0.0, is_urban=True, is_dense=True)
    assert calculate_air_quality_index(smoggy, FixedRandom(0.999), bounds=(20, 100)) == 100

    for seed in range(50):
        assert 20 <= calculate_air_quality_index(smoggy, random.Random(seed)) <= 150


def test_scores():
    assert calculate_infrastructure_score(10) == 70
    assert calculate_infrastructure_score(500) == 95
    assert calculate_environmental_score(0, 100) == 30
    assert calculate_environmental_score(60, 100) == 60
    assert calculate_environmental_score(5, 0) == 30

    urban = LocationProfile(latitude=0.0, longitude=0.0, is_urban=True)
    assert calculate_overall_confidence(None, urban) == pytest.approx(0.83)


def test_spatial_grid():
    grid = create_spatial_grid(TIMES_SQUARE, 0.005)

    assert len(grid) == 121
    assert grid[60] == TIMES_SQUARE
    assert grid[0] == pytest.approx((TIMES_SQUARE[0] - 0.025, TIMES_SQUARE[1] - 0.025))


def test_seeded_runs_are_reproducible(offline_config):
    first = LocationAnalysisPipeline(config=offline_config, rng=random.Random(42))
    second = LocationAnalysisPipeline(config=offline_config, rng=random.Random(42))

    a = first.analyze_map("Brooklyn Heights", (40.6959, -73.9956))
    b = second.analyze_map("Brooklyn Heights", (40.6959, -73.9956))

    assert a.analysis == b.analysis
    for name in CATEGORIES:
        assert getattr(a.detection, name) == getattr(b.detection, name)


def test_building_properties_match_subtype(offline_pipeline):
    result = offline_pipeline.analyze_map("Downtown", TIMES_SQUARE)

    for building in result.detection.buildings:
        assert building.properties.kind == "building"
        assert building.properties.building_type == building.subtype
        assert building.properties.floors >= 1
    for summary, obj in zip(result.buildings, result.detection.buildings):
        assert summary.id == obj.id
        assert summary.area == pytest.approx(obj.bounding_box.area)


def test_invalid_coordinates_rejected(offline_pipeline):
    with pytest.raises(ValueError):
        offline_pipeline.analyze_map("Nowhere", (91.0, 0.0))
    with pytest.raises(ValueError):
        offline_pipeline.analyze_map("Nowhere", (0.0, float("nan")))
    with pytest.raises(ValueError):
        offline_pipeline.analyze_map("Nowhere", "40.7,-73.9")


def test_synthesis_failure_raises_analysis_error():
    pipeline = LocationAnalysisPipeline(
        config=InsightConfig(),
        rng=random.Random(1),
        place_collector=ExplodingCollector()
    )

    with pytest.raises(AnalysisError, match="collector crashed"):
        pipeline.analyze_map("Times Square New York", TIMES_SQUARE)


def test_save_writes_json(tmp_path, offline_pipeline):
    result = offline_pipeline.analyze_map("Times Square New York", TIMES_SQUARE)

    path = offline_pipeline.save(result, str(tmp_path / "out" / "ts.json"))

    text = (tmp_path / "out" / "ts.json").read_text(encoding="utf-8")
    assert path.endswith("ts.json")
    assert '"development_level"' in text
