"""
Tests for the location report
"""

import random

from conftest import TIMES_SQUARE
from location_insight.analysis import build_location_report
from location_insight.analysis.report import air_quality_rating


def test_air_quality_rating_bands():
    assert air_quality_rating(20) == "Good"
    assert air_quality_rating(50) == "Good"
    assert air_quality_rating(51) == "Moderate"
    assert air_quality_rating(100) == "Moderate"
    assert air_quality_rating(150) == "Unhealthy for Sensitive Groups"
    assert air_quality_rating(151) == "Unhealthy"


def test_report_agrees_with_analysis(offline_pipeline):
    result = offline_pipeline.analyze_map("Times Square New York", TIMES_SQUARE)

    report = offline_pipeline.build_report(result)

    assert report.location == "Times Square New York"
    assert report.population.total == result.analysis.population_estimate
    assert report.air_quality.index == result.analysis.air_quality_index
    assert report.air_quality.rating == air_quality_rating(result.analysis.air_quality_index)
    roads = report.road_development
    assert roads.total_roads == len(result.roads)
    assert roads.main_roads + roads.local_roads == roads.total_roads
    assert 0 <= roads.congestion_level <= 100


def test_report_is_seeded(offline_pipeline):
    result = offline_pipeline.analyze_map("Quiet Village", (52.0, 1.0))

    first = build_location_report(result, random.Random(9))
    second = build_location_report(result, random.Random(9))
    assert first == second
