"""
Scalar scores for the map analysis
"""

import math
import random
from typing import Optional, Tuple

from ..collectors.here import HereResponseParser
from ..models import PlaceDataBundle
from .location_profile import LocationProfile
from .sampling import clamp


def calculate_population_estimate(profile: LocationProfile, rng: random.Random) -> int:
    base = 200000 if profile.is_urban else 50000
    if profile.is_dense:
        base *= 1.5
    if profile.is_commercial:
        base *= 1.3
    return math.floor(base + rng.random() * 100000)


def calculate_air_quality_index(
    profile: LocationProfile,
    rng: random.Random,
    bounds: Tuple[int, int] = (20, 150)
) -> int:
    """Urban base 80 (rural 40), parks -15, water -10, density +20, plus up to 30 noise"""
    aqi = 80 if profile.is_urban else 40
    if profile.has_parks:
        aqi -= 15
    if profile.near_water:
        aqi -= 10
    if profile.is_dense:
        aqi += 20
    low, high = bounds
    return int(clamp(math.floor(aqi + rng.random() * 30), low, high))


def calculate_development_level(building_count: int, infrastructure_count: int) -> str:
    score = building_count + infrastructure_count * 2
    if score > 80:
        return "high"
    if score > 40:
        return "medium"
    return "low"


def calculate_infrastructure_score(total_objects: int, cap: int = 95) -> int:
    return int(clamp(total_objects + 60, 0, min(cap, 100)))


def calculate_environmental_score(tree_count: int, total_objects: int, floor: int = 30) -> int:
    if total_objects <= 0:
        return floor
    return int(clamp(math.floor(tree_count / total_objects * 100), floor, 100))


def calculate_overall_confidence(place_data: Optional[PlaceDataBundle], profile: LocationProfile) -> float:
    """Detection-level confidence, 0.8 base, capped at 0.95"""
    confidence = 0.8
    if place_data is not None:
        if HereResponseParser.item_count(place_data.places) > 15:
            confidence += 0.08
        if HereResponseParser.item_count(place_data.geocode) > 0:
            confidence += 0.05
        if not place_data.error:
            confidence += 0.05
    if profile.is_urban:
        confidence += 0.03
    if profile.is_dense:
        confidence += 0.02
    return min(0.95, confidence)
