"""
Scene-level labels for a street-view frame
"""

import random
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..models import StreetViewDetectedObject
from .sampling import weighted_choice


CONDITION_SCORES = {"poor": 1, "fair": 2, "good": 3, "excellent": 4}


def determine_urban_density(building_count: int, infrastructure_count: int, total_objects: int) -> str:
    if building_count >= 5 or infrastructure_count >= 6 or total_objects >= 20:
        return "high"
    if building_count >= 3 or infrastructure_count >= 4 or total_objects >= 12:
        return "medium"
    return "low"


def determine_traffic_level(vehicle_count: int) -> str:
    if vehicle_count >= 6:
        return "heavy"
    if vehicle_count >= 3:
        return "moderate"
    return "light"


def determine_pedestrian_activity(pedestrian_count: int) -> str:
    if pedestrian_count >= 8:
        return "high"
    if pedestrian_count >= 4:
        return "moderate"
    return "low"


def extract_building_types(buildings: List[StreetViewDetectedObject]) -> List[str]:
    """Distinct building subtypes in first-seen order"""
    return list(dict.fromkeys(b.subtype for b in buildings if b.subtype))


def determine_infrastructure_quality(infrastructure: List[StreetViewDetectedObject]) -> str:
    if not infrastructure:
        return "fair"

    total = sum(CONDITION_SCORES.get(item.properties.condition, 2) for item in infrastructure)
    average = total / len(infrastructure)

    if average >= 3.5:
        return "excellent"
    if average >= 2.5:
        return "good"
    if average >= 1.5:
        return "fair"
    return "poor"


def determine_time_of_day(now: Optional[datetime] = None) -> str:
    hour = (now or datetime.now()).hour
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def determine_weather_conditions(rng: random.Random, weights: Sequence[Tuple[str, float]]) -> str:
    return weighted_choice(rng, weights, "clear")
