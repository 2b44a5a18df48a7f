"""
Per-category target object counts for both generators
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict

from .location_profile import LocationProfile


@dataclass
class MapObjectCounts:
    buildings: int
    roads: int
    trees: int
    water: int
    vehicles: int
    infrastructure: int

    def total(self) -> int:
        return sum(asdict(self).values())


@dataclass
class StreetObjectCounts:
    buildings: int
    pedestrians: int
    vehicles: int
    infrastructure: int
    vegetation: int

    def total(self) -> int:
        return sum(asdict(self).values())


def calculate_map_object_counts(profile: LocationProfile) -> MapObjectCounts:
    """
    Heuristic object counts for the aerial pass

    With a place list, counts scale with how many places look like buildings,
    transport or nature, bounded below by the urban/rural defaults. Without
    one, the defaults alone are used. Density, commercial and park
    multipliers are applied last, and every count is floored to at least 1.
    """
    urban = profile.is_urban
    water_present = profile.is_coastal or profile.near_water

    if profile.has_place_list:
        places = profile.places
        building_like = sum(
            1 for p in places
            if p.category_id_contains("building", "accommodation", "shopping", "business")
        )
        transport = sum(
            1 for p in places
            if p.category_id_contains("transport", "parking") or p.category_name_contains("road", "street")
        )
        natural = sum(
            1 for p in places
            if p.category_id_contains("natural", "park") or p.category_name_contains("park", "garden")
        )

        counts: Dict[str, float] = {
            "buildings": max(building_like * 3, 40 if urban else 12),
            "roads": max(transport * 2, 20 if urban else 6),
            "trees": max(natural * 8, 25 if urban else 60),
            "water": max(2, natural) if water_present else 0,
            "vehicles": max(transport * 4, 30 if urban else 5),
            "infrastructure": max(len(places) / 5, 12 if urban else 4),
        }
    else:
        counts = {
            "buildings": 45 if urban else 15,
            "roads": 25 if urban else 8,
            "trees": 30 if urban else 70,
            "water": 3 if water_present else 0,
            "vehicles": 35 if urban else 8,
            "infrastructure": 15 if urban else 5,
        }

    if profile.is_dense:
        counts["buildings"] *= 1.4
        counts["vehicles"] *= 1.6
        counts["infrastructure"] *= 1.3

    if profile.is_commercial:
        counts["buildings"] *= 1.2
        counts["vehicles"] *= 1.4

    if profile.has_parks:
        counts["trees"] *= 1.8
        counts["water"] *= 1.3

    return MapObjectCounts(**{key: max(1, math.floor(value)) for key, value in counts.items()})


def calculate_street_object_counts(profile: LocationProfile, heading: float, pitch: float) -> StreetObjectCounts:
    """
    Visible object counts for one street-view frame

    Looking up (pitch > 0) shows more building and less street level; the
    heading adds a deterministic sinusoidal jitter of up to +/-20%.
    """
    urban = profile.is_urban
    commercial = profile.is_commercial

    counts = {
        "buildings": 5 if urban else 3,
        "pedestrians": (10 if commercial else 6) if urban else 2,
        "vehicles": (8 if commercial else 4) if urban else 3,
        "infrastructure": 7 if urban else 4,
        "vegetation": 4 if urban else 8,
    }

    pitch_factor = (pitch + 90) / 180
    counts["buildings"] = math.floor(counts["buildings"] * (0.5 + pitch_factor))
    counts["pedestrians"] = math.floor(counts["pedestrians"] * (1.5 - pitch_factor))
    counts["vehicles"] = math.floor(counts["vehicles"] * (1.2 - pitch_factor * 0.4))

    heading_factor = (math.sin(heading / 180 * math.pi) + 1) / 2
    for key, value in counts.items():
        variance = value * 0.4
        counts[key] = max(0, value + math.floor((heading_factor - 0.5) * variance))

    return StreetObjectCounts(**counts)
