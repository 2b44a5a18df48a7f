"""
Location characteristics

Coarse boolean heuristics about a location, derived from keywords in the
location text and, for map analysis, from the HERE place list.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..collectors.here import HereResponseParser, PlaceItem
from ..models import PlaceDataBundle


MAP_URBAN_KEYWORDS = ["city", "downtown", "manhattan", "brooklyn", "urban", "metro", "district", "center", "square"]
STREET_URBAN_KEYWORDS = ["city", "downtown", "urban", "metro", "manhattan", "center", "square", "avenue"]

MAP_COMMERCIAL_KEYWORDS = ["mall", "shopping", "business", "commercial", "store", "market"]
STREET_COMMERCIAL_KEYWORDS = MAP_COMMERCIAL_KEYWORDS + ["plaza"]

MAP_RESIDENTIAL_KEYWORDS = ["residential", "neighborhood", "suburb", "housing", "homes"]
STREET_RESIDENTIAL_KEYWORDS = MAP_RESIDENTIAL_KEYWORDS + ["street"]


def contains_keyword(location: str, keywords: List[str]) -> bool:
    text = location.lower()
    return any(keyword in text for keyword in keywords)


@dataclass
class LocationProfile:
    """Heuristic flags for one location"""
    latitude: float
    longitude: float
    is_urban: bool = False
    is_coastal: bool = False
    is_dense: bool = False
    is_commercial: bool = False
    is_residential: bool = False
    has_parks: bool = False
    near_water: bool = False
    places: List[PlaceItem] = field(default_factory=list)
    has_place_list: bool = False  # True when the places source answered, even with 0 items


def profile_location(
    location: str,
    coordinates: Tuple[float, float],
    place_data: Optional[PlaceDataBundle] = None,
    dense_threshold: int = 15
) -> LocationProfile:
    """
    Build the map-analysis profile from keywords and place data

    Args:
        location: Free-text location name
        coordinates: (lat, lng)
        place_data: Optional HERE bundle
        dense_threshold: Number of places above which the area is dense

    Returns:
        LocationProfile
    """
    lat, lng = coordinates
    places_source = place_data.places if place_data else None
    has_place_list = bool(places_source) and isinstance(places_source.get("items"), list)
    places = HereResponseParser.parse_items(places_source)

    return LocationProfile(
        latitude=lat,
        longitude=lng,
        is_urban=_is_urban_area(location, place_data),
        is_coastal=has_place_list and _is_coastal(places),
        is_dense=has_place_list and len(places) > dense_threshold,
        is_commercial=contains_keyword(location, MAP_COMMERCIAL_KEYWORDS),
        is_residential=contains_keyword(location, MAP_RESIDENTIAL_KEYWORDS),
        has_parks=has_place_list and _has_parks(places),
        near_water=has_place_list and _has_water_features(places),
        places=places,
        has_place_list=has_place_list
    )


def profile_street_location(location: str, coordinates: Tuple[float, float]) -> LocationProfile:
    """Street-view profile: keyword matching only, no external data"""
    lat, lng = coordinates
    return LocationProfile(
        latitude=lat,
        longitude=lng,
        is_urban=contains_keyword(location, STREET_URBAN_KEYWORDS),
        is_commercial=contains_keyword(location, STREET_COMMERCIAL_KEYWORDS),
        is_residential=contains_keyword(location, STREET_RESIDENTIAL_KEYWORDS)
    )


def _is_urban_area(location: str, place_data: Optional[PlaceDataBundle]) -> bool:
    keyword_match = contains_keyword(location, MAP_URBAN_KEYWORDS)
    if keyword_match:
        return True

    # First reverse-geocode address: a city/district with street-level detail
    geocoded = HereResponseParser.parse_items(place_data.geocode if place_data else None)
    if geocoded and geocoded[0].address:
        address = geocoded[0].address
        is_city = bool(address.city or address.district)
        has_street_detail = bool(address.postal_code and address.street)
        return is_city and has_street_detail

    return False


def _is_coastal(places: List[PlaceItem]) -> bool:
    return any(
        p.category_id_contains("natural")
        or p.category_name_contains("water")
        or p.title_contains("water", "river", "lake", "beach")
        for p in places
    )


def _has_parks(places: List[PlaceItem]) -> bool:
    return any(p.title_contains("park") or p.category_name_contains("park") for p in places)


def _has_water_features(places: List[PlaceItem]) -> bool:
    return any(
        p.title_contains("water", "river", "lake") or p.category_name_contains("water")
        for p in places
    )
