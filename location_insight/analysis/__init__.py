"""
Analysis modules for Location Insight Generator
"""

from .location_profile import LocationProfile, profile_location, profile_street_location
from .object_counts import calculate_map_object_counts, calculate_street_object_counts
from .map_detection import MapObjectDetector, create_spatial_grid
from .street_view import StreetViewDetector
from .report import build_location_report

__all__ = [
    "LocationProfile",
    "profile_location",
    "profile_street_location",
    "calculate_map_object_counts",
    "calculate_street_object_counts",
    "MapObjectDetector",
    "create_spatial_grid",
    "StreetViewDetector",
    "build_location_report",
]
