"""
Data collectors for Location Insight Generator

- HerePlacesCollector: Places, reverse geocode and browse data from HERE
"""

from .here import HerePlacesCollector, HereAPIClient, GeocodingError

__all__ = [
    "HerePlacesCollector",
    "HereAPIClient",
    "GeocodingError",
]
