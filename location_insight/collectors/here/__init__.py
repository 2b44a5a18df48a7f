"""
HERE search data collection module

Components:
- API client: HERE discover / revgeocode / browse / geocode endpoints
- Models: Data structures (PlaceItem, PlaceCategory, PlaceAddress)
- Parser: Response parsing
- Cache: Caching functionality
- Collector: Parallel fetch into a PlaceDataBundle
"""

from .models import PlaceItem, PlaceCategory, PlaceAddress
from .api_client import HereAPIClient, GeocodingError
from .parser import HereResponseParser
from .collector import HerePlacesCollector, calculate_data_quality

__all__ = [
    "PlaceItem",
    "PlaceCategory",
    "PlaceAddress",
    "HereAPIClient",
    "GeocodingError",
    "HereResponseParser",
    "HerePlacesCollector",
    "calculate_data_quality",
]
