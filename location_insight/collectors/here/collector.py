"""
Main place data collector

Fetches the three HERE sources for a location in parallel and folds them
into a single PlaceDataBundle
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, Optional, Tuple
from loguru import logger
from pydantic import ValidationError

from .api_client import HereAPIClient
from .cache import PlaceDataCache
from .parser import HereResponseParser
from ...config import APIConfig, get_config
from ...models import PlaceDataBundle


def calculate_data_quality(
    places: Optional[Dict[str, Any]],
    geocode: Optional[Dict[str, Any]],
    browse: Optional[Dict[str, Any]]
) -> int:
    """
    Score 0-100 for how much supplementary data is available

    +40 places, +30 reverse geocode, +20 browse (each only when non-empty),
    +10 bonus when the places list has more than 20 entries.
    """
    places_count = HereResponseParser.item_count(places)
    score = 0
    if places_count > 0:
        score += 40
    if HereResponseParser.item_count(geocode) > 0:
        score += 30
    if HereResponseParser.item_count(browse) > 0:
        score += 20
    if places_count > 20:
        score += 10
    return min(100, score)


class HerePlacesCollector:
    """
    Collect supplementary place data from the HERE search APIs

    The discover, revgeocode and browse requests are independent, so they run
    concurrently. Any of them may fail; the bundle then carries None for that
    source and a lower data quality score.

    Supports caching to disk for debugging and reuse.
    """

    def __init__(
        self,
        api_client: Optional[HereAPIClient] = None,
        cache_dir: Optional[str] = None,
        cache_max_age_hours: Optional[float] = 24.0,
        api_config: Optional[APIConfig] = None
    ):
        self.api = api_config or get_config().api
        self.api_client = api_client
        self.cache = PlaceDataCache(cache_dir, max_age_hours=cache_max_age_hours)

    def fetch_place_data(self, coordinates: Tuple[float, float], location: str) -> PlaceDataBundle:
        """
        Fetch places, reverse geocode and browse data around a point

        Args:
            coordinates: (lat, lng) of the location
            location: Free-text location name (carried into the bundle)

        Returns:
            PlaceDataBundle; never raises for network problems
        """
        if self.api_client is None:
            logger.warning("HERE API client not configured - continuing without place data")
            return PlaceDataBundle(
                coordinates=coordinates,
                location=location,
                data_quality=0,
                error="HERE API key not configured"
            )

        cached = self.cache.get(coordinates)
        if cached:
            try:
                return PlaceDataBundle(**{**cached, "coordinates": coordinates, "location": location})
            except (ValidationError, TypeError) as e:
                logger.warning(f"Ignoring unusable cache entry for {coordinates}: {e}")

        logger.info(f"Fetching HERE place data for {location} ({coordinates[0]}, {coordinates[1]})")

        with ThreadPoolExecutor(max_workers=self.api.max_workers) as pool:
            places_future = pool.submit(self.api_client.discover, coordinates)
            geocode_future = pool.submit(self.api_client.reverse_geocode, coordinates)
            browse_future = pool.submit(self.api_client.browse, coordinates)

            places = self._result_or_none(places_future, "Places")
            geocode = self._result_or_none(geocode_future, "Geocode")
            browse = self._result_or_none(browse_future, "Browse")

        bundle = PlaceDataBundle(
            places=places,
            geocode=geocode,
            browse=browse,
            coordinates=coordinates,
            location=location,
            data_quality=calculate_data_quality(places, geocode, browse)
        )

        logger.info(f"Place data quality score: {bundle.data_quality}/100 "
                    f"({HereResponseParser.item_count(places)} places, "
                    f"{HereResponseParser.item_count(geocode)} addresses, "
                    f"{HereResponseParser.item_count(browse)} browse results)")

        if bundle.any_source:
            self.cache.put(coordinates, bundle.model_dump(exclude={"coordinates", "location"}))

        return bundle

    @staticmethod
    def _result_or_none(future, source: str) -> Optional[Dict[str, Any]]:
        """The client already swallows transport errors; anything else is logged and dropped here"""
        try:
            return future.result()
        except Exception as e:
            logger.warning(f"{source} API failed: {e}")
            return None
