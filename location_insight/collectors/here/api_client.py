"""
HERE search API client

Handles communication with the HERE search endpoints:
- Per-endpoint error tolerance (a failed source is None, not an exception)
- Forward geocoding for the location search box
"""

import requests
from typing import Dict, Any, Optional, Tuple
from loguru import logger

from ...config import APIConfig, get_config
from ...models import GeocodedLocation


class GeocodingError(RuntimeError):
    """Raised when a location search cannot be resolved"""


class HereAPIClient:
    """Client for interacting with the HERE search APIs"""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        config: Optional[APIConfig] = None
    ):
        self.api = config or get_config().api
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = self.api.request_timeout
        self.headers = {"User-Agent": self.api.user_agent}

    def get_json(self, url: str, params: Dict[str, Any], source: str = "HERE") -> Optional[Dict[str, Any]]:
        """
        Execute a single GET request and decode the JSON body

        There is no retry: callers treat a None result as missing data.

        Args:
            url: Endpoint URL
            params: Query parameters (apiKey is added here)
            source: Name used in log messages

        Returns:
            JSON response, or None if the request failed for any reason
        """
        query = dict(params)
        query["apiKey"] = self.api_key
        try:
            response = self.session.get(
                url,
                params=query,
                headers=self.headers,
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"{source} API timed out after {self.timeout}s")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.warning(f"{source} API failed: HTTP {status}")
        except requests.exceptions.RequestException as e:
            logger.warning(f"{source} API failed: {e}")
        except ValueError as e:
            logger.warning(f"{source} API returned invalid JSON: {e}")
        return None

    def discover(self, coordinates: Tuple[float, float], limit: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """Places near the coordinates (discover endpoint)"""
        lat, lng = coordinates
        return self.get_json(
            self.api.discover_url,
            {"at": f"{lat},{lng}", "limit": limit or self.api.discover_limit, "q": "places"},
            source="Places"
        )

    def reverse_geocode(self, coordinates: Tuple[float, float]) -> Optional[Dict[str, Any]]:
        """Address at the coordinates (revgeocode endpoint)"""
        lat, lng = coordinates
        return self.get_json(
            self.api.revgeocode_url,
            {"at": f"{lat},{lng}"},
            source="Geocode"
        )

    def browse(self, coordinates: Tuple[float, float], limit: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """Categorised places around the coordinates (browse endpoint)"""
        lat, lng = coordinates
        return self.get_json(
            self.api.browse_url,
            {"at": f"{lat},{lng}", "limit": limit or self.api.browse_limit},
            source="Browse"
        )

    def geocode(self, query: str) -> GeocodedLocation:
        """
        Resolve free text to the best matching location

        Args:
            query: Free-text location, e.g. "Eiffel Tower Paris"

        Returns:
            GeocodedLocation for the first match

        Raises:
            ValueError: If the query is blank
            GeocodingError: If the request fails or nothing matches
        """
        if not query or not query.strip():
            raise ValueError("Please enter a location")

        data = self.get_json(
            self.api.geocode_url,
            {"q": query.strip(), "limit": 1},
            source="Geocoding"
        )
        if data is None:
            raise GeocodingError(f"Geocoding request failed for '{query}'")

        items = data.get("items") or []
        if not items:
            raise GeocodingError(f"Location not found: '{query}'")

        item = items[0]
        position = item.get("position") or {}
        if "lat" not in position or "lng" not in position:
            raise GeocodingError(f"Geocoding result for '{query}' has no position")

        address_label = (item.get("address") or {}).get("label")
        title = item.get("title") or address_label or query.strip()
        logger.info(f"Geocoded '{query}' -> {title} ({position['lat']}, {position['lng']})")

        return GeocodedLocation(
            title=title,
            coordinates=(float(position["lat"]), float(position["lng"])),
            address_label=address_label
        )
