"""
HERE response parser

Parses discover/browse/revgeocode responses into PlaceItem objects
"""

from typing import Dict, Any, List, Optional
from .models import PlaceItem, PlaceCategory, PlaceAddress


class HereResponseParser:
    """Parses HERE search API responses"""

    @staticmethod
    def parse_items(data: Optional[Dict[str, Any]]) -> List[PlaceItem]:
        """
        Parse the ``items`` array of a HERE response

        Missing or malformed fields are tolerated: an item without a title gets
        an empty one, categories without id/name get empty strings.

        Args:
            data: JSON response from a HERE search endpoint, or None

        Returns:
            List of PlaceItem (empty when data is None or has no items)
        """
        if not data:
            return []

        items = []
        for raw in data.get("items") or []:
            if not isinstance(raw, dict):
                continue

            categories = []
            for cat in raw.get("categories") or []:
                if isinstance(cat, dict):
                    categories.append(PlaceCategory(
                        id=str(cat.get("id") or ""),
                        name=str(cat.get("name") or "")
                    ))

            address = None
            raw_address = raw.get("address")
            if isinstance(raw_address, dict):
                address = PlaceAddress(
                    label=raw_address.get("label", ""),
                    city=raw_address.get("city"),
                    district=raw_address.get("district"),
                    street=raw_address.get("street"),
                    postal_code=raw_address.get("postalCode")
                )

            position = raw.get("position") or {}
            items.append(PlaceItem(
                title=str(raw.get("title") or ""),
                lat=position.get("lat"),
                lng=position.get("lng"),
                categories=categories,
                address=address
            ))

        return items

    @staticmethod
    def item_count(data: Optional[Dict[str, Any]]) -> int:
        """Number of entries in the ``items`` array (0 when absent)"""
        if not data:
            return 0
        items = data.get("items")
        return len(items) if isinstance(items, list) else 0
