"""
HERE search data models

Data classes for representing place items returned by the discover/browse
and revgeocode endpoints
"""

from typing import List, Optional
from dataclasses import dataclass, field


@dataclass
class PlaceCategory:
    """A category attached to a place item"""
    id: str = ""
    name: str = ""


@dataclass
class PlaceAddress:
    """Structured address of a place item"""
    label: str = ""
    city: Optional[str] = None
    district: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None


@dataclass
class PlaceItem:
    """Represents a HERE search item (place or address)"""
    title: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    categories: List[PlaceCategory] = field(default_factory=list)
    address: Optional[PlaceAddress] = None

    def title_contains(self, *words: str) -> bool:
        title = self.title.lower()
        return any(word in title for word in words)

    def category_id_contains(self, *words: str) -> bool:
        return any(word in cat.id for cat in self.categories for word in words)

    def category_name_contains(self, *words: str) -> bool:
        return any(word in cat.name.lower() for cat in self.categories for word in words)
