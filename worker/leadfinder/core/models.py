"""Core data models shared by the lead acquisition pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

MIN_RADIUS_KM = 5
MAX_RADIUS_KM = 100

# Loosely-typed record parsed from upstream text; nothing in it is trusted.
RawCandidate = Dict[str, Any]


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class SearchQuery:
    """A submitted search; categories keep the order the user picked them in."""

    city: str
    categories: Tuple[str, ...]
    radius_km: float = 25

    def __post_init__(self) -> None:
        # Accept any iterable of categories but store an immutable tuple.
        object.__setattr__(self, "categories", tuple(self.categories))


@dataclass(frozen=True, slots=True)
class Lead:
    """Normalized business record handed to the presentation layer."""

    id: str
    name: str
    address: str
    lat: float
    lng: float
    maps_url: str
    last_updated: str
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    owner: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    distance_km: Optional[float] = None
    coordinates_known: bool = False
    source: str = "grounded-search"
    raw_snapshot: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if not self.coordinates_known:
            return None
        return Coordinates(self.lat, self.lng)

    def with_distance(self, distance_km: Optional[float]) -> "Lead":
        return replace(self, distance_km=distance_km)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "owner": self.owner,
            "lat": self.lat,
            "lng": self.lng,
            "coordinatesKnown": self.coordinates_known,
            "distanceKm": self.distance_km,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "source": self.source,
            "mapsUrl": self.maps_url,
            "lastUpdated": self.last_updated,
        }
