"""Great-circle distance helpers."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from .models import Coordinates, Lead

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Compute great-circle distance between two points in kilometers."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dl = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dl / 2) ** 2
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def annotate_distances(leads: Iterable[Lead], reference: Optional[Coordinates]) -> List[Lead]:
    """Fill ``distance_km`` for leads with a known location.

    Leads without coordinates keep ``distance_km=None``; so does every lead
    when no reference point is available.
    """
    if reference is None:
        return list(leads)

    annotated: List[Lead] = []
    for lead in leads:
        position = lead.coordinates
        if position is None:
            annotated.append(lead.with_distance(None))
        else:
            annotated.append(lead.with_distance(haversine_km(reference, position)))
    return annotated
