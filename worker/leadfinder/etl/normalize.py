"""Turn untrusted raw candidates into canonical ``Lead`` records."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

from leadfinder.core.models import Lead, RawCandidate

from .validators import CONTACT_RULES, GENERAL_RULES, FieldRules, is_phone_valid, is_valid, phone_digits

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Business"
DEFAULT_ADDRESS = "Address not found"
LEAD_SOURCE = "grounded-search"
MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="

# Digit runs the model copies from sample data instead of real numbers.
PLACEHOLDER_PHONE_SEQUENCES = ("1234567890", "9876543210")
PLACEHOLDER_MARKERS = ("example",)

_REVIEW_COUNT_KEYS = ("reviewCount", "reviews_count", "reviews", "userRatingsTotal")
_LAT_KEYS = ("lat", "latitude")
_LNG_KEYS = ("lng", "lon", "longitude")
_MAPS_URL_KEYS = ("mapsUrl", "maps_url")

# First number in text such as "1,234 reviews", "120.0" or "1.2K".
_COUNT_TOKEN = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([km]?)(?![a-z])", re.IGNORECASE)
_COUNT_SUFFIXES = {"k": 1_000, "m": 1_000_000}


@dataclass(frozen=True)
class NormalizerRules:
    """Validation thresholds; contact fields are held to the stricter set."""

    contact: FieldRules = CONTACT_RULES
    general: FieldRules = GENERAL_RULES


def _first(raw: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _strip_or_none(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)

    if isinstance(value, str):
        match = _COUNT_TOKEN.search(value)
        if match:
            number = float(match.group(1).replace(",", ""))
            return int(round(number * _COUNT_SUFFIXES.get(match.group(2).lower(), 1)))
    return None


def _coordinates(raw: Mapping[str, Any]) -> Tuple[float, float, bool]:
    lat = _safe_float(_first(raw, _LAT_KEYS))
    lng = _safe_float(_first(raw, _LNG_KEYS))
    known = lat is not None and lng is not None and -90 <= lat <= 90 and -180 <= lng <= 180
    return (lat or 0.0), (lng or 0.0), known


def _rating(value: Any) -> Optional[float]:
    rating = _safe_float(value)
    if rating is None or not 0 <= rating <= 5:
        return None
    return rating


def _review_count(value: Any) -> Optional[int]:
    count = _safe_int(value)
    if count is None or count < 0:
        return None
    return count


def _has_placeholder_marker(value: str) -> bool:
    lowered = value.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def clean_phone(value: Any, rules: FieldRules = CONTACT_RULES) -> Optional[str]:
    phone = _strip_or_none(value)
    if phone is None or not is_phone_valid(phone, rules):
        return None
    digits = phone_digits(phone)
    if any(sequence in digits for sequence in PLACEHOLDER_PHONE_SEQUENCES):
        return None
    return phone


def clean_email(value: Any, rules: FieldRules = CONTACT_RULES) -> Optional[str]:
    email = _strip_or_none(value)
    if email is None or not is_valid(email, rules):
        return None
    if "@" not in email or _has_placeholder_marker(email):
        return None
    return email


def clean_website(value: Any, rules: FieldRules = CONTACT_RULES) -> Optional[str]:
    website = _strip_or_none(value)
    if website is None or not is_valid(website, rules) or _has_placeholder_marker(website):
        return None
    return website


def clean_text(value: Any, rules: FieldRules = GENERAL_RULES) -> Optional[str]:
    text = _strip_or_none(value)
    if text is None or not is_valid(text, rules):
        return None
    return text


def build_maps_url(name: str, address: str) -> str:
    """Deterministic Google Maps search link for a business."""
    return MAPS_SEARCH_URL + quote(f"{name} {address}", safe="-_.!~*'()")


def _maps_url(raw: Mapping[str, Any], name: str, address: str, rules: FieldRules) -> str:
    supplied = clean_text(_first(raw, _MAPS_URL_KEYS), rules)
    if supplied and supplied.lower().startswith(("http://", "https://")):
        return supplied
    return build_maps_url(name, address)


def normalize_candidate(
    raw: Any,
    *,
    lead_id: str,
    last_updated: str,
    rules: NormalizerRules = NormalizerRules(),
) -> Lead:
    """Normalize a single raw candidate; never raises on bad field data."""
    if not isinstance(raw, Mapping):
        logger.debug("Candidate %s is not an object (%s); using placeholders", lead_id, type(raw).__name__)
        raw = {}

    name = _strip_or_none(raw.get("name")) or DEFAULT_NAME
    address = _strip_or_none(raw.get("address")) or DEFAULT_ADDRESS
    lat, lng, known = _coordinates(raw)

    return Lead(
        id=lead_id,
        name=name,
        address=address,
        lat=lat,
        lng=lng,
        coordinates_known=known,
        phone=clean_phone(raw.get("phone"), rules.contact),
        email=clean_email(raw.get("email"), rules.contact),
        website=clean_website(raw.get("website"), rules.contact),
        owner=clean_text(raw.get("owner"), rules.general),
        rating=_rating(raw.get("rating")),
        review_count=_review_count(_first(raw, _REVIEW_COUNT_KEYS)),
        distance_km=None,
        source=LEAD_SOURCE,
        maps_url=_maps_url(raw, name, address, rules.general),
        last_updated=last_updated,
        raw_snapshot=dict(raw),
    )


def normalize_candidates(
    candidates: Iterable[RawCandidate],
    batch_timestamp: Optional[datetime] = None,
    *,
    rules: NormalizerRules = NormalizerRules(),
) -> List[Lead]:
    """Normalize a batch in input order, one ``Lead`` per candidate.

    Ids combine the batch timestamp (milliseconds) with the position in the
    batch, so they are unique within the batch.
    """
    stamp = batch_timestamp or datetime.now(timezone.utc)
    stamp_ms = int(stamp.timestamp() * 1000)
    last_updated = stamp.date().isoformat()

    leads = [
        normalize_candidate(raw, lead_id=f"lead-{stamp_ms}-{index}", last_updated=last_updated, rules=rules)
        for index, raw in enumerate(candidates)
    ]
    dropped_phones = sum(1 for lead in leads if lead.phone is None)
    logger.info("Normalized %d leads (%d without a usable phone)", len(leads), dropped_phones)
    return leads
