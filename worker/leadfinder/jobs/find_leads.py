"""Lead acquisition pipeline and its CLI entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Protocol, Tuple

from leadfinder.core.config import Settings, get_settings
from leadfinder.core.errors import (
    CredentialMissingError,
    ErrorKind,
    InvalidQueryError,
    LeadSearchError,
    as_lead_search_error,
)
from leadfinder.core.geo import annotate_distances
from leadfinder.core.models import MAX_RADIUS_KM, MIN_RADIUS_KM, Coordinates, Lead, SearchQuery
from leadfinder.core.retry import with_retry
from leadfinder.etl.extract import extract_candidates
from leadfinder.etl.normalize import NormalizerRules, normalize_candidates
from leadfinder.etl.validators import CONTACT_RULES, GENERAL_RULES
from leadfinder.vendors.grounded_search import GroundedSearchClient

logger = logging.getLogger(__name__)

LEAD_FIELDS = ("name", "address", "phone", "website", "email", "rating", "reviews_count", "lat", "lng", "owner")

_EXAMPLE = """[
  {
    "name": "Business Name",
    "address": "123 Street, City",
    "phone": "+91 98765 43210",
    "website": "example.com",
    "email": "info@example.com",
    "rating": 4.5,
    "reviews_count": 120,
    "lat": 28.6139,
    "lng": 77.2090,
    "owner": "Owner Name"
  }
]"""


class SearchClient(Protocol):
    async def generate(self, prompt: str, system_instruction: str) -> str: ...


def validate_query(query: SearchQuery) -> None:
    """Fail fast on queries that should never reach the upstream service."""
    if not query.city or not query.city.strip():
        raise InvalidQueryError("A city is required.")
    if not query.categories:
        raise InvalidQueryError("At least one category is required.")

    seen = set()
    for category in query.categories:
        key = (category or "").strip().lower()
        if not key:
            raise InvalidQueryError("Categories must not be blank.")
        if key in seen:
            raise InvalidQueryError(f"Duplicate category: {category.strip()}")
        seen.add(key)

    if not MIN_RADIUS_KM <= query.radius_km <= MAX_RADIUS_KM:
        raise InvalidQueryError(f"Radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM} km.")


def build_prompt(query: SearchQuery, settings: Settings) -> Tuple[str, str]:
    """Return ``(system_instruction, prompt)`` for a validated query."""
    city = query.city.strip()
    categories = ", ".join(category.strip() for category in query.categories)
    location = f"{city}, {settings.country}" if settings.country else city

    system_instruction = (
        "You are a professional business lead generator.\n"
        f'Search for real businesses in "{location}" matching "{categories}".\n'
        "Use the googleSearch tool to verify their existence and contact details.\n"
        "You MUST provide your response strictly as a JSON array of objects."
    )
    fields = ", ".join(f'"{name}"' for name in LEAD_FIELDS)
    prompt = (
        f'Find up to {settings.max_results} verified leads for "{categories}" in "{city}" '
        f"within {query.radius_km:g} km of the city centre.\n"
        f"Return ONLY a valid JSON array. Each object must have: \n{fields}.\n\n"
        f"Example format:\n{_EXAMPLE}"
    )
    return system_instruction, prompt


def _normalizer_rules(settings: Settings) -> NormalizerRules:
    return NormalizerRules(
        contact=replace(CONTACT_RULES, min_length=settings.contact_min_length),
        general=replace(GENERAL_RULES, min_length=settings.general_min_length),
    )


def _default_client(settings: Settings) -> SearchClient:
    return GroundedSearchClient(api_key=settings.gemini_api_key, model=settings.model)


async def find_leads(
    query: SearchQuery,
    reference: Optional[Coordinates] = None,
    *,
    client: Optional[SearchClient] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> List[Lead]:
    """Full pipeline: query the grounded search, extract, normalize, annotate.

    Returns an empty list when the search found nothing. Every failure is
    raised as a ``LeadSearchError`` subclass carrying its classified kind.
    """
    settings = settings or get_settings()
    validate_query(query)
    if not settings.has_credential:
        raise CredentialMissingError()

    system_instruction, prompt = build_prompt(query, settings)
    logger.info("Starting lead search city=%s categories=%s", query.city, ", ".join(query.categories))

    try:
        search_client = client or _default_client(settings)
        raw_text = await with_retry(
            lambda: search_client.generate(prompt, system_instruction),
            max_attempts=settings.retry_attempts,
            initial_delay=settings.retry_delay,
            jitter=settings.retry_jitter,
        )
    except LeadSearchError:
        raise
    except Exception as exc:
        error = as_lead_search_error(exc)
        logger.error("Lead search failed (%s): %s", error.kind.value, exc)
        raise error from exc

    candidates = extract_candidates(raw_text)
    leads = normalize_candidates(candidates, now or datetime.now(timezone.utc), rules=_normalizer_rules(settings))
    leads = annotate_distances(leads, reference)

    logger.info("Lead search finished with %d leads", len(leads))
    return leads


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find business leads with grounded search")
    parser.add_argument("--city", dest="city", required=True, help="City to search in")
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        required=True,
        help="Business category; repeat for several",
    )
    parser.add_argument("--radius", dest="radius_km", type=float, default=25, help="Search radius in km")
    parser.add_argument("--lat", dest="lat", type=float, help="Reference latitude for distances")
    parser.add_argument("--lng", dest="lng", type=float, help="Reference longitude for distances")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    query = SearchQuery(city=args.city, categories=args.categories, radius_km=args.radius_km)
    reference = None
    if args.lat is not None and args.lng is not None:
        reference = Coordinates(args.lat, args.lng)

    try:
        leads = asyncio.run(find_leads(query, reference))
    except LeadSearchError as exc:
        logger.error("%s: %s", exc.kind.value, exc)
        code = 2 if exc.kind in (ErrorKind.CREDENTIAL_MISSING, ErrorKind.INVALID_QUERY) else 1
        raise SystemExit(code) from exc

    print(json.dumps([lead.to_dict() for lead in leads], ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
