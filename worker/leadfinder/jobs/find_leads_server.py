"""HTTP entrypoint that runs lead searches for the presentation layer."""

from __future__ import annotations

import asyncio
import logging
import math
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from leadfinder.core.config import get_settings
from leadfinder.core.errors import ErrorKind
from leadfinder.core.models import Coordinates, SearchQuery
from leadfinder.jobs.session import run_search

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

_STATUS_BY_KIND = {
    ErrorKind.INVALID_QUERY: 400,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.PARSE: 502,
    ErrorKind.TRANSPORT: 502,
    ErrorKind.CREDENTIAL_MISSING: 503,
}

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, no upstream call."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "credential_configured": settings.has_credential,
                "model": settings.model,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/leads")
def search_leads() -> Any:
    """
    Run a lead search synchronously.
    Required JSON fields: city, categories (list of strings)
    Optional: radius_km (number), lat/lng (reference point), generation (int)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    city = payload.get("city")
    categories = payload.get("categories")
    if not isinstance(city, str) or not isinstance(categories, list):
        return _error(ErrorKind.INVALID_QUERY, "city (string) and categories (list) are required")
    if not all(isinstance(category, str) for category in categories):
        return _error(ErrorKind.INVALID_QUERY, "categories must be strings")

    try:
        radius_km = float(payload.get("radius_km", 25))
    except (TypeError, ValueError):
        return _error(ErrorKind.INVALID_QUERY, "radius_km must be numeric")

    try:
        reference = _parse_reference(payload)
    except (TypeError, ValueError):
        return _error(ErrorKind.INVALID_QUERY, "lat and lng must be finite coordinates")

    try:
        generation = int(payload.get("generation", 0))
    except (TypeError, ValueError):
        return _error(ErrorKind.INVALID_QUERY, "generation must be an integer")

    query = SearchQuery(city=city, categories=categories, radius_km=radius_km)
    logger.info("Lead search request city=%s categories=%s generation=%s", city, categories, generation)
    outcome = asyncio.run(run_search(query, generation, reference))

    if not outcome.ok:
        return _error(outcome.error_kind, outcome.message, generation=generation)

    return jsonify({"data": outcome.to_dict()}), 200


# ---------- Internals ----------


def _parse_reference(payload: Dict[str, Any]) -> Optional[Coordinates]:
    if payload.get("lat") is None or payload.get("lng") is None:
        return None
    lat = float(payload["lat"])
    lng = float(payload["lng"])
    if not (math.isfinite(lat) and math.isfinite(lng)) or abs(lat) > 90 or abs(lng) > 180:
        raise ValueError("reference point out of range")
    return Coordinates(lat, lng)


def _error(kind: ErrorKind, message: Optional[str], generation: Optional[int] = None) -> Any:
    body: Dict[str, Any] = {"error": {"kind": kind.value, "message": message}}
    if generation is not None:
        body["error"]["generation"] = generation
    return jsonify(body), _STATUS_BY_KIND[kind]


def main() -> None:
    port = int(os.getenv("PORT") or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
