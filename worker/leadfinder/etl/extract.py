"""Recover the JSON lead array embedded in a free-text model response."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, List, Optional

from leadfinder.core.errors import ParseError
from leadfinder.core.models import RawCandidate

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 500
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_NOTHING = object()


def _bracket_slice(text: str, opening: str, closing: str) -> Optional[str]:
    start = text.find(opening)
    end = text.rfind(closing)
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + 1]


def _candidate_blobs(text: str) -> Iterable[str]:
    """Yield substrings worth handing to ``json.loads``, most specific first."""
    array_blob = _bracket_slice(text, "[", "]")
    if array_blob is not None:
        yield array_blob
    yield text
    for match in _FENCED_BLOCK.finditer(text):
        yield match.group(1)
    # Lone object in prose; never used once an array bracket is present.
    if "[" not in text:
        object_blob = _bracket_slice(text, "{", "}")
        if object_blob is not None:
            yield object_blob


def _try_parse(blob: str) -> Any:
    try:
        return json.loads(blob)
    except (TypeError, ValueError, RecursionError):
        return _NOTHING


def _as_candidates(parsed: Any) -> Optional[List[RawCandidate]]:
    if parsed is None:
        return []
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return [parsed]
    if isinstance(parsed, str) and not parsed.strip():
        return []
    # Bare numbers, booleans and strings are not lead structures.
    return None


def extract_candidates(raw_text: Optional[str]) -> List[RawCandidate]:
    """Parse the lead array out of ``raw_text``.

    The upstream model is asked for a bare JSON array but often wraps it in
    prose or code fences. An empty response, ``null`` or ``[]`` means "no
    leads" and yields an empty list; text with no recoverable JSON raises
    ``ParseError`` with the raw text attached.
    """
    text = (raw_text or "").strip()
    if not text:
        return []

    for blob in _candidate_blobs(text):
        parsed = _try_parse(blob)
        if parsed is _NOTHING:
            continue
        candidates = _as_candidates(parsed)
        if candidates is not None:
            logger.debug("Extracted %d raw candidates", len(candidates))
            return candidates

    logger.error("Unable to locate JSON in upstream response. preview=%s", text[:_PREVIEW_CHARS])
    raise ParseError(raw_text=raw_text or "")
