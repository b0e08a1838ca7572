"""Heuristics that separate real contact data from placeholder noise.

Grounded search results routinely echo filler such as "N/A", "Hidden" or
"0000000000" where a field is unknown. These predicates decide whether a raw
string is worth keeping. Two rule sets exist: ``GENERAL_RULES`` for loose
fields such as owner names and map links (anything longer than one character),
and ``CONTACT_RULES`` for phone, email and website values (longer than five
characters, with a stricter keyword list).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional

NOISE_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "null",
        "na",
        "n/a",
        "none",
        "undefined",
        "not available",
        "missing",
        "hidden",
        "private",
    }
)
STRICT_NOISE_KEYWORDS: FrozenSet[str] = NOISE_KEYWORDS | {"no number", "unknown"}

PHONE_MIN_DIGITS = 8
PHONE_MAX_DIGITS = 15

_NON_DIGIT = re.compile(r"\D")
_REPEATED_DIGIT = re.compile(r"^(\d)\1+$")


@dataclass(frozen=True)
class FieldRules:
    min_length: int
    keywords: FrozenSet[str] = NOISE_KEYWORDS


GENERAL_RULES = FieldRules(min_length=1, keywords=NOISE_KEYWORDS)
CONTACT_RULES = FieldRules(min_length=5, keywords=STRICT_NOISE_KEYWORDS)


def _normalize(value: Optional[str]) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def is_valid(value: Optional[str], rules: FieldRules = GENERAL_RULES) -> bool:
    """Return True when ``value`` looks like real data rather than filler."""
    normalized = _normalize(value)
    if not normalized:
        return False
    if any(keyword in normalized for keyword in rules.keywords):
        return False
    if not any(ch.isalnum() for ch in normalized):
        return False
    return len(normalized) > rules.min_length


def phone_digits(value: Optional[str]) -> str:
    return _NON_DIGIT.sub("", _normalize(value))


def is_phone_valid(value: Optional[str], rules: FieldRules = CONTACT_RULES) -> bool:
    """Return True for plausible phone numbers: 8-15 digits, not one digit repeated."""
    if not is_valid(value, rules):
        return False
    digits = phone_digits(value)
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return False
    return not _REPEATED_DIGIT.match(digits)
