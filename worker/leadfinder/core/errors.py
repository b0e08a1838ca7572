"""Error taxonomy for the lead acquisition pipeline.

Every failure that leaves ``find_leads`` is one of the ``LeadSearchError``
subclasses below. Upstream SDK errors are mapped onto them by
``classify_error``, which looks at the error's code/status when the SDK
exposes one and otherwise falls back to substring matching on the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CREDENTIAL_MISSING = "credential_missing"
    INVALID_QUERY = "invalid_query"
    PARSE = "parse_error"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_ARGUMENT = "invalid_argument"
    TRANSPORT = "transport_error"


RETRYABLE_KINDS = frozenset({ErrorKind.QUOTA_EXCEEDED, ErrorKind.TRANSPORT})

_QUOTA_MARKERS = ("429", "resource_exhausted", "quota")
_INVALID_ARGUMENT_MARKERS = ("invalid_argument",)
_CREDENTIAL_MARKERS = ("api_key_missing",)


class LeadSearchError(Exception):
    """Base class for classified lead search failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    user_message = "Something went wrong while fetching leads. Please check your connection and try again."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.user_message)


class CredentialMissingError(LeadSearchError):
    kind = ErrorKind.CREDENTIAL_MISSING
    user_message = "No API credential is configured. Set GEMINI_API_KEY and try again."


class InvalidQueryError(LeadSearchError):
    kind = ErrorKind.INVALID_QUERY
    user_message = "Select a city and at least one category."


class ParseError(LeadSearchError):
    """Raised when no JSON structure can be recovered from the upstream text."""

    kind = ErrorKind.PARSE
    user_message = "The search returned data in an unexpected format. Try a narrower or simpler query."

    def __init__(self, message: Optional[str] = None, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class QuotaExceededError(LeadSearchError):
    kind = ErrorKind.QUOTA_EXCEEDED
    user_message = "The search quota for this credential is exhausted. Try again later or use another API key."


class InvalidArgumentError(LeadSearchError):
    kind = ErrorKind.INVALID_ARGUMENT
    user_message = "The search request was rejected. Try fewer categories or a simpler query."


class TransportError(LeadSearchError):
    kind = ErrorKind.TRANSPORT


_ERROR_TYPES = {
    ErrorKind.CREDENTIAL_MISSING: CredentialMissingError,
    ErrorKind.INVALID_QUERY: InvalidQueryError,
    ErrorKind.PARSE: ParseError,
    ErrorKind.QUOTA_EXCEEDED: QuotaExceededError,
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.TRANSPORT: TransportError,
}


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any failure onto one of the taxonomy kinds."""
    if isinstance(exc, LeadSearchError):
        return exc.kind

    code = getattr(exc, "code", None)
    if code == 429:
        return ErrorKind.QUOTA_EXCEEDED

    status = str(getattr(exc, "status", "") or "").upper()
    if status == "RESOURCE_EXHAUSTED":
        return ErrorKind.QUOTA_EXCEEDED
    if status == "INVALID_ARGUMENT":
        return ErrorKind.INVALID_ARGUMENT

    message = str(exc).lower()
    if any(marker in message for marker in _CREDENTIAL_MARKERS):
        return ErrorKind.CREDENTIAL_MISSING
    if any(marker in message for marker in _QUOTA_MARKERS):
        return ErrorKind.QUOTA_EXCEEDED
    if any(marker in message for marker in _INVALID_ARGUMENT_MARKERS):
        return ErrorKind.INVALID_ARGUMENT
    return ErrorKind.TRANSPORT


def is_retryable(exc: BaseException) -> bool:
    return classify_error(exc) in RETRYABLE_KINDS


def as_lead_search_error(exc: BaseException) -> LeadSearchError:
    """Return ``exc`` as a typed error, wrapping raw failures with their cause."""
    if isinstance(exc, LeadSearchError):
        return exc
    error_type = _ERROR_TYPES[classify_error(exc)]
    wrapped = error_type()
    wrapped.__cause__ = exc
    return wrapped


def user_message_for(kind: ErrorKind) -> str:
    return _ERROR_TYPES[kind].user_message
