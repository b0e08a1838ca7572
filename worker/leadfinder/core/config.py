"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_MISSING_KEY_VALUES = {"", "undefined"}


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    model: str = "gemini-3-flash-preview"
    country: str = "India"
    max_results: int = 15
    retry_attempts: int = 3
    retry_delay: float = 2.0
    retry_jitter: float = 0.0
    contact_min_length: int = 5
    general_min_length: int = 1
    worker_port: int = 8080

    @property
    def has_credential(self) -> bool:
        return self.gemini_api_key.strip() not in _MISSING_KEY_VALUES


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer; using %s", name, raw, default)
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("%s=%r is not a number; using %s", name, raw, default)
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    gemini_api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or ""
    settings = Settings(
        gemini_api_key=gemini_api_key,
        model=os.getenv("LEADS_MODEL") or "gemini-3-flash-preview",
        country=os.getenv("LEADS_COUNTRY") or "India",
        max_results=_int_env("LEADS_MAX_RESULTS", 15),
        retry_attempts=_int_env("LEADS_RETRY_ATTEMPTS", 3),
        retry_delay=_float_env("LEADS_RETRY_DELAY", 2.0),
        retry_jitter=_float_env("LEADS_RETRY_JITTER", 0.0),
        contact_min_length=_int_env("LEADS_CONTACT_MIN_LENGTH", 5),
        general_min_length=_int_env("LEADS_GENERAL_MIN_LENGTH", 1),
        worker_port=_int_env("WORKER_PORT", 8080),
    )

    if not settings.has_credential:
        logger.warning("GEMINI_API_KEY is not configured; lead searches will fail.")

    return settings
