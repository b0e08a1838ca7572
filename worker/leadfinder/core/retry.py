"""Bounded exponential backoff for async upstream calls."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, TypeVar

from .errors import ErrorKind, RETRYABLE_KINDS, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 2.0


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    *,
    classify: Callable[[BaseException], ErrorKind] = classify_error,
    jitter: float = 0.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or a failure is not worth retrying.

    Attempts are strictly sequential. Only quota and transport failures are
    retried; the delay doubles after every failed attempt. The last error is
    re-raised unchanged once the attempt budget runs out.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    delay = initial_delay
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as exc:
            kind = classify(exc)
            if kind not in RETRYABLE_KINDS:
                logger.warning("Attempt %s failed with non-retryable %s: %s", attempt, kind.value, exc)
                raise
            if attempt >= max_attempts:
                logger.error("Giving up after %s attempts (%s): %s", attempt, kind.value, exc)
                raise

            sleep_for = delay + (random.uniform(0, jitter) if jitter > 0 else 0.0)
            logger.warning(
                "Attempt %s/%s failed (%s); retrying in %.2fs: %s",
                attempt,
                max_attempts,
                kind.value,
                sleep_for,
                exc,
            )
            await sleep(sleep_for)
            delay *= 2
