"""Retry policy: error classification and exponential backoff.

Backoff strategy:
  delay = min(base * 2^(attempt-1) + jitter, max_delay)
  jitter = random(0, 10% of base * 2^(attempt-1))

``attempt`` is 1-based: the first retry after one failed attempt waits
roughly ``base`` seconds.
"""

from __future__ import annotations

import random

from translation_orchestrator.gateway.errors import (
    AllProvidersRateLimitedError,
    ProviderRateLimitedError,
)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_PHRASES = ("rate limit", "timeout", "network", "temporary")

DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0
JITTER_RATIO = 0.1


def calculate_retry_delay(
    attempt: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Delay in seconds before retry number ``attempt``.

    With the defaults, attempts 1, 2, 3 fall in [1, 1.2), [2, 2.4), [4, 4.8).
    """
    exponential = base_delay * (2 ** max(attempt - 1, 0))
    jitter = random.random() * JITTER_RATIO * exponential
    return min(exponential + jitter, max_delay)


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed attempt is worth another try."""
    if isinstance(error, (ProviderRateLimitedError, AllProvidersRateLimitedError)):
        return True

    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        return status_code in RETRYABLE_STATUS_CODES

    message = str(error).lower()
    if any(phrase in message for phrase in RETRYABLE_PHRASES):
        return True
    return any(str(code) in message for code in RETRYABLE_STATUS_CODES)
