"""Rate Limiter: per-provider fixed-window request counter.

Each provider carries a ``request_count`` and the time its current window
opened. A window lasts ``window_seconds`` (60 s); once it has elapsed the
counter is reset on the next check. Requests are recorded on attempt, not
on success, so failed calls still spend budget.

No locking: every mutation happens on the event loop thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from translation_orchestrator.gateway.registry import Provider

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class RateLimiter:
    """Per-provider request budget.

    Usage:
        limiter = RateLimiter()

        provider = limiter.select_available_provider(registry)
        if provider is None:
            # every provider spent its budget
            ...

        limiter.record_request(provider)
        # ... send the HTTP request
    """

    def __init__(self, window_seconds: float = WINDOW_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock

    def _roll_window(self, provider: Provider, now: float) -> None:
        """Reset the counter once the current window has elapsed."""
        if provider.window_started_at is None:
            return
        if now - provider.window_started_at > self.window_seconds:
            if provider.request_count:
                logger.debug(
                    "Rate limit window for %s reset (%d requests in last window)",
                    provider.name,
                    provider.request_count,
                )
            provider.request_count = 0
            provider.window_started_at = None

    def is_rate_limited(self, provider: Provider) -> bool:
        self._roll_window(provider, self._clock())
        return provider.request_count >= provider.rate_limit_per_minute

    def record_request(self, provider: Provider) -> None:
        """Count one outgoing request against the provider's window."""
        now = self._clock()
        self._roll_window(provider, now)
        if provider.window_started_at is None:
            provider.window_started_at = now
        provider.request_count += 1

        if provider.request_count == provider.rate_limit_per_minute:
            logger.info(
                "Provider %s reached its limit of %d requests/minute",
                provider.name,
                provider.rate_limit_per_minute,
            )

    def select_available_provider(self, providers: Iterable[Provider]) -> Provider | None:
        """Return the first provider, in registry order, with budget left."""
        for provider in providers:
            if not self.is_rate_limited(provider):
                return provider
        return None

    def get_stats(self, provider: Provider) -> dict:
        """Get current rate limit state for a provider."""
        now = self._clock()
        limited = self.is_rate_limited(provider)
        window_age = now - provider.window_started_at if provider.window_started_at is not None else 0.0
        return {
            "name": provider.name,
            "display_name": provider.display_name,
            "rate_limited": limited,
            "request_count": provider.request_count,
            "rate_limit_per_minute": provider.rate_limit_per_minute,
            "window_age_seconds": round(window_age, 3),
        }

    def get_all_stats(self, providers: Iterable[Provider]) -> list[dict]:
        """Get stats for all registered providers."""
        return [self.get_stats(p) for p in providers]
