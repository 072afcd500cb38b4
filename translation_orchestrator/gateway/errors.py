"""Error taxonomy for the translation orchestrator.

Every failure a caller can observe derives from ``TranslationError``.
Provider-level failures carry the provider name and, when one exists,
the HTTP status code so the retry policy can classify them.
"""

from __future__ import annotations


class TranslationError(Exception):
    """Base class for all orchestrator errors."""


class InvalidInputError(TranslationError):
    """Empty, oversized or otherwise unusable input. Never retried."""


class ProviderError(TranslationError):
    """A single provider call failed."""

    def __init__(self, message: str, provider: str = "", status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class ProviderRateLimitedError(ProviderError):
    """The provider's per-minute budget is spent, or it answered HTTP 429."""


class ProviderHttpError(ProviderError):
    """The provider answered with a non-2xx status."""


class ProviderParseError(ProviderError):
    """The provider answered 2xx but the body lacks the expected structure."""


class AllProvidersRateLimitedError(TranslationError):
    """No registered provider has budget left in its current window."""

    def __init__(self, message: str = "All translation providers are rate limited"):
        super().__init__(message)


class RequestExpiredError(TranslationError):
    """The request sat in the queue longer than the TTL."""


class RequestCancelledError(TranslationError):
    """The request was cancelled before it completed."""

    def __init__(self, message: str = "Translation request cancelled"):
        super().__init__(message)


class TranslationFailedError(TranslationError):
    """Terminal failure carrying the attempt count and the last underlying error."""

    def __init__(self, attempts: int, last_error: BaseException | None):
        reason = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(f"Translation failed after {attempts} attempts: {reason}")
        self.attempts = attempts
        self.last_error = last_error


class RetriesExhaustedError(TranslationFailedError):
    """Every allowed attempt failed with a retryable error."""
