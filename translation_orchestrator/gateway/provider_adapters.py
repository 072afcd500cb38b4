"""Provider-Specific Adapters: protocol-level handling for each translation backend.

Each adapter turns (text, source, target) into the provider's HTTP request,
sends it, and parses the provider's body into a TranslationResult.

Provider-specific behaviors:
  - Google Translate: GET with query parameters (client=gtx), nested-array JSON,
    translation at data[0][0][0], optional confidence at data[0][0][2]
  - LibreTranslate: POST JSON {q, source, target, format}, {"translatedText": ...}

``ProviderClient`` is the single entry point used by the queue processor: it
spends rate-limit budget right before dispatch and maps transport failures
onto the orchestrator's error taxonomy.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from translation_orchestrator.core.metrics import PROVIDER_CALLS, PROVIDER_LATENCY
from translation_orchestrator.gateway.errors import (
    ProviderError,
    ProviderHttpError,
    ProviderParseError,
    ProviderRateLimitedError,
)
from translation_orchestrator.gateway.rate_limiter import RateLimiter
from translation_orchestrator.gateway.registry import Provider
from translation_orchestrator.gateway.types import ProviderKind, TranslationResult

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.8
USER_AGENT = "Mozilla/5.0 (compatible; TranslationOrchestrator/1.0)"


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    kind: ProviderKind

    @abstractmethod
    async def send(
        self,
        client: httpx.AsyncClient,
        provider: Provider,
        text: str,
        source_language: str,
        target_language: str,
    ) -> httpx.Response:
        """Issue the provider-specific HTTP request."""
        ...

    @abstractmethod
    def parse(self, provider: Provider, data: Any) -> TranslationResult:
        """Extract the translation from the decoded JSON body."""
        ...

    def check_status(self, provider: Provider, resp: httpx.Response) -> None:
        if resp.status_code == 429:
            raise ProviderRateLimitedError(
                f"{provider.display_name} rate limit exceeded (HTTP 429)",
                provider=provider.name,
                status_code=429,
            )
        if not resp.is_success:
            raise ProviderHttpError(
                f"{provider.display_name} API error: {resp.status_code}",
                provider=provider.name,
                status_code=resp.status_code,
            )

    def decode(self, provider: Provider, resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderParseError(
                f"Invalid response from {provider.display_name}: body is not JSON",
                provider=provider.name,
            ) from e


# ---------------------------------------------------------------------------
# Google Translate Adapter (public translate_a/single endpoint)
# ---------------------------------------------------------------------------


class GoogleTranslateAdapter(BaseProviderAdapter):
    """GET with URL-encoded query parameters, nested-array response."""

    kind = ProviderKind.GOOGLE
    client_id = "gtx"

    async def send(self, client, provider, text, source_language, target_language):
        params = {
            "client": self.client_id,
            "sl": source_language,
            "tl": target_language,
            "dt": "t",
            "q": text,
        }
        return await client.get(provider.endpoint, params=params, headers={"User-Agent": USER_AGENT})

    def parse(self, provider: Provider, data: Any) -> TranslationResult:
        try:
            first = data[0][0]
            translated = first[0]
        except (IndexError, KeyError, TypeError) as e:
            raise ProviderParseError(
                f"Invalid response from {provider.display_name}",
                provider=provider.name,
            ) from e

        if not isinstance(translated, str) or not translated:
            raise ProviderParseError(
                f"Invalid response from {provider.display_name}: empty translation",
                provider=provider.name,
            )

        confidence = DEFAULT_CONFIDENCE
        if len(first) > 2 and isinstance(first[2], (int, float)) and not isinstance(first[2], bool) and first[2]:
            confidence = float(first[2])

        return TranslationResult(translated_text=translated, confidence=confidence, provider=provider.name)


# ---------------------------------------------------------------------------
# LibreTranslate Adapter
# ---------------------------------------------------------------------------


class LibreTranslateAdapter(BaseProviderAdapter):
    """POST JSON body, flat object response. No confidence is reported."""

    kind = ProviderKind.LIBRE

    async def send(self, client, provider, text, source_language, target_language):
        payload = {
            "q": text,
            "source": source_language,
            "target": target_language,
            "format": "text",
        }
        return await client.post(
            provider.endpoint,
            json=payload,
            headers={"Content-Type": "application/json"},
        )

    def parse(self, provider: Provider, data: Any) -> TranslationResult:
        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str) or not translated:
            raise ProviderParseError(
                f"Invalid response from {provider.display_name}",
                provider=provider.name,
            )
        return TranslationResult(translated_text=translated, confidence=DEFAULT_CONFIDENCE, provider=provider.name)


# ---------------------------------------------------------------------------
# Adapter Registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[ProviderKind, type[BaseProviderAdapter]] = {
    ProviderKind.GOOGLE: GoogleTranslateAdapter,
    ProviderKind.LIBRE: LibreTranslateAdapter,
}


def get_adapter(kind: ProviderKind) -> BaseProviderAdapter:
    """Factory: create the adapter for a provider protocol family."""
    adapter_cls = ADAPTER_REGISTRY.get(kind)
    if adapter_cls is None:
        raise ValueError(f"No adapter registered for provider kind: {kind}")
    return adapter_cls()


# ---------------------------------------------------------------------------
# Provider Client
# ---------------------------------------------------------------------------


class ProviderClient:
    """Performs one network call to one provider.

    Usage:
        client = ProviderClient(rate_limiter, timeout=10.0)
        result = await client.translate(provider, "Hello", "en", "es")
    """

    def __init__(self, rate_limiter: RateLimiter, timeout: float = 10.0):
        self.rate_limiter = rate_limiter
        self.timeout = timeout
        self._adapters: dict[ProviderKind, BaseProviderAdapter] = {}

    def _get_adapter(self, kind: ProviderKind) -> BaseProviderAdapter:
        if kind not in self._adapters:
            self._adapters[kind] = get_adapter(kind)
        return self._adapters[kind]

    async def translate(
        self,
        provider: Provider,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        """Translate via ``provider``. Raises a ProviderError subclass on failure."""
        adapter = self._get_adapter(provider.kind)

        if self.rate_limiter.is_rate_limited(provider):
            raise ProviderRateLimitedError(
                f"{provider.display_name} rate limit exceeded",
                provider=provider.name,
            )

        # Budget is spent on attempt, whatever the outcome
        self.rate_limiter.record_request(provider)
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await adapter.send(client, provider, text, source_language, target_language)

            adapter.check_status(provider, resp)
            result = adapter.parse(provider, adapter.decode(provider, resp))

        except httpx.TimeoutException as e:
            PROVIDER_CALLS.labels(provider=provider.name, result="error").inc()
            raise ProviderError(
                f"{provider.display_name} timeout after {self.timeout}s",
                provider=provider.name,
            ) from e
        except httpx.TransportError as e:
            PROVIDER_CALLS.labels(provider=provider.name, result="error").inc()
            raise ProviderError(
                f"{provider.display_name} network error: {e}",
                provider=provider.name,
            ) from e
        except ProviderError as e:
            PROVIDER_CALLS.labels(provider=provider.name, result="error").inc()
            logger.info("Provider %s failed: %s", provider.name, e, extra={"provider": provider.name})
            raise
        finally:
            PROVIDER_LATENCY.labels(provider=provider.name).observe(time.monotonic() - start)

        PROVIDER_CALLS.labels(provider=provider.name, result="ok").inc()
        logger.debug(
            "Provider %s translated %d chars (%s -> %s)",
            provider.name,
            len(text),
            source_language,
            target_language,
        )
        return result
