"""Translation Service: public facade over the orchestrator components.

Main entry point for callers:
  1. Validates and sanitizes input
  2. Short-circuits identical source/target languages
  3. Enqueues the request (default) or translates directly (legacy path)
  4. Exposes cancellation, queue stats and provider status

Usage:
    service = TranslationService()
    service.start()

    request = service.enqueue_translation("Hello", "en", "es")
    result = await request          # TranslationResult

    # or, validated and routed by options:
    result = await service.translate_text("Hello", "en", "es")

    await service.stop()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from translation_orchestrator.core.config import Settings, settings
from translation_orchestrator.gateway.cache import TranslationCache
from translation_orchestrator.gateway.errors import (
    AllProvidersRateLimitedError,
    ProviderError,
    TranslationFailedError,
)
from translation_orchestrator.gateway.processor import QueueProcessor
from translation_orchestrator.gateway.provider_adapters import ProviderClient
from translation_orchestrator.gateway.queue_manager import RequestQueue
from translation_orchestrator.gateway.rate_limiter import RateLimiter
from translation_orchestrator.gateway.registry import ProviderRegistry, default_providers
from translation_orchestrator.gateway.types import (
    TranslationOptions,
    TranslationRequest,
    TranslationResult,
)
from translation_orchestrator.gateway.validation import TextValidator

logger = logging.getLogger(__name__)


class TranslationService:
    """Owns one queue, cache, registry and processor.

    Every collaborator can be injected, which is how tests swap in fake
    provider clients and deterministic clocks.
    """

    def __init__(
        self,
        config: Settings | None = None,
        registry: ProviderRegistry | None = None,
        cache: TranslationCache | None = None,
        rate_limiter: RateLimiter | None = None,
        client: ProviderClient | None = None,
        validator: TextValidator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or settings
        self._clock = clock

        self.registry = registry or ProviderRegistry(default_providers(self.config))
        self.cache = cache or TranslationCache(max_size=self.config.cache_max_size)
        self.rate_limiter = rate_limiter or RateLimiter(
            window_seconds=self.config.rate_limit_window_seconds,
            clock=clock,
        )
        self.client = client or ProviderClient(self.rate_limiter, timeout=self.config.provider_timeout_seconds)
        self.validator = validator or TextValidator(max_length=self.config.max_text_length)

        self.queue = RequestQueue()
        self.processor = QueueProcessor(
            queue=self.queue,
            cache=self.cache,
            registry=self.registry,
            rate_limiter=self.rate_limiter,
            client=self.client,
            config=self.config,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.processor.start()

    async def stop(self, cancel_pending: bool = True) -> None:
        await self.processor.stop()
        if cancel_pending:
            self.cancel_all()

    # ------------------------------------------------------------------
    # Translation entry points
    # ------------------------------------------------------------------

    async def translate_text(
        self,
        text: str,
        source_language: str = "auto",
        target_language: str = "en",
        options: TranslationOptions | None = None,
    ) -> TranslationResult:
        """Validate, then translate through the queue or directly."""
        options = options or TranslationOptions(
            max_retries=self.config.default_max_retries,
            priority=self.config.default_priority,
        )
        text = self.validator.validate_text(text)

        if not target_language or target_language == source_language:
            return TranslationResult(translated_text=text, confidence=1.0, provider="none", cached=False)

        self.validator.validate_languages(source_language, target_language)

        if options.use_queue:
            return await self.enqueue_translation(text, source_language, target_language, options)
        return await self.translate_directly(text, source_language, target_language)

    def enqueue_translation(
        self,
        text: str,
        source_language: str,
        target_language: str,
        options: TranslationOptions | None = None,
    ) -> TranslationRequest:
        """Queue a request and return its awaitable handle.

        The text is trusted as already validated.
        """
        options = options or TranslationOptions(
            max_retries=self.config.default_max_retries,
            priority=self.config.default_priority,
        )
        request = TranslationRequest(
            text=text,
            source_language=source_language,
            target_language=target_language,
            enqueued_at=self._clock(),
            priority=options.priority,
            max_retries=options.max_retries,
        )
        self.queue.enqueue(request)
        return request

    async def translate_directly(
        self,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        """Translate without the queue: cache, first available provider, one fallback."""
        cached = self.cache.get(source_language, target_language, text)
        if cached is not None:
            return TranslationResult(
                translated_text=cached.translated_text,
                confidence=cached.confidence,
                provider="cache",
                cached=True,
            )

        primary = self.rate_limiter.select_available_provider(self.registry)
        if primary is None:
            raise AllProvidersRateLimitedError(
                "All translation providers are rate limited. Please try again later."
            )

        try:
            result = await self.client.translate(primary, text, source_language, target_language)
        except ProviderError as primary_error:
            fallback = next(
                (p for p in self.registry if p is not primary and not self.rate_limiter.is_rate_limited(p)),
                None,
            )
            if fallback is None:
                raise

            logger.info("Provider %s failed, falling back to %s", primary.name, fallback.name)
            try:
                result = await self.client.translate(fallback, text, source_language, target_language)
            except ProviderError as fallback_error:
                raise TranslationFailedError(
                    2,
                    ProviderError(
                        f"both providers failed: {primary_error}, {fallback_error}",
                        provider=fallback.name,
                        status_code=fallback_error.status_code,
                    ),
                ) from fallback_error

        self.cache.put(
            source_language,
            target_language,
            text,
            result.translated_text,
            confidence=result.confidence,
        )
        result.cached = False
        return result

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self, request_id: str) -> bool:
        return self.queue.cancel(request_id)

    def cancel_all(self) -> int:
        return self.queue.cancel_all()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_queue_stats(self) -> dict:
        return self.processor.get_stats()

    def get_status(self) -> dict:
        """Per-provider rate-limit state plus cache and queue sizes."""
        preferred = self.registry.preferred
        return {
            "current_provider": preferred.name if preferred else None,
            "cache_size": self.cache.size,
            "queue_length": len(self.queue),
            "providers": self.rate_limiter.get_all_stats(self.registry),
        }

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Translation cache cleared")

    def set_provider(self, name: str) -> None:
        """Make ``name`` the first provider tried. Raises ValueError if unknown."""
        self.registry.promote(name)
