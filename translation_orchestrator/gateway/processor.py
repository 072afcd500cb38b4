"""Queue Processor: the scheduling loop of the orchestrator.

Drains the RequestQueue one head at a time:
  1. Expires requests older than the TTL (no network attempt)
  2. Serves cache hits immediately
  3. Picks the first provider with rate-limit budget
  4. Dispatches through the ProviderClient
  5. On failure, classifies the error and either parks the request for a
     backoff retry or rejects it for good
  6. Paces successive dispatches with a fixed delay

A periodic tick starts ``process_queue`` only when it is not already
running; the boolean guard is enough because everything runs on one event
loop and nothing preempts the check.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from translation_orchestrator.core.config import Settings, settings
from translation_orchestrator.core.metrics import (
    CACHE_LOOKUPS,
    RETRIES_SCHEDULED,
    TRANSLATION_OUTCOMES,
)
from translation_orchestrator.gateway.cache import TranslationCache
from translation_orchestrator.gateway.errors import (
    AllProvidersRateLimitedError,
    RequestExpiredError,
    RetriesExhaustedError,
    TranslationError,
    TranslationFailedError,
)
from translation_orchestrator.gateway.provider_adapters import ProviderClient
from translation_orchestrator.gateway.queue_manager import RequestQueue
from translation_orchestrator.gateway.rate_limiter import RateLimiter
from translation_orchestrator.gateway.registry import ProviderRegistry
from translation_orchestrator.gateway.retry_policy import calculate_retry_delay, is_retryable
from translation_orchestrator.gateway.types import RequestStatus, TranslationRequest, TranslationResult

logger = logging.getLogger(__name__)


class QueueProcessor:
    """Single cooperative worker over the request queue.

    Integrates:
      - RequestQueue: priority scheduling, cancellation, retry parking
      - TranslationCache: write-through result cache
      - RateLimiter + ProviderRegistry: per-provider budgets
      - ProviderClient: protocol-specific HTTP calls
    """

    def __init__(
        self,
        queue: RequestQueue,
        cache: TranslationCache,
        registry: ProviderRegistry,
        rate_limiter: RateLimiter,
        client: ProviderClient,
        config: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.queue = queue
        self.cache = cache
        self.registry = registry
        self.rate_limiter = rate_limiter
        self.client = client
        self.config = config or settings
        self._clock = clock

        self.is_processing = False
        self._processing_task: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic tick."""
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(self._tick_loop())
            logger.info(
                "Queue processor started (tick=%.3fs, pacing=%.3fs)",
                self.config.queue_tick_interval_seconds,
                self.config.queue_pacing_delay_seconds,
            )

    async def stop(self) -> None:
        """Stop the tick and cancel an in-progress drain. Queued requests stay queued."""
        for task in (self._tick_task, self._processing_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._tick_task = None
        self._processing_task = None
        self.is_processing = False
        logger.info("Queue processor stopped")

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.queue_tick_interval_seconds)
            self.tick()

    def tick(self) -> asyncio.Task | None:
        """Kick off a drain if idle and there is work. Returns the drain task, if any."""
        if self.is_processing or len(self.queue) == 0:
            return None
        self._processing_task = asyncio.create_task(self.process_queue())
        return self._processing_task

    # ------------------------------------------------------------------
    # Drain
    # ------------------------------------------------------------------

    async def process_queue(self) -> int:
        """Process requests until the queue is empty.

        Returns the number of head requests handled (including retries parked).
        """
        if self.is_processing or len(self.queue) == 0:
            return 0

        self.is_processing = True
        handled = 0
        try:
            while len(self.queue) > 0:
                request = self.queue.peek_front()
                handled += 1

                if self._expire_if_stale(request):
                    continue

                if self._serve_from_cache(request):
                    continue

                await self._dispatch(request)

                if self.config.queue_pacing_delay_seconds > 0:
                    await asyncio.sleep(self.config.queue_pacing_delay_seconds)
        finally:
            self.is_processing = False

        return handled

    def _expire_if_stale(self, request: TranslationRequest) -> bool:
        age = request.age(self._clock())
        if age <= self.config.request_ttl_seconds:
            return False

        self.queue.remove(request)
        request.reject(
            RequestExpiredError(
                f"Translation request expired after {age:.1f}s in queue "
                f"({request.attempts} attempts, last error: {request.last_error or 'none'})"
            ),
            status=RequestStatus.EXPIRED,
        )
        TRANSLATION_OUTCOMES.labels(outcome="expired").inc()
        logger.warning("Request %s expired after %.1fs", request.id, age, extra={"request_id": request.id})
        return True

    def _serve_from_cache(self, request: TranslationRequest) -> bool:
        entry = self.cache.get(request.source_language, request.target_language, request.text)
        if entry is None:
            CACHE_LOOKUPS.labels(result="miss").inc()
            return False

        CACHE_LOOKUPS.labels(result="hit").inc()
        self.queue.remove(request)
        request.resolve(
            TranslationResult(
                translated_text=entry.translated_text,
                confidence=entry.confidence,
                provider="cache",
                cached=True,
                queue_time_ms=self._queue_time_ms(request),
            )
        )
        TRANSLATION_OUTCOMES.labels(outcome="cached").inc()
        logger.debug("Request %s served from cache", request.id)
        return True

    async def _dispatch(self, request: TranslationRequest) -> None:
        request.status = RequestStatus.IN_FLIGHT
        try:
            provider = self.rate_limiter.select_available_provider(self.registry)
            if provider is None:
                raise AllProvidersRateLimitedError()

            result = await self.client.translate(
                provider,
                request.text,
                request.source_language,
                request.target_language,
            )
        except TranslationError as e:
            self._handle_failure(request, e)
            return
        except Exception as e:
            logger.exception("Unexpected error while translating request %s", request.id)
            self._handle_failure(request, e)
            return

        # A cancel() during the call already removed and rejected the request
        if not self.queue.remove(request) or request.done:
            logger.info("Request %s was cancelled while in flight, dropping result", request.id)
            return

        self.cache.put(
            request.source_language,
            request.target_language,
            request.text,
            result.translated_text,
            confidence=result.confidence,
        )
        result.cached = False
        result.queue_time_ms = self._queue_time_ms(request)
        request.resolve(result)
        TRANSLATION_OUTCOMES.labels(outcome="success").inc()
        logger.debug(
            "Request %s translated by %s",
            request.id,
            result.provider,
            extra={"request_id": request.id, "provider": result.provider},
        )

    def _handle_failure(self, request: TranslationRequest, error: Exception) -> None:
        if not self.queue.remove(request) or request.done:
            return

        request.attempts += 1
        request.last_error = error
        retryable = is_retryable(error)

        if request.attempts < request.max_retries and retryable:
            delay = calculate_retry_delay(
                request.attempts,
                base_delay=self.config.retry_base_delay_seconds,
                max_delay=self.config.retry_max_delay_seconds,
            )
            self.queue.schedule_requeue(request, delay)
            RETRIES_SCHEDULED.inc()
            logger.info(
                "Retry %d/%d for request %s in %.2fs: %s",
                request.attempts,
                request.max_retries,
                request.id,
                delay,
                error,
                extra={"request_id": request.id},
            )
            return

        if retryable:
            failure: TranslationFailedError = RetriesExhaustedError(request.attempts, error)
            TRANSLATION_OUTCOMES.labels(outcome="exhausted").inc()
        else:
            failure = TranslationFailedError(request.attempts, error)
            TRANSLATION_OUTCOMES.labels(outcome="failed").inc()
        failure.__cause__ = error

        request.reject(failure, status=RequestStatus.EXHAUSTED)
        logger.warning("Request %s failed permanently: %s", request.id, failure, extra={"request_id": request.id})

    def _queue_time_ms(self, request: TranslationRequest) -> int:
        return int(request.age(self._clock()) * 1000)

    def get_stats(self) -> dict:
        """Queue statistics in the shape the service exposes."""
        now = self._clock()
        return {
            "queue_length": len(self.queue),
            "is_processing": self.is_processing,
            "oldest_request_age_ms": int(self.queue.oldest_age(now) * 1000),
            "pending_retries": self.queue.pending_retries,
            "average_wait_time_ms": int(len(self.queue) * self.config.queue_pacing_delay_seconds * 1000),
        }
