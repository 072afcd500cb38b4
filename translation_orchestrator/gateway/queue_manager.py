"""Request Queue: priority-ordered pending translations.

Manages the single pending-request list with support for:
  - Priority-based ordering (higher integer first), stable within a tier
  - Cancellation of one request or all of them
  - Parking requests that wait for a retry, then re-inserting them at the
    tail of their priority tier
  - Queue stats and monitoring

An O(n) insertion scan is fine: queues hold a few dozen entries at most.
"""

from __future__ import annotations

import asyncio
import logging

from translation_orchestrator.core.metrics import TRANSLATION_OUTCOMES
from translation_orchestrator.gateway.errors import RequestCancelledError
from translation_orchestrator.gateway.types import RequestStatus, TranslationRequest

logger = logging.getLogger(__name__)


class RequestQueue:
    """Priority queue of TranslationRequests plus the set parked for retry.

    Usage:
        queue = RequestQueue()
        queue.enqueue(request)

        head = queue.peek_front()
        ...
        queue.remove(head)

        queue.cancel(request.id)
    """

    def __init__(self):
        self._items: list[TranslationRequest] = []
        self._parked: dict[str, tuple[TranslationRequest, asyncio.TimerHandle]] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def pending_retries(self) -> int:
        """Requests waiting on a backoff timer."""
        return len(self._parked)

    def enqueue(self, request: TranslationRequest) -> int:
        """Insert before the first request with a strictly lower priority.

        Returns the insertion index.
        """
        index = next(
            (i for i, queued in enumerate(self._items) if queued.priority < request.priority),
            len(self._items),
        )
        self._items.insert(index, request)
        request.status = RequestStatus.QUEUED

        logger.debug(
            "Enqueued request %s at position %d (priority=%d, depth=%d)",
            request.id,
            index,
            request.priority,
            len(self._items),
        )
        return index

    def peek_front(self) -> TranslationRequest | None:
        return self._items[0] if self._items else None

    def pop_front(self) -> TranslationRequest | None:
        return self._items.pop(0) if self._items else None

    def remove(self, request: TranslationRequest) -> bool:
        """Remove a specific request object. Returns False if it is no longer queued."""
        for i, queued in enumerate(self._items):
            if queued is request:
                del self._items[i]
                return True
        return False

    def get(self, request_id: str) -> TranslationRequest | None:
        for queued in self._items:
            if queued.id == request_id:
                return queued
        parked = self._parked.get(request_id)
        return parked[0] if parked else None

    # ------------------------------------------------------------------
    # Retry parking
    # ------------------------------------------------------------------

    def schedule_requeue(self, request: TranslationRequest, delay: float) -> None:
        """Re-insert ``request`` after ``delay`` seconds at its original priority."""
        loop = asyncio.get_running_loop()
        request.status = RequestStatus.RETRY_SCHEDULED
        handle = loop.call_later(delay, self._requeue, request.id)
        self._parked[request.id] = (request, handle)

    def _requeue(self, request_id: str) -> None:
        parked = self._parked.pop(request_id, None)
        if parked is None:
            return
        request, _ = parked
        if request.done:
            return
        self.enqueue(request)
        logger.debug("Request %s back in queue (attempt %d)", request.id, request.attempts + 1)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self, request_id: str) -> bool:
        """Cancel a queued or retry-parked request. Returns whether it was found."""
        request = None
        for i, queued in enumerate(self._items):
            if queued.id == request_id:
                request = self._items.pop(i)
                break

        if request is None:
            parked = self._parked.pop(request_id, None)
            if parked is None:
                return False
            request, handle = parked
            handle.cancel()

        request.reject(RequestCancelledError(), status=RequestStatus.CANCELLED)
        TRANSLATION_OUTCOMES.labels(outcome="cancelled").inc()
        logger.info("Cancelled translation request %s", request_id)
        return True

    def cancel_all(self) -> int:
        """Drain the queue and the retry set, failing every pending handle.

        Returns the number of requests cancelled.
        """
        cancelled = 0
        while self._items:
            request = self._items.pop(0)
            if request.reject(RequestCancelledError(), status=RequestStatus.CANCELLED):
                cancelled += 1

        for request, handle in self._parked.values():
            handle.cancel()
            if request.reject(RequestCancelledError(), status=RequestStatus.CANCELLED):
                cancelled += 1
        self._parked.clear()

        if cancelled:
            TRANSLATION_OUTCOMES.labels(outcome="cancelled").inc(cancelled)
            logger.info("Cancelled %d pending translation requests", cancelled)
        return cancelled

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def oldest_age(self, now: float) -> float:
        """Age in seconds of the request at the head, 0 when empty."""
        head = self.peek_front()
        return head.age(now) if head is not None else 0.0

    def get_stats(self, now: float) -> dict:
        """Get queue statistics."""
        by_priority: dict[int, int] = {}
        for queued in self._items:
            by_priority[queued.priority] = by_priority.get(queued.priority, 0) + 1
        return {
            "total": len(self._items),
            "pending_retries": len(self._parked),
            "by_priority": by_priority,
            "oldest_age_seconds": round(self.oldest_age(now), 3),
        }
