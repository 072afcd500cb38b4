"""Core types and DTOs for the translation orchestrator."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProviderKind(str, Enum):
    """Wire protocol families understood by the provider client."""

    GOOGLE = "google"  # GET with query parameters, nested-array JSON
    LIBRE = "libre"  # POST JSON body, {"translatedText": ...}


class RequestStatus(str, Enum):
    """Lifecycle state of a queued translation request."""

    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    RETRY_SCHEDULED = "retry_scheduled"
    SUCCESS = "success"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            RequestStatus.SUCCESS,
            RequestStatus.EXPIRED,
            RequestStatus.EXHAUSTED,
            RequestStatus.CANCELLED,
        )


# ---------------------------------------------------------------------------
# Caller-facing options and results
# ---------------------------------------------------------------------------


@dataclass
class TranslationOptions:
    """Per-request knobs accepted by the service facade."""

    max_retries: int = 3
    priority: int = 0
    use_queue: bool = True


@dataclass
class TranslationResult:
    """Normalized translation outcome, regardless of which provider produced it."""

    translated_text: str
    confidence: float = 0.8
    provider: str = ""
    cached: bool = False
    queue_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict for the API."""
        return {
            "translated_text": self.translated_text,
            "confidence": self.confidence,
            "provider": self.provider,
            "cached": self.cached,
            "queue_time_ms": self.queue_time_ms,
        }


# ---------------------------------------------------------------------------
# Translation Request: owned by the RequestQueue until settled
# ---------------------------------------------------------------------------


def _new_future() -> asyncio.Future:
    return asyncio.get_running_loop().create_future()


@dataclass(eq=False)
class TranslationRequest:
    """A single pending translation and the future its caller awaits.

    Must be created inside a running event loop. Awaiting the request awaits
    its future, so callers can write ``result = await request``.
    """

    text: str
    source_language: str
    target_language: str
    enqueued_at: float
    priority: int = 0
    max_retries: int = 3
    attempts: int = 0
    last_error: Exception | None = None
    status: RequestStatus = RequestStatus.QUEUED
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    future: asyncio.Future = field(default_factory=_new_future, repr=False, compare=False)

    def __await__(self):
        return self.future.__await__()

    @property
    def done(self) -> bool:
        return self.future.done()

    def resolve(self, result: TranslationResult) -> bool:
        """Complete the request successfully. Returns False if already settled."""
        if self.future.done():
            return False
        self.status = RequestStatus.SUCCESS
        self.future.set_result(result)
        return True

    def reject(self, error: Exception, status: RequestStatus = RequestStatus.EXHAUSTED) -> bool:
        """Fail the request. Returns False if already settled."""
        if self.future.done():
            return False
        self.status = status
        self.future.set_exception(error)
        return True

    def age(self, now: float) -> float:
        """Seconds since the request was first enqueued."""
        return now - self.enqueued_at


# ---------------------------------------------------------------------------
# Cache entry
# ---------------------------------------------------------------------------


@dataclass
class CacheEntry:
    """A cached translation keyed by language pair and normalized text."""

    key: str
    translated_text: str
    confidence: float = 1.0
    cached_at: float = 0.0
