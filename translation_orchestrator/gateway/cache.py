"""Bounded in-memory translation cache.

Keyed by ``source-target-normalized text``. Eviction is FIFO on insertion
order: when the store grows past ``max_size`` the entry inserted first is
dropped, regardless of how recently it was read. Overwriting a key keeps
its original insertion slot.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from translation_orchestrator.gateway.types import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 1000


class TranslationCache:
    """FIFO-bounded key -> translation store.

    Usage:
        cache = TranslationCache(max_size=1000)
        cache.put("en", "es", "Hello", "Hola", confidence=0.9)
        entry = cache.get("en", "es", "  hello ")  # same key
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, clock: Callable[[], float] = time.time):
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(source_language: str, target_language: str, text: str) -> str:
        return f"{source_language}-{target_language}-{text.strip().lower()}"

    def get(self, source_language: str, target_language: str, text: str) -> CacheEntry | None:
        """Look up a cached translation. No side effects."""
        return self._entries.get(self.make_key(source_language, target_language, text))

    def put(
        self,
        source_language: str,
        target_language: str,
        text: str,
        translated_text: str,
        confidence: float = 1.0,
    ) -> CacheEntry:
        """Insert or overwrite an entry, evicting the oldest insertion past the bound."""
        key = self.make_key(source_language, target_language, text)
        entry = CacheEntry(
            key=key,
            translated_text=translated_text,
            confidence=confidence,
            cached_at=self._clock(),
        )
        self._entries[key] = entry

        if len(self._entries) > self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Cache full (%d), evicted %r", self.max_size, oldest[:48])

        return entry

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
