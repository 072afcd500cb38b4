"""Provider Registry: static descriptors of each translation backend.

The registry is an explicitly owned object injected into the processor and
the provider client. Its ``Provider`` instances carry the mutable per-minute
counters that only the rate limiter and the provider client touch.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from translation_orchestrator.core.config import Settings, settings
from translation_orchestrator.gateway.types import ProviderKind

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Provider:
    """One translation backend and its rate-limit window state."""

    name: str
    display_name: str
    kind: ProviderKind
    endpoint: str
    rate_limit_per_minute: int
    request_count: int = 0
    window_started_at: float | None = None  # None until the first recorded request


class ProviderRegistry:
    """Ordered collection of providers.

    Iteration order is the selection order used by the rate limiter:
    the first non-limited provider wins.
    """

    def __init__(self, providers: list[Provider] | None = None):
        self._providers: list[Provider] = list(providers) if providers is not None else default_providers()
        names = [p.name for p in self._providers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate provider names: {names}")

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def get(self, name: str) -> Provider | None:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    @property
    def preferred(self) -> Provider | None:
        return self._providers[0] if self._providers else None

    def promote(self, name: str) -> Provider:
        """Move a provider to the front so it is tried first."""
        provider = self.get(name)
        if provider is None:
            raise ValueError(f"Unknown provider: {name}")
        self._providers.remove(provider)
        self._providers.insert(0, provider)
        logger.info("Preferred provider set to %s", name)
        return provider


def default_providers(config: Settings | None = None) -> list[Provider]:
    """Google Translate first, LibreTranslate as fallback."""
    config = config or settings
    providers = [
        Provider(
            name="google",
            display_name="Google Translate",
            kind=ProviderKind.GOOGLE,
            endpoint=config.google_endpoint,
            rate_limit_per_minute=config.google_rate_limit_per_minute,
        ),
        Provider(
            name="libre",
            display_name="LibreTranslate",
            kind=ProviderKind.LIBRE,
            endpoint=config.libre_endpoint,
            rate_limit_per_minute=config.libre_rate_limit_per_minute,
        ),
    ]
    preferred = [p for p in providers if p.name == config.default_provider]
    return preferred + [p for p in providers if p.name != config.default_provider]
