import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from translation_orchestrator.core.config import Settings
from translation_orchestrator.gateway.rate_limiter import RateLimiter
from translation_orchestrator.gateway.registry import Provider, ProviderRegistry
from translation_orchestrator.gateway.service import TranslationService
from translation_orchestrator.gateway.types import ProviderKind, TranslationResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProviderClient:
    """Stands in for ProviderClient: scripted outcomes, recorded calls.

    Each outcome is either a TranslationResult, an exception instance to raise,
    or None for a default "<text>-translated" result. When the script runs out
    the default result is returned.
    """

    def __init__(self, rate_limiter: RateLimiter, outcomes: list | None = None):
        self.rate_limiter = rate_limiter
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[str, str, str, str]] = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    async def translate(self, provider, text, source_language, target_language):
        self.rate_limiter.record_request(provider)
        self.calls.append((provider.name, text, source_language, target_language))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()

        outcome = self.outcomes.pop(0) if self.outcomes else None
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            return TranslationResult(translated_text=f"{text}-translated", confidence=0.9, provider=provider.name)
        outcome.provider = outcome.provider or provider.name
        return outcome

    @property
    def texts(self) -> list[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        queue_tick_interval_seconds=0.005,
        queue_pacing_delay_seconds=0.0,
        retry_base_delay_seconds=0.01,
        retry_max_delay_seconds=0.05,
        google_rate_limit_per_minute=100,
        libre_rate_limit_per_minute=60,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def providers() -> list[Provider]:
    return [
        Provider(
            name="google",
            display_name="Google Translate",
            kind=ProviderKind.GOOGLE,
            endpoint="https://translate.example/translate_a/single",
            rate_limit_per_minute=100,
        ),
        Provider(
            name="libre",
            display_name="LibreTranslate",
            kind=ProviderKind.LIBRE,
            endpoint="https://libre.example/translate",
            rate_limit_per_minute=60,
        ),
    ]


@pytest.fixture
def registry(providers) -> ProviderRegistry:
    return ProviderRegistry(providers)


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(clock=clock)


@pytest.fixture
async def fake_client(rate_limiter) -> FakeProviderClient:
    return FakeProviderClient(rate_limiter)


@pytest.fixture
async def service(test_settings, registry, rate_limiter, fake_client, clock) -> AsyncGenerator[TranslationService, None]:
    svc = TranslationService(
        config=test_settings,
        registry=registry,
        rate_limiter=rate_limiter,
        client=fake_client,
        clock=clock,
    )
    yield svc
    await svc.stop()


@pytest.fixture
async def client(service) -> AsyncGenerator[AsyncClient, None]:
    from translation_orchestrator.core.dependencies import get_translation_service
    from translation_orchestrator.main import app

    app.state.translation_service = service
    app.dependency_overrides[get_translation_service] = lambda: service
    service.start()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
