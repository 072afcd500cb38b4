"""Translation Request Orchestrator.

Turns text-translation requests into results from rate-limited, unreliable
external translation providers with:
  - Priority Request Queue (stable within a tier, cancellable)
  - Per-provider Rate Limiter (requests per minute)
  - Provider Adapters (Google Translate GET, LibreTranslate POST)
  - Retry policy (error classification, exponential backoff with jitter)
  - FIFO-bounded translation Cache
  - Queue Processor (single cooperative drain loop with pacing)
"""
