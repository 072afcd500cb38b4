from pydantic import BaseModel, Field


class TranslateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    source_language: str = Field("auto", min_length=2, max_length=8)
    target_language: str = Field("en", min_length=2, max_length=8)
    priority: int = 0
    max_retries: int = Field(3, ge=1, le=10)
    use_queue: bool = True


class TranslateResponse(BaseModel):
    translated_text: str
    confidence: float
    provider: str
    cached: bool
    queue_time_ms: int = 0


class QueueStatsResponse(BaseModel):
    queue_length: int
    is_processing: bool
    oldest_request_age_ms: int
    pending_retries: int
    average_wait_time_ms: int


class ProviderStatus(BaseModel):
    name: str
    display_name: str
    rate_limited: bool
    request_count: int
    rate_limit_per_minute: int
    window_age_seconds: float


class ServiceStatusResponse(BaseModel):
    current_provider: str | None
    cache_size: int
    queue_length: int
    providers: list[ProviderStatus]


class CancelResponse(BaseModel):
    cancelled: int
