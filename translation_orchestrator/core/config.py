from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Cache
    cache_max_size: int = 1000

    # Queue
    request_ttl_seconds: float = 300.0  # Queued requests older than this are expired
    queue_tick_interval_seconds: float = 0.1
    queue_pacing_delay_seconds: float = 0.1  # Pause between two dispatched requests
    default_max_retries: int = 3
    default_priority: int = 0

    # Retry backoff
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 30.0

    # Providers
    rate_limit_window_seconds: float = 60.0
    provider_timeout_seconds: float = 10.0
    google_endpoint: str = "https://translate.googleapis.com/translate_a/single"
    google_rate_limit_per_minute: int = 100
    libre_endpoint: str = "https://libretranslate.de/translate"
    libre_rate_limit_per_minute: int = 60
    default_provider: str = "google"

    # Input validation
    max_text_length: int = 5000


settings = Settings()


def validate_settings_for_production() -> None:
    """Reject settings combinations that only make sense in development."""
    if settings.app_env != "production":
        return
    if settings.queue_pacing_delay_seconds <= 0:
        raise RuntimeError("queue_pacing_delay_seconds must be positive in production")
    if settings.retry_max_delay_seconds < settings.retry_base_delay_seconds:
        raise RuntimeError("retry_max_delay_seconds must be >= retry_base_delay_seconds")
