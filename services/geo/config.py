"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App
    app_name: str = "lo-geo"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR)$")

    # Redis (rate limiting + event search cache). Empty string disables both.
    redis_url: str = Field(default="redis://localhost:6379/0")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8080"]
    )

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Rate Limiting
    rate_limit_anon_per_min: int = 60
    rate_limit_events_per_min: int = 20

    # Ticketmaster Discovery API
    ticketmaster_api_key: str = ""
    ticketmaster_timeout_s: float = 30.0
    ticketmaster_max_pages: int = Field(default=5, ge=1, le=20)

    # Event search
    event_cache_ttl_s: int = 300  # 5 minutes
    event_default_radius_miles: float = Field(default=25.0, gt=0, le=100)
    event_default_timeframe: str = Field(default="24h", pattern=r"^(1h|6h|12h|24h|48h|7d)$")

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
