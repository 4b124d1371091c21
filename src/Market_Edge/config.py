"""Application configuration loaded from environment variables / ``.env``.

Vendor adapters are enabled by the presence of their API key. An empty
``redis_url`` runs the cache and the pub/sub bus in-process, which is what
tests and single-instance local runs use.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Redis (shared cache + pub/sub bus)
    redis_url: str = ""

    # Vendor credentials, in provider priority order
    finnhub_api_key: str = ""
    twelve_data_api_key: str = ""
    fmp_api_key: str = ""
    eodhd_api_key: str = ""

    # Aggregator
    provider_timeout_seconds: float = 5.0
    quote_ttl_seconds: int = 10
    history_ttl_seconds: int = 3600

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
