"""Runtime settings for metric aggregation and logging."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json|text
    SERVICE_NAME: str = "metricwire"
    ENVIRONMENT: str = "production"

    # Width of an aggregation bucket in seconds
    METRICS_ROLLUP_SECONDS: int = 10
    # Total weight at which the aggregator asks to be flushed
    METRICS_MAX_WEIGHT: int = 100000

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_cache
    _settings_cache = None
