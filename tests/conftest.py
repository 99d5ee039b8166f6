import os
import pytest


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "LOG_LEVEL",
    "LOG_FORMAT",
    "SERVICE_NAME",
    "ENVIRONMENT",
    "METRICS_ROLLUP_SECONDS",
    "METRICS_MAX_WEIGHT",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def settings_cache_isolation():
    """Drop cached settings so each test sees its own environment."""
    from metricwire.core.config import reset_settings_cache

    reset_settings_cache()
    yield
    reset_settings_cache()
