"""Tests for structured logging and settings."""

import json
import logging
import sys

import pytest

from metricwire.core.config import Settings, get_settings, reset_settings_cache
from metricwire.core.errors import ErrorCode, MetricError, TypeMismatchError
from metricwire.core.logging.structured import StructuredFormatter, setup_logging
from metricwire.core.metrics_aggregator import MetricsAggregator


@pytest.fixture
def root_logger_isolation():
    """Restore root logger handlers and level after a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(msg="flushed", exc_info=None):
    return logging.LogRecord(
        name="metricwire.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_basic_fields(self):
        """Records render as one JSON object."""
        formatter = StructuredFormatter(service_name="svc", environment="test")

        entry = json.loads(formatter.format(_record()))

        assert entry["message"] == "flushed"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "metricwire.test"
        assert entry["service"] == "svc"
        assert entry["environment"] == "test"
        assert "metric_key" not in entry

    def test_aggregator_record_fields(self, caplog):
        """Context the aggregator attaches becomes top-level fields."""
        aggregator = MetricsAggregator(rollup_seconds=10)
        with caplog.at_level(logging.DEBUG, logger="metricwire"):
            aggregator.add("c", "hits", 1, timestamp=1700000003)
            aggregator.flush(force=True)

        created, flushed = [json.loads(StructuredFormatter().format(r)) for r in caplog.records]

        assert created["metric_key"] == "hits"
        assert created["metric_type"] == "c"
        assert created["bucket"] == 1700000000
        assert flushed["metrics_count"] == 1
        assert flushed["buckets"] == [1700000000]

    def test_rejected_observation_carries_error_code(self, caplog):
        """Rejected set values log the error code."""
        aggregator = MetricsAggregator(rollup_seconds=10)
        aggregator.add("s", "users", 1, timestamp=1700000000)
        with caplog.at_level(logging.WARNING, logger="metricwire"):
            with pytest.raises(TypeMismatchError):
                aggregator.add("s", "users", "bob", timestamp=1700000000)

        entry = json.loads(StructuredFormatter().format(caplog.records[-1]))

        assert entry["level"] == "WARNING"
        assert entry["error_code"] == "TYPE_MISMATCH"
        assert entry["metric_key"] == "users"

    def test_metric_error(self):
        """Metric errors render through their to_dict form."""
        try:
            raise TypeMismatchError("bad value", key="users")
        except TypeMismatchError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["error"] == {
            "code": "TYPE_MISMATCH",
            "message": "bad value",
            "context": {"key": "users"},
        }

    def test_other_exception(self):
        """Other exceptions render as type and message."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["error"] == {"type": "ValueError", "message": "boom"}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_output(self, root_logger_isolation):
        """JSON format installs the structured formatter."""
        setup_logging(Settings(LOG_LEVEL="debug", LOG_FORMAT="json", SERVICE_NAME="svc"))

        root = root_logger_isolation
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, StructuredFormatter)
        assert formatter.service_name == "svc"

    def test_text_output(self, root_logger_isolation):
        """Text format installs a plain formatter."""
        setup_logging(Settings(LOG_FORMAT="text", LOG_LEVEL="WARNING"))

        root = root_logger_isolation
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_unknown_level_falls_back_to_info(self, root_logger_isolation):
        """An unrecognized level name means INFO."""
        setup_logging(Settings(LOG_LEVEL="chatty"))
        assert root_logger_isolation.level == logging.INFO

    def test_uses_environment_settings(self, root_logger_isolation, monkeypatch):
        """Without arguments the cached settings are used."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        setup_logging()

        assert root_logger_isolation.level == logging.ERROR


class TestSettings:
    """Tests for Settings and get_settings."""

    def test_defaults(self):
        """Defaults match the documented values."""
        settings = Settings()

        assert settings.METRICS_ROLLUP_SECONDS == 10
        assert settings.METRICS_MAX_WEIGHT == 100000
        assert settings.LOG_FORMAT == "json"

    def test_cached(self):
        """get_settings returns one instance until the cache is reset."""
        first = get_settings()
        assert get_settings() is first

        reset_settings_cache()
        assert get_settings() is not first

    def test_environment_override(self, monkeypatch):
        """Environment variables override defaults, case-insensitively."""
        monkeypatch.setenv("metrics_max_weight", "42")
        assert get_settings().METRICS_MAX_WEIGHT == 42


class TestErrors:
    """Tests for metric errors."""

    def test_to_dict(self):
        """Errors carry their code and context."""
        err = TypeMismatchError("nope", key="users", expected="int")

        assert err.to_dict() == {
            "code": "TYPE_MISMATCH",
            "message": "nope",
            "context": {"key": "users", "expected": "int"},
        }

    def test_base_error_code(self):
        """The base error reports an internal error without context."""
        err = MetricError("internal")

        assert err.code == ErrorCode.INTERNAL_ERROR
        assert err.to_dict() == {"code": "INTERNAL_ERROR", "message": "internal"}
