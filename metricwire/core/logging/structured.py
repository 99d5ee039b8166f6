"""JSON logging for metric aggregation.

The aggregator attaches its context to log records through ``extra=``;
``StructuredFormatter`` lifts those attributes into top-level JSON fields.
Applications call ``setup_logging()`` once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Optional

from metricwire.core.config import Settings, get_settings
from metricwire.core.errors import MetricError

# Record attributes set by metricwire loggers
RECORD_FIELDS = (
    "metric_key",
    "metric_type",
    "bucket",
    "buckets",
    "metrics_count",
    "error_code",
)


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(self, service_name: str = "metricwire", environment: str = "production"):
        super().__init__()
        self.service_name = service_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
        }
        for attr in RECORD_FIELDS:
            if hasattr(record, attr):
                data[attr] = getattr(record, attr)

        if record.exc_info and record.exc_info[1] is not None:
            err = record.exc_info[1]
            if isinstance(err, MetricError):
                data["error"] = err.to_dict()
            else:
                data["error"] = {"type": type(err).__name__, "message": str(err)}
        return json.dumps(data, ensure_ascii=False, default=str)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Install a single stdout handler on the root logger."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(
            StructuredFormatter(
                service_name=settings.SERVICE_NAME,
                environment=settings.ENVIRONMENT,
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]
