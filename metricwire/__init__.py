"""metricwire: metric accumulation and StatsD-style wire encoding."""

from metricwire.core.errors import (
    ErrorCode,
    MetricError,
    TypeMismatchError,
    InvalidMetricTypeError,
)
from metricwire.core.logging.structured import setup_logging
from metricwire.core.metrics_aggregator import (
    MetricUnit,
    CustomUnit,
    MetricType,
    Metric,
    CounterMetric,
    GaugeMetric,
    DistributionMetric,
    IntegerSetMetric,
    StringSetMetric,
    new_counter_metric,
    new_gauge_metric,
    new_distribution_metric,
    new_set_metric,
    serialize_tags,
    encode_metric,
    encode_metrics,
    MetricsAggregator,
)

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "MetricError",
    "TypeMismatchError",
    "InvalidMetricTypeError",
    "MetricUnit",
    "CustomUnit",
    "MetricType",
    "Metric",
    "CounterMetric",
    "GaugeMetric",
    "DistributionMetric",
    "IntegerSetMetric",
    "StringSetMetric",
    "new_counter_metric",
    "new_gauge_metric",
    "new_distribution_metric",
    "new_set_metric",
    "serialize_tags",
    "encode_metric",
    "encode_metrics",
    "MetricsAggregator",
    "setup_logging",
]
