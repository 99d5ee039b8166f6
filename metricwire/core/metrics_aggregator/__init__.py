"""Metrics Aggregator Module.

Provides metric accumulation and wire encoding:
- Counter, Gauge, Distribution, Set
- Units and sanitization
- Bucketed aggregation and line encoding
"""

from metricwire.core.metrics_aggregator.units import (
    MetricUnit,
    CustomUnit,
    Unit,
    NO_UNIT,
    unit_to_string,
    parse_unit,
)
from metricwire.core.metrics_aggregator.sanitize import (
    sanitize_key,
    sanitize_value,
    sanitize_unit,
)
from metricwire.core.metrics_aggregator.core import (
    GAUGE_WEIGHT,
    MetricType,
    Metric,
    CounterMetric,
    GaugeMetric,
    DistributionMetric,
    IntegerSetMetric,
    StringSetMetric,
    format_float,
    serialize_tags,
    crc32_hash,
    new_counter_metric,
    new_gauge_metric,
    new_distribution_metric,
    new_set_metric,
    METRIC_FACTORIES,
)
from metricwire.core.metrics_aggregator.encoder import (
    encode_metric,
    encode_metrics,
)
from metricwire.core.metrics_aggregator.aggregator import (
    BucketKey,
    MetricsAggregator,
)

__all__ = [
    # Units
    "MetricUnit",
    "CustomUnit",
    "Unit",
    "NO_UNIT",
    "unit_to_string",
    "parse_unit",
    # Sanitizers
    "sanitize_key",
    "sanitize_value",
    "sanitize_unit",
    # Core
    "GAUGE_WEIGHT",
    "MetricType",
    "Metric",
    "CounterMetric",
    "GaugeMetric",
    "DistributionMetric",
    "IntegerSetMetric",
    "StringSetMetric",
    "format_float",
    "serialize_tags",
    "crc32_hash",
    "new_counter_metric",
    "new_gauge_metric",
    "new_distribution_metric",
    "new_set_metric",
    "METRIC_FACTORIES",
    # Encoding and aggregation
    "encode_metric",
    "encode_metrics",
    "BucketKey",
    "MetricsAggregator",
]
