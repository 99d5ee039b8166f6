"""Line encoding for flushed metrics.

One line per metric identity::

    <key>@<unit>:<value>|<type>|#<tags>|T<timestamp>

The ``|#<tags>`` segment is left out when a metric has no tags. Line breaks
left in tag text by the value sanitizer become ``_`` so that every metric
stays on a single line.
"""

from __future__ import annotations

import re
from typing import Iterable

from metricwire.core.metrics_aggregator.core import Metric
from metricwire.core.metrics_aggregator.sanitize import sanitize_key

_LINE_BREAKS = re.compile(r"[\r\n]")


def encode_metric(metric: Metric) -> str:
    """Encode a single metric as one wire line."""
    parts = [
        f"{sanitize_key(metric.key)}@{metric.unit}{metric.serialize_value()}",
        metric.metric_type.value,
    ]
    tags = _LINE_BREAKS.sub("_", metric.serialize_tags())
    if tags:
        parts.append(f"#{tags}")
    parts.append(f"T{metric.timestamp}")
    return "|".join(parts)


def encode_metrics(metrics: Iterable[Metric]) -> str:
    """Encode metrics as newline separated lines, in the given order."""
    return "\n".join(encode_metric(metric) for metric in metrics)
