"""Metrics Aggregator.

Owns the live metrics of each time bucket:
- One metric per (type, key, unit, tags) within a bucket
- Weight tracking for flush decisions
- Flushing of closed buckets
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from metricwire.core.config import get_settings
from metricwire.core.errors import InvalidMetricTypeError, TypeMismatchError
from metricwire.core.metrics_aggregator.core import (
    METRIC_FACTORIES,
    Metric,
    MetricType,
)
from metricwire.core.metrics_aggregator.encoder import encode_metrics
from metricwire.core.metrics_aggregator.units import NO_UNIT, Unit, parse_unit, unit_to_string

logger = logging.getLogger(__name__)


class BucketKey(NamedTuple):
    """Identity of a metric within one bucket.

    Key and tags are the raw values passed to ``add``. Inputs that only
    become equal after sanitization stay separate metrics.
    """
    key: str
    metric_type: str
    unit: str
    tags: Tuple[Tuple[str, str], ...]


def _resolve_type(metric_type: Union[MetricType, str]) -> MetricType:
    try:
        return MetricType(metric_type)
    except ValueError:
        raise InvalidMetricTypeError(
            f"Unknown metric type: {metric_type!r}",
            metric_type=str(metric_type),
        ) from None


class MetricsAggregator:
    """Aggregates observations into per-bucket metrics."""

    def __init__(
        self,
        rollup_seconds: Optional[int] = None,
        max_weight: Optional[int] = None,
    ):
        settings = get_settings()
        self._rollup = (
            settings.METRICS_ROLLUP_SECONDS if rollup_seconds is None else rollup_seconds
        )
        self._max_weight = settings.METRICS_MAX_WEIGHT if max_weight is None else max_weight
        if self._rollup <= 0:
            raise ValueError("rollup_seconds must be positive")
        if self._max_weight <= 0:
            raise ValueError("max_weight must be positive")
        self._buckets: Dict[int, Dict[BucketKey, Metric]] = {}
        self._weight = 0
        self._lock = threading.Lock()

    @property
    def rollup_seconds(self) -> int:
        return self._rollup

    @property
    def max_weight(self) -> int:
        return self._max_weight

    @property
    def weight(self) -> int:
        with self._lock:
            return self._weight

    @property
    def should_flush(self) -> bool:
        return self.weight >= self._max_weight

    def bucket_start(self, timestamp: int) -> int:
        timestamp = int(timestamp)
        return timestamp - timestamp % self._rollup

    def add(
        self,
        metric_type: Union[MetricType, str],
        key: str,
        value: Union[float, int, str],
        unit: Optional[Union[Unit, str]] = None,
        tags: Optional[Mapping[str, str]] = None,
        timestamp: Optional[int] = None,
    ) -> Metric:
        """Record one observation and return the metric it landed in."""
        ty = _resolve_type(metric_type)
        resolved_unit = parse_unit(unit) if unit is not None else NO_UNIT
        tags = dict(tags or {})
        if timestamp is None:
            timestamp = int(time.time())
        start = self.bucket_start(timestamp)
        bucket_key = BucketKey(
            key, ty.value, unit_to_string(resolved_unit), tuple(sorted(tags.items()))
        )

        with self._lock:
            bucket = self._buckets.setdefault(start, {})
            metric = bucket.get(bucket_key)
            try:
                if metric is None:
                    metric = METRIC_FACTORIES[ty](key, resolved_unit, tags, start, value)
                    bucket[bucket_key] = metric
                    self._weight += metric.weight
                    logger.debug(
                        f"Created {ty.name.lower()} metric {key!r} in bucket {start}",
                        extra={"metric_key": key, "metric_type": ty.value, "bucket": start},
                    )
                else:
                    before = metric.weight
                    metric.add(value)
                    self._weight += metric.weight - before
            except TypeMismatchError as e:
                logger.warning(
                    f"Rejected observation for {key!r}: {e}",
                    extra={
                        "metric_key": key,
                        "metric_type": ty.value,
                        "bucket": start,
                        "error_code": e.code.value,
                    },
                )
                raise
            finally:
                if not bucket:
                    del self._buckets[start]

        return metric

    def _closed_starts(self, force: bool, now: Optional[float]) -> List[int]:
        if now is None:
            now = time.time()
        return [
            start
            for start in sorted(self._buckets)
            if force or start + self._rollup <= now
        ]

    def _ordered(self, starts: List[int]) -> List[Metric]:
        return [
            self._buckets[start][bucket_key]
            for start in starts
            for bucket_key in sorted(self._buckets[start])
        ]

    def _drop(self, starts: List[int], metrics: List[Metric], force: bool) -> None:
        for start in starts:
            del self._buckets[start]
        self._weight -= sum(metric.weight for metric in metrics)
        if metrics:
            logger.debug(
                f"Flushed {len(metrics)} metrics (force={force})",
                extra={"metrics_count": len(metrics), "buckets": starts},
            )

    def flush(self, force: bool = False, now: Optional[float] = None) -> List[Metric]:
        """Remove and return metrics from closed buckets (all buckets if forced)."""
        with self._lock:
            starts = self._closed_starts(force, now)
            flushed = self._ordered(starts)
            self._drop(starts, flushed, force)
        return flushed

    def encode(self, force: bool = False, now: Optional[float] = None) -> str:
        """Flush and encode the flushed metrics as wire lines.

        Buckets are only removed once every line has been encoded. If
        encoding fails the aggregator is left as it was.
        """
        with self._lock:
            starts = self._closed_starts(force, now)
            flushed = self._ordered(starts)
            lines = encode_metrics(flushed)
            self._drop(starts, flushed, force)
        return lines

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._buckets.values())
