"""Metrics Aggregator Core.

Provides metric types and their wire serialization:
- Counter, Gauge, Distribution, Set
- Tag serialization
- Value serialization
"""

from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Union

from metricwire.core.errors import TypeMismatchError
from metricwire.core.metrics_aggregator.sanitize import sanitize_key, sanitize_value
from metricwire.core.metrics_aggregator.units import Unit, parse_unit, unit_to_string

# A gauge stores five numbers no matter how many observations it sees.
GAUGE_WEIGHT = 5


class MetricType(str, Enum):
    """Types of metrics."""
    COUNTER = "c"
    GAUGE = "g"
    DISTRIBUTION = "d"
    SET = "s"


def format_float(value: float) -> str:
    """Shortest round-trip decimal for a float, without a trailing ``.0``."""
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text


def serialize_tags(tags: Mapping[str, str]) -> str:
    """Serialize tags as ``k1:v1,k2:v2`` ordered by sanitized key."""
    entries = sorted((sanitize_key(k), k, v) for k, v in tags.items())
    return ",".join(f"{key}:{sanitize_value(value)}" for key, _, value in entries)


class Metric(ABC):
    """Abstract base class for metrics.

    Identity (key, unit, tags, timestamp) is fixed at construction; only the
    accumulated value changes, and only through ``add``. Instances hold no
    lock, so the owner must serialize access.
    """

    def __init__(
        self,
        key: str,
        unit: Union[Unit, str],
        tags: Optional[Mapping[str, str]],
        timestamp: int,
    ):
        self._key = key
        self._unit = parse_unit(unit)
        self._tags: Dict[str, str] = dict(tags or {})
        self._timestamp = int(timestamp)

    @property
    def key(self) -> str:
        """Raw, unsanitized key."""
        return self._key

    @property
    def unit(self) -> str:
        return unit_to_string(self._unit)

    @property
    def tags(self) -> Dict[str, str]:
        return dict(self._tags)

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    @abstractmethod
    def metric_type(self) -> MetricType:
        pass

    @property
    @abstractmethod
    def weight(self) -> int:
        """Cost of this metric towards a flush threshold."""
        pass

    @abstractmethod
    def add(self, value) -> None:
        """Accumulate one observation."""
        pass

    @abstractmethod
    def serialize_value(self) -> str:
        """Serialize the accumulated value, each part prefixed with ``:``."""
        pass

    def serialize_tags(self) -> str:
        return serialize_tags(self._tags)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(key={self._key!r}, unit={self.unit!r}, "
            f"tags={self._tags!r}, timestamp={self._timestamp}, "
            f"value={self.serialize_value()!r})"
        )


class CounterMetric(Metric):
    """Counter metric (running sum)."""

    def __init__(
        self,
        key: str,
        unit: Union[Unit, str],
        tags: Optional[Mapping[str, str]],
        timestamp: int,
        value: float,
    ):
        super().__init__(key, unit, tags, timestamp)
        self._value = float(value)

    @property
    def metric_type(self) -> MetricType:
        return MetricType.COUNTER

    @property
    def weight(self) -> int:
        return 1

    @property
    def value(self) -> float:
        return self._value

    def add(self, value: float) -> None:
        self._value += float(value)

    def serialize_value(self) -> str:
        return f":{format_float(self._value)}"


class GaugeMetric(Metric):
    """Gauge metric tracking last, min, max, sum and count."""

    def __init__(
        self,
        key: str,
        unit: Union[Unit, str],
        tags: Optional[Mapping[str, str]],
        timestamp: int,
        value: float,
    ):
        super().__init__(key, unit, tags, timestamp)
        value = float(value)
        self._last = value
        self._min = value
        self._max = value
        self._sum = value
        self._count = 1.0

    @property
    def metric_type(self) -> MetricType:
        return MetricType.GAUGE

    @property
    def weight(self) -> int:
        return GAUGE_WEIGHT

    @property
    def last(self) -> float:
        return self._last

    @property
    def min(self) -> float:
        return self._min

    @property
    def max(self) -> float:
        return self._max

    @property
    def sum(self) -> float:
        return self._sum

    @property
    def count(self) -> float:
        return self._count

    def add(self, value: float) -> None:
        value = float(value)
        self._last = value
        self._min = min(self._min, value)
        self._max = max(self._max, value)
        self._sum += value
        self._count += 1

    def serialize_value(self) -> str:
        parts = (self._last, self._min, self._max, self._sum, self._count)
        return "".join(f":{format_float(part)}" for part in parts)


class DistributionMetric(Metric):
    """Distribution metric keeping every observation in order."""

    def __init__(
        self,
        key: str,
        unit: Union[Unit, str],
        tags: Optional[Mapping[str, str]],
        timestamp: int,
        value: float,
    ):
        super().__init__(key, unit, tags, timestamp)
        self._values: List[float] = [float(value)]

    @property
    def metric_type(self) -> MetricType:
        return MetricType.DISTRIBUTION

    @property
    def weight(self) -> int:
        return len(self._values)

    @property
    def values(self) -> List[float]:
        return list(self._values)

    def add(self, value: float) -> None:
        self._values.append(float(value))

    def serialize_value(self) -> str:
        return "".join(f":{format_float(v)}" for v in self._values)


class _SetMetric(Metric):
    """Shared behaviour of the two set metrics; element kind is per subclass."""

    _element_name = ""

    def __init__(
        self,
        key: str,
        unit: Union[Unit, str],
        tags: Optional[Mapping[str, str]],
        timestamp: int,
        value,
    ):
        super().__init__(key, unit, tags, timestamp)
        self._check(value)
        self._values = {value}

    @property
    def metric_type(self) -> MetricType:
        return MetricType.SET

    @property
    def weight(self) -> int:
        return len(self._values)

    @property
    def values(self) -> FrozenSet:
        return frozenset(self._values)

    @staticmethod
    @abstractmethod
    def _accepts(value) -> bool:
        pass

    @staticmethod
    @abstractmethod
    def _render(value) -> str:
        pass

    def _check(self, value) -> None:
        if not self._accepts(value):
            raise TypeMismatchError(
                f"{type(self).__name__} {self._key!r} holds {self._element_name} "
                f"elements, got {type(value).__name__}",
                key=self._key,
                expected=self._element_name,
                got=type(value).__name__,
            )

    def add(self, value) -> None:
        self._check(value)
        self._values.add(value)

    def serialize_value(self) -> str:
        return "".join(f":{self._render(v)}" for v in sorted(self._values))


class IntegerSetMetric(_SetMetric):
    """Set metric over integers, serialized as their decimal values."""

    _element_name = "int"

    @staticmethod
    def _accepts(value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    @staticmethod
    def _render(value: int) -> str:
        return str(value)


class StringSetMetric(_SetMetric):
    """Set metric over strings, serialized as CRC-32 of each member."""

    _element_name = "str"

    @staticmethod
    def _accepts(value) -> bool:
        return isinstance(value, str)

    @staticmethod
    def _render(value: str) -> str:
        return str(crc32_hash(value))

    def _check(self, value) -> None:
        super()._check(value)
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise TypeMismatchError(
                f"{type(self).__name__} {self._key!r} holds UTF-8 encodable "
                f"strings, got {value!r}",
                key=self._key,
                expected=self._element_name,
                got="unencodable str",
            ) from e


def crc32_hash(value: str) -> int:
    """CRC-32/ISO-HDLC of the UTF-8 bytes, as an unsigned 32-bit integer."""
    return zlib.crc32(value.encode("utf-8")) & 0xFFFFFFFF


def new_counter_metric(
    key: str,
    unit: Union[Unit, str],
    tags: Optional[Mapping[str, str]],
    timestamp: int,
    value: float,
) -> CounterMetric:
    return CounterMetric(key, unit, tags, timestamp, value)


def new_gauge_metric(
    key: str,
    unit: Union[Unit, str],
    tags: Optional[Mapping[str, str]],
    timestamp: int,
    value: float,
) -> GaugeMetric:
    return GaugeMetric(key, unit, tags, timestamp, value)


def new_distribution_metric(
    key: str,
    unit: Union[Unit, str],
    tags: Optional[Mapping[str, str]],
    timestamp: int,
    value: float,
) -> DistributionMetric:
    return DistributionMetric(key, unit, tags, timestamp, value)


def new_set_metric(
    key: str,
    unit: Union[Unit, str],
    tags: Optional[Mapping[str, str]],
    timestamp: int,
    value: Union[int, str],
) -> _SetMetric:
    """Create a set metric whose element kind follows the first value."""
    if IntegerSetMetric._accepts(value):
        return IntegerSetMetric(key, unit, tags, timestamp, value)
    if StringSetMetric._accepts(value):
        return StringSetMetric(key, unit, tags, timestamp, value)
    raise TypeMismatchError(
        f"Set metric {key!r} needs an int or str value, got {type(value).__name__}",
        key=key,
        expected="int|str",
        got=type(value).__name__,
    )


METRIC_FACTORIES: Dict[MetricType, Callable[..., Metric]] = {
    MetricType.COUNTER: new_counter_metric,
    MetricType.GAUGE: new_gauge_metric,
    MetricType.DISTRIBUTION: new_distribution_metric,
    MetricType.SET: new_set_metric,
}
