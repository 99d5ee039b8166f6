"""Metric units.

Built-in units map to fixed lowercase names; anything else is carried as a
custom unit restricted to lowercase ASCII letters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from metricwire.core.metrics_aggregator.sanitize import sanitize_unit


class MetricUnit(str, Enum):
    """Built-in metric units."""

    # Duration units
    NANOSECOND = "nanosecond"
    MICROSECOND = "microsecond"
    MILLISECOND = "millisecond"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    # Information units
    BIT = "bit"
    BYTE = "byte"
    KILOBYTE = "kilobyte"
    KIBIBYTE = "kibibyte"
    MEGABYTE = "megabyte"
    MEBIBYTE = "mebibyte"
    GIGABYTE = "gigabyte"
    GIBIBYTE = "gibibyte"
    TERABYTE = "terabyte"
    TEBIBYTE = "tebibyte"
    PETABYTE = "petabyte"
    PEBIBYTE = "pebibyte"
    EXABYTE = "exabyte"
    EXBIBYTE = "exbibyte"
    # Fraction units
    RATIO = "ratio"
    PERCENT = "percent"


@dataclass(frozen=True)
class CustomUnit:
    """Free-form unit, normalized to ``[a-z]*`` on construction."""

    name: str = field(default="")

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", sanitize_unit(self.name))

    def __str__(self) -> str:
        return self.name


Unit = Union[MetricUnit, CustomUnit]

_BUILTIN_BY_NAME = {unit.value: unit for unit in MetricUnit}


def unit_to_string(unit: Unit) -> str:
    """Return the wire name of a unit."""
    if isinstance(unit, MetricUnit):
        return unit.value
    if isinstance(unit, CustomUnit):
        return unit.name
    raise TypeError(f"Not a metric unit: {unit!r}")


def parse_unit(text: str) -> Unit:
    """Resolve a unit name to a built-in unit, falling back to a custom one."""
    if isinstance(text, (MetricUnit, CustomUnit)):
        return text
    if not isinstance(text, str):
        raise TypeError(f"Unit name must be a string, got {type(text).__name__}")
    builtin = _BUILTIN_BY_NAME.get(text)
    if builtin is not None:
        return builtin
    return CustomUnit(text)


NO_UNIT = CustomUnit("none")
