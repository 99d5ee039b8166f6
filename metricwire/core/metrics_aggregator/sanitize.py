"""Sanitizers for metric keys, tag values and custom units.

Disallowed characters in keys and tag values collapse to a single
underscore per run; disallowed characters in units are dropped.
"""

from __future__ import annotations

import re

_KEY_DISALLOWED = re.compile(r"[^a-zA-Z0-9_/.-]+")
_VALUE_DISALLOWED = re.compile(r"[^\w\d\s_:/@\.{}\[\]$-]+", re.UNICODE)
_UNIT_DISALLOWED = re.compile(r"[^a-z]+")


def sanitize_key(value: str) -> str:
    """Sanitize a metric key or tag key."""
    return _KEY_DISALLOWED.sub("_", value)


def sanitize_value(value: str) -> str:
    """Sanitize a tag value."""
    return _VALUE_DISALLOWED.sub("_", value)


def sanitize_unit(value: str) -> str:
    """Strip everything except lowercase ASCII letters from a unit name."""
    return _UNIT_DISALLOWED.sub("", value)
