"""Shared error codes and exceptions for metric accumulation.

Accumulation and serialization do not fail for well-typed input; the
exceptions here cover the contract violations callers can actually hit.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict


class ErrorCode(str, Enum):
    TYPE_MISMATCH = "TYPE_MISMATCH"  # Set element kind differs from the set's kind
    INVALID_METRIC_TYPE = "INVALID_METRIC_TYPE"  # Unknown metric type letter
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MetricError(Exception):
    """Base exception for metric errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.context:
            result["context"] = self.context
        return result


class TypeMismatchError(MetricError, TypeError):
    """Value kind does not match the kind fixed at construction."""

    code = ErrorCode.TYPE_MISMATCH


class InvalidMetricTypeError(MetricError, ValueError):
    """Metric type is not one of the known kinds."""

    code = ErrorCode.INVALID_METRIC_TYPE


__all__ = ["ErrorCode", "MetricError", "TypeMismatchError", "InvalidMetricTypeError"]
