"""Profiling and structured logging support."""

from sql_interrogator.telemetry.json_formatter import JSONFormatter
from sql_interrogator.telemetry.profiling import (
    OperationStats,
    ProfileCollector,
    ProfileResult,
    profile_operation,
)

__all__ = [
    "JSONFormatter",
    "OperationStats",
    "ProfileCollector",
    "ProfileResult",
    "profile_operation",
]
