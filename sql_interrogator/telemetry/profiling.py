"""Timing of public interrogator operations.

``@profile_operation(name)`` wraps a function with ``perf_counter_ns``
timing, logs each call at DEBUG and records it in the process-wide
:class:`ProfileCollector`.  The collector keeps the most recent
``max_results`` samples per operation and summarises them on demand::

    @profile_operation("sqli.extract_top_number")
    def extract_top_number(sql):
        ...

    ProfileCollector.get_instance().get_stats("sqli.extract_top_number")
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_MAX_RESULTS = 100


# ---------------------------------------------------------------------------
# Samples and summaries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProfileResult:
    """One timed call."""

    operation: str
    duration_ms: float
    input_chars: int = 0


@dataclass(frozen=True)
class OperationStats:
    """Aggregate timings for one operation name."""

    operation: str
    count: int
    mean_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float
    min_ms: float
    max_ms: float
    total_chars: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Collector (thread-safe singleton)
# ---------------------------------------------------------------------------


class ProfileCollector:
    """Thread-safe store of recent samples per operation.

    Parameters
    ----------
    max_results:
        Samples retained per operation; older ones are discarded.
    """

    _instance: ProfileCollector | None = None
    _instance_lock = threading.Lock()

    def __init__(self, max_results: int = DEFAULT_MAX_RESULTS) -> None:
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")
        self._max_results = max_results
        self._samples: dict[str, deque[ProfileResult]] = {}
        self._lock = threading.Lock()

    @property
    def max_results(self) -> int:
        return self._max_results

    @classmethod
    def get_instance(cls) -> ProfileCollector:
        """Return the singleton, creating it with defaults if needed."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = ProfileCollector()
        return cls._instance

    @classmethod
    def configure(cls, max_results: int) -> ProfileCollector:
        """Replace the singleton with one retaining *max_results* samples."""
        with cls._instance_lock:
            cls._instance = ProfileCollector(max_results=max_results)
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record(self, result: ProfileResult) -> None:
        with self._lock:
            samples = self._samples.get(result.operation)
            if samples is None:
                samples = deque(maxlen=self._max_results)
                self._samples[result.operation] = samples
            samples.append(result)

    def operations(self) -> list[str]:
        """Names of every operation with at least one sample, sorted."""
        with self._lock:
            return sorted(self._samples)

    def get_stats(self, operation: str) -> OperationStats | None:
        """Summarise *operation*, or return ``None`` if it has no samples."""
        with self._lock:
            samples = list(self._samples.get(operation, ()))
        if not samples:
            return None

        durations = sorted(s.duration_ms for s in samples)
        count = len(durations)
        return OperationStats(
            operation=operation,
            count=count,
            mean_ms=round(sum(durations) / count, 3),
            p50_ms=round(percentile(durations, 50), 3),
            p95_ms=round(percentile(durations, 95), 3),
            p99_ms=round(percentile(durations, 99), 3),
            min_ms=round(durations[0], 3),
            max_ms=round(durations[-1], 3),
            total_chars=sum(s.input_chars for s in samples),
        )

    def get_all_stats(self) -> list[OperationStats]:
        """Summaries for every tracked operation, sorted by name."""
        stats = (self.get_stats(op) for op in self.operations())
        return [s for s in stats if s is not None]

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()


def percentile(sorted_data: list[float], p: float) -> float:
    """Return the p-th percentile of *sorted_data* by linear interpolation."""
    if not sorted_data:
        return 0.0
    rank = (p / 100.0) * (len(sorted_data) - 1)
    lower = int(rank)
    upper = min(lower + 1, len(sorted_data) - 1)
    return sorted_data[lower] + (rank - lower) * (sorted_data[upper] - sorted_data[lower])


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------


def profile_operation(name: str) -> Callable[[F], F]:
    """Time every call of the decorated function under *name*.

    The length of a leading ``str`` argument is recorded as the sample's
    ``input_chars``.  Timing is recorded even when the call raises.

    Parameters
    ----------
    name:
        Operation name, e.g. ``"sqli.extract_column_details"``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_ns = time.perf_counter_ns()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
                first = args[0] if args else None
                ProfileCollector.get_instance().record(
                    ProfileResult(
                        operation=name,
                        duration_ms=round(duration_ms, 3),
                        input_chars=len(first) if isinstance(first, str) else 0,
                    )
                )
                logger.debug(
                    "PROFILE %s: %.3f ms",
                    name,
                    duration_ms,
                    extra={"operation": name, "duration_ms": round(duration_ms, 3)},
                )

        return wrapper  # type: ignore[return-value]

    return decorator
