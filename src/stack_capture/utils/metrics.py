"""In-process metrics for trace capture.

Counts captured and empty traces, collected frames, source cache hits,
misses and read errors, and redacted context lines, and keeps a duration
histogram of stack walks. Read the values with get_metrics().
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Any


class Counter:
    """A thread-safe, monotonically increasing counter.

    Example:
        counter = Counter("frames_collected", "Total frames collected")
        counter.inc(5)
    """

    def __init__(self, name: str, help_text: str = "") -> None:
        self.name = name
        self.help_text = help_text
        self._value = 0.0
        self._lock = Lock()

    def inc(self, value: float = 1) -> None:
        """Increment the counter.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter can only increase")
        with self._lock:
            self._value += value

    def get(self) -> float:
        with self._lock:
            return self._value


class Histogram:
    """Records observations and summarizes them on demand."""

    def __init__(self, name: str, help_text: str = "") -> None:
        self.name = name
        self.help_text = help_text
        self._observations: list[float] = []
        self._lock = Lock()

    def observe(self, value: float) -> None:
        with self._lock:
            self._observations.append(value)

    def get_stats(self) -> dict[str, float]:
        """Get count, sum, min, max and mean of the observations."""
        with self._lock:
            values = list(self._observations)

        if not values:
            return {"count": 0, "sum": 0, "min": 0, "max": 0, "mean": 0}

        total = sum(values)
        return {
            "count": len(values),
            "sum": total,
            "min": min(values),
            "max": max(values),
            "mean": total / len(values),
        }


class MetricsRegistry:
    """Process-wide registry of capture metrics; reach it via get_metrics()."""

    _instance: MetricsRegistry | None = None
    _lock = Lock()

    def __init__(self) -> None:
        self.traces_captured = Counter(
            "stack_capture_traces_captured_total",
            "Stack traces captured with at least one frame",
        )
        self.traces_empty = Counter(
            "stack_capture_traces_empty_total",
            "Captures that resolved no frames",
        )
        self.frames_collected = Counter(
            "stack_capture_frames_collected_total",
            "Frames collected across all traces",
        )
        self.cache_hits = Counter(
            "stack_capture_source_cache_hits_total",
            "Source line cache hits",
        )
        self.cache_misses = Counter(
            "stack_capture_source_cache_misses_total",
            "Source line cache misses",
        )
        self.source_read_errors = Counter(
            "stack_capture_source_read_errors_total",
            "Source files that could not be read",
        )
        self.secrets_redacted = Counter(
            "stack_capture_secrets_redacted_total",
            "Context lines changed by secret redaction",
        )
        self.capture_duration = Histogram(
            "stack_capture_capture_duration_seconds",
            "Time spent walking a stack and building its frames",
        )

    @classmethod
    def get_instance(cls) -> MetricsRegistry:
        """Get the singleton registry instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton so the next access starts from zero."""
        with cls._lock:
            cls._instance = None


def get_metrics() -> MetricsRegistry:
    return MetricsRegistry.get_instance()


class Timer:
    """Context manager that observes elapsed wall time into a histogram.

    Example:
        with Timer(get_metrics().capture_duration):
            walk_stack()
    """

    def __init__(self, histogram: Histogram) -> None:
        self._histogram = histogram
        self._start: float | None = None

    def __enter__(self) -> Timer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        if self._start is not None:
            self._histogram.observe(time.perf_counter() - self._start)
