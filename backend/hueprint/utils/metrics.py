"""
Hueprint Metrics Collection
In-process counters and timing series for the palette extraction pipeline.
"""
import time
from collections import Counter, defaultdict
from contextlib import contextmanager
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional

import numpy as np

REQUESTS_TOTAL = "palette_requests_total"
GRAYSCALE_TOTAL = "palette_grayscale_total"
REJECTED_PREFIX = "palette_rejected_total_"


def summarize(values: List[float]) -> Dict[str, float]:
    """count/mean/min/max/p50/p95 of a series (linear-interpolated percentiles)."""
    data = np.asarray(values, dtype=np.float64)
    p50, p95 = np.percentile(data, [50, 95])
    return {
        "count": int(data.size),
        "mean": float(data.mean()),
        "min": float(data.min()),
        "max": float(data.max()),
        "p50": float(p50),
        "p95": float(p95),
    }


class MetricsCollector:
    """Thread-safe collector shared by the orchestrator and the metrics endpoint."""

    def __init__(self):
        self._lock = Lock()
        self._counters: Dict[str, int] = Counter()
        self._series: Dict[str, List[float]] = defaultdict(list)
        self._start_time = time.time()

    def _increment(self, name: str) -> None:
        with self._lock:
            self._counters[name] += 1

    def _append(self, series: str, value: float) -> None:
        with self._lock:
            self._series[series].append(float(value))

    def increment_request_count(self):
        self._increment(REQUESTS_TOTAL)

    def increment_rejection_count(self, error_code: str):
        """Count a validation rejection under its error code."""
        self._increment(REJECTED_PREFIX + error_code)

    def increment_grayscale_count(self):
        self._increment(GRAYSCALE_TOTAL)

    def record_timing(self, operation: str, duration_ms: float):
        self._append(f"{operation}_duration_ms", duration_ms)

    @contextmanager
    def timed(self, operation: str) -> Iterator[Dict[str, float]]:
        """
        Time the enclosed block and record it under ``<operation>_duration_ms``.

        Yields a dict whose ``ms`` key holds the elapsed milliseconds once the
        block exits, so callers can also log the value.
        """
        timing = {"ms": 0.0}
        start = time.perf_counter()
        try:
            yield timing
        finally:
            timing["ms"] = (time.perf_counter() - start) * 1000
            self.record_timing(operation, timing["ms"])

    def record_palette_size(self, size: int):
        self._append("palette_size", size)

    def get_counters(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def get_timing_stats(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {
                name: summarize(values)
                for name, values in self._series.items()
                if name.endswith("_duration_ms") and values
            }

    def get_palette_size_stats(self) -> Dict[str, float]:
        with self._lock:
            sizes = self._series.get("palette_size")
            return summarize(sizes) if sizes else {}

    def get_uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """Snapshot served by GET /v1/metrics."""
        return {
            "uptime_seconds": self.get_uptime_seconds(),
            "counters": self.get_counters(),
            "timing_stats": self.get_timing_stats(),
            "palette_size_stats": self.get_palette_size_stats(),
        }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._series.clear()
            self._start_time = time.time()


_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    """Get or create the process-wide collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    if _metrics is not None:
        _metrics.reset()
