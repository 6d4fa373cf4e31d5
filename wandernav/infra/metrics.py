# wandernav/infra/metrics.py
from __future__ import annotations
import time
from collections import defaultdict
from typing import Dict
from dataclasses import dataclass, field
from wandernav.infra.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Counter:
    """Simple counter metric"""
    value: int = 0

    def inc(self, amount: int = 1) -> None:
        self.value += amount


@dataclass
class Histogram:
    """Track distribution of values (e.g., search latency)"""
    values: list[float] = field(default_factory=list)

    def observe(self, value: float) -> None:
        self.values.append(value)

    def get_stats(self) -> dict:
        if not self.values:
            return {"count": 0, "min": 0, "max": 0, "avg": 0, "p95": 0}

        sorted_values = sorted(self.values)
        count = len(sorted_values)

        def percentile(p: float) -> float:
            idx = int(count * p)
            return sorted_values[min(idx, count - 1)]

        return {
            "count": count,
            "min": sorted_values[0],
            "max": sorted_values[-1],
            "avg": sum(sorted_values) / count,
            "p95": percentile(0.95),
        }


class MetricsCollector:
    """
    Lightweight in-process metrics.

    Everything runs on one event loop, so no locking is needed.
    """

    def __init__(self):
        self._counters: Dict[str, Counter] = defaultdict(Counter)
        self._histograms: Dict[str, Histogram] = defaultdict(Histogram)

    def inc_counter(self, name: str, amount: int = 1, labels: dict | None = None) -> None:
        """Increment a counter metric"""
        self._counters[self._make_key(name, labels)].inc(amount)

    def observe_histogram(self, name: str, value: float, labels: dict | None = None) -> None:
        """Add a value to histogram"""
        self._histograms[self._make_key(name, labels)].observe(value)

    def get_counter(self, name: str, **labels) -> int:
        key = self._make_key(name, labels or None)
        counter = self._counters.get(key)
        return counter.value if counter else 0

    def get_metrics(self) -> dict:
        """Get all current metrics"""
        return {
            "counters": {k: v.value for k, v in self._counters.items()},
            "histograms": {k: v.get_stats() for k, v in self._histograms.items()},
        }

    def reset(self) -> None:
        """Reset all metrics"""
        self._counters.clear()
        self._histograms.clear()
        logger.info("Metrics reset")

    @staticmethod
    def _make_key(name: str, labels: dict | None) -> str:
        """Create a metric key from name and labels"""
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# Global metrics collector
_metrics = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector"""
    return _metrics


def inc_counter(name: str, amount: int = 1, **labels) -> None:
    """Increment a counter metric"""
    _metrics.inc_counter(name, amount, labels or None)


def observe_histogram(name: str, value: float, **labels) -> None:
    """Record a histogram value"""
    _metrics.observe_histogram(name, value, labels or None)


class Timer:
    """Context manager to time operations"""

    def __init__(self, metric_name: str, **labels):
        self.metric_name = metric_name
        self.labels = labels
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            duration = time.monotonic() - self.start_time
            observe_histogram(self.metric_name, duration, **self.labels)


class AppMetrics:
    """Search-screen metrics"""

    @staticmethod
    def search_started(tab: str, context: str) -> None:
        inc_counter("searches_started_total", tab=tab, context=context)

    @staticmethod
    def search_dropped_busy(context: str) -> None:
        inc_counter("searches_dropped_busy_total", context=context)

    @staticmethod
    def search_superseded(context: str) -> None:
        inc_counter("searches_superseded_total", context=context)

    @staticmethod
    def search_fallback(tab: str) -> None:
        inc_counter("search_fallbacks_total", tab=tab)

    @staticmethod
    def location_resolved() -> None:
        inc_counter("location_resolutions_total", outcome="resolved")

    @staticmethod
    def location_failed(reason: str) -> None:
        inc_counter("location_resolutions_total", outcome=reason)

    @staticmethod
    def route_intent_emitted() -> None:
        inc_counter("route_intents_total")

    @staticmethod
    def track_search_time(tab: str) -> Timer:
        return Timer("search_duration_seconds", tab=tab)
