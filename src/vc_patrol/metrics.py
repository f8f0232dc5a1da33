"""Prometheus metrics for the patroller."""

from __future__ import annotations

from collections import Counter as _Tally
from threading import Lock
from typing import Dict, List, Tuple

from prometheus_client import Counter, Gauge, Histogram

from .ports import MetricsSink

checker_missmatch_stats = Gauge(
    "checker_missmatch_stats",
    "Number of objects whose tenant copy differs from the super cluster",
    ["counter_name"],
)

checker_remedy_stats = Counter(
    "checker_remedy_stats",
    "Remedy actions issued by the patroller",
    ["type"],
)

checker_scan_duration = Histogram(
    "checker_scan_duration_seconds",
    "Duration of one patrol pass in seconds",
    ["resource"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0],
)


class PrometheusMetricsSink(MetricsSink):
    def set_gauge(self, name: str, value: float) -> None:
        checker_missmatch_stats.labels(counter_name=name).set(value)

    def inc_counter(self, name: str, label: str) -> None:
        checker_remedy_stats.labels(type=label).inc()

    def observe_duration(self, resource: str, seconds: float) -> None:
        checker_scan_duration.labels(resource=resource).observe(seconds)


class RecordingMetricsSink(MetricsSink):
    """In-memory sink used by tests and the lab runtime."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.gauges: Dict[str, float] = {}
        self.gauge_history: List[Tuple[str, float]] = []
        self.counters: _Tally = _Tally()
        self.durations: List[Tuple[str, float]] = []

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self.gauges[name] = value
            self.gauge_history.append((name, value))

    def inc_counter(self, name: str, label: str) -> None:
        with self._lock:
            self.counters[label] += 1

    def observe_duration(self, resource: str, seconds: float) -> None:
        with self._lock:
            self.durations.append((resource, seconds))
