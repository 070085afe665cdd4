"""Simple in-process metrics for the command processor."""
from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

HISTOGRAM_WINDOW = 100


class MetricsCollector:
    """Thread-safe counters and rolling histograms."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._counters: dict[str, float] = defaultdict(float)
        self._histograms: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] += value

    def histogram(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        key = self._make_key(name, labels)
        with self._lock:
            self._histograms[key].append(value)
            if len(self._histograms[key]) > HISTOGRAM_WINDOW:
                self._histograms[key] = self._histograms[key][-HISTOGRAM_WINDOW:]

    @contextmanager
    def timer(self, name: str, labels: dict[str, str] | None = None) -> Generator[None, None, None]:
        """Time a block and record it as ``<name>_duration_ms``."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.histogram(f"{name}_duration_ms", elapsed_ms, labels)

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> float:
        key = self._make_key(name, labels)
        with self._lock:
            return self._counters.get(key, 0.0)

    def get_histogram_stats(self, name: str, labels: dict[str, str] | None = None) -> dict[str, float]:
        """count, min, max, avg and p95 over the rolling window."""
        key = self._make_key(name, labels)
        with self._lock:
            values = sorted(self._histograms.get(key, []))
        if not values:
            return {}
        count = len(values)
        return {
            "count": count,
            "min": values[0],
            "max": values[-1],
            "avg": sum(values) / count,
            "p95": values[int(count * 0.95)] if count > 1 else values[-1],
        }

    def get_all_metrics(self) -> dict[str, Any]:
        with self._lock:
            keys = list(self._histograms.keys())
            counters = dict(self._counters)
        return {
            "counters": counters,
            "histograms": {k: self.get_histogram_stats(k) for k in keys},
        }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


metrics = MetricsCollector()


def record_command(verb: str, outcome: str) -> None:
    metrics.increment("commands_total", labels={"verb": verb, "outcome": outcome})


def record_resolution(found: bool) -> None:
    metrics.increment("item_resolution_total", labels={"status": "found" if found else "missing"})


def record_grant_lines(count: int) -> None:
    metrics.increment("grant_lines_total", float(count))


def format_metrics_lines() -> list[str]:
    data = metrics.get_all_metrics()
    lines = []
    for name, value in sorted(data["counters"].items()):
        lines.append(f"{name}: {value:.0f}")
    for name, stats in sorted(data["histograms"].items()):
        if stats:
            lines.append(f"{name}: avg={stats['avg']:.1f} p95={stats['p95']:.1f} (n={stats['count']:.0f})")
    return lines
