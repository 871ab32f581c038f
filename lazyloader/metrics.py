"""
Fetch counters backed by prometheus_client.

LazyLoader marks a meter on every fetch it issues. Nothing in the loader reads
the values back, they exist for whoever owns the MeterManager and scrapes its
registry.
"""

import re
import threading
import time

from prometheus_client import CollectorRegistry, Counter, generate_latest

# Prometheus metric names only allow [a-zA-Z0-9_:]
_INVALID_METRIC_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def metric_name(name: str) -> str:
    """Turns a meter name such as "users.lazy_load_batch" into a valid metric name."""
    cleaned = _INVALID_METRIC_CHARS.sub("_", name)
    if cleaned.endswith("_total"):
        cleaned = cleaned[: -len("_total")]
    if not cleaned or cleaned[0].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


class RateMeter:
    """A named prometheus Counter that also reports its rate since creation."""

    def __init__(self, name: str, registry: CollectorRegistry | None = None) -> None:
        self.name = name
        self.metric_name = metric_name(name)
        self.registry = registry if registry is not None else CollectorRegistry()
        self._counter = Counter(
            self.metric_name,
            f"Fetches recorded under '{name}'",
            registry=self.registry,
        )
        self._created_at = time.monotonic()

    @property
    def count(self) -> int:
        value = self.registry.get_sample_value(f"{self.metric_name}_total")
        return int(value or 0)

    def mark(self, count: int = 1) -> None:
        self._counter.inc(count)

    def rate(self) -> float:
        """Events per second since the meter was created."""
        elapsed = time.monotonic() - self._created_at
        if elapsed <= 0:
            return 0.0
        return self.count / elapsed

    def __repr__(self) -> str:
        return f"RateMeter(name={self.name!r}, count={self.count})"


class MeterManager:
    """
    Registry of named RateMeters sharing one CollectorRegistry.

    Usage:
        manager = MeterManager()
        meter = manager.meter("users.lazy_load_batch")
        manager.increment_rate_meter(meter, 1)
        payload = manager.exposition()
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        # Separate from the process-wide default registry
        self.registry = registry if registry is not None else CollectorRegistry()
        self._meters: dict[str, RateMeter] = {}
        self._lock = threading.Lock()

    def meter(self, name: str) -> RateMeter:
        """Returns the meter registered under name, creating it on first use."""
        with self._lock:
            meter = self._meters.get(name)
            if meter is None:
                meter = RateMeter(name, registry=self.registry)
                self._meters[name] = meter
            return meter

    def increment_rate_meter(self, meter: RateMeter | None, count: int = 1) -> None:
        """Marks meter by count. A missing meter is ignored."""
        if meter is None:
            return
        meter.mark(count)

    def meters(self) -> dict[str, int]:
        """Snapshot of meter name -> count."""
        with self._lock:
            return {name: meter.count for name, meter in self._meters.items()}

    def exposition(self) -> bytes:
        """Prometheus text format of every meter in the registry."""
        return generate_latest(self.registry)
