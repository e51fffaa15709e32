"""Metrics collector — Prometheus counters, gauges, histograms.

- ``dhr_notifier_events_detected_total`` counter, by event type
- ``dhr_notifier_deliveries_total`` counter, by event type and outcome
- ``dhr_notifier_fetch_failures_total`` counter, by record kind
- ``dhr_notifier_ledger_size`` gauge
- ``dhr_notifier_subscriptions_total`` gauge (enabled / disabled)
- ``dhr_notifier_cron_histogram`` / ``dhr_notifier_cron_last_execution_gauge``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "dhr_notifier"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`NotifierMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class NotifierMetrics:
    """High-level metrics for the poll / dispatch engine."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._events = self._collector.counter(
            f"{_PREFIX}_events_detected",
            "New payment events detected",
            ("event_type",),
        )
        self._deliveries = self._collector.counter(
            f"{_PREFIX}_deliveries",
            "Webhook delivery attempts",
            ("event_type", "outcome"),
        )
        self._fetch_failures = self._collector.counter(
            f"{_PREFIX}_fetch_failures",
            "Failed provider fetches",
            ("kind",),
        )
        self._ledger_size = self._collector.gauge(
            f"{_PREFIX}_ledger_size",
            "Event identities in the dedup ledger",
        )
        self._subscriptions = self._collector.gauge(
            f"{_PREFIX}_subscriptions_total",
            "Notification subscriptions",
            ("state",),
        )

        # Cron metrics
        self._cron_histogram = self._collector.histogram(
            f"{_PREFIX}_cron_histogram",
            "Duration of cron job executions",
            ("job_name",),
        )
        self._cron_last = self._collector.gauge(
            f"{_PREFIX}_cron_last_execution_gauge",
            "Timestamp of last cron execution",
            ("job_name",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_event(self, event_type: str) -> None:
        """Count one newly detected event."""
        self._events.labels(event_type=event_type).inc()

    def record_delivery(self, event_type: str, *, success: bool) -> None:
        """Count one delivery attempt."""
        outcome = "success" if success else "failure"
        self._deliveries.labels(event_type=event_type, outcome=outcome).inc()

    def record_fetch_failure(self, kind: str) -> None:
        """Count one failed provider fetch."""
        self._fetch_failures.labels(kind=kind).inc()

    def set_ledger_size(self, size: int) -> None:
        """Set the number of processed event identities."""
        self._ledger_size.set(size)

    def set_subscription_counts(self, *, enabled: int, disabled: int) -> None:
        """Set the enabled / disabled subscription counts."""
        self._subscriptions.labels(state="enabled").set(enabled)
        self._subscriptions.labels(state="disabled").set(disabled)

    @contextmanager
    def track_cron(self, job_name: str) -> Iterator[None]:
        """Track the duration of a cron job and record last execution time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cron_histogram.labels(job_name=job_name).observe(time.monotonic() - start)
            self._cron_last.labels(job_name=job_name).set(time.time())
