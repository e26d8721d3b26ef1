"""Metrics collector: Prometheus counters and histograms for the explorer.

- ``insight_get_transaction_histogram``
- ``insight_list_transactions_histogram`` (by ``selector``: block / address)
- ``insight_send_transaction_histogram``
- ``insight_upstream_errors_total`` (by ``operation``)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "insight"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`ExplorerMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class ExplorerMetrics:
    """High-level explorer metrics.

    All histograms track operation duration in seconds.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._get_tx = self._collector.histogram(
            f"{_PREFIX}_get_transaction_histogram",
            "Duration of single transaction lookups",
        )
        self._list_txs = self._collector.histogram(
            f"{_PREFIX}_list_transactions_histogram",
            "Duration of paginated transaction listings",
            ("selector",),
        )
        self._send_tx = self._collector.histogram(
            f"{_PREFIX}_send_transaction_histogram",
            "Duration of transaction submissions",
        )
        self._upstream_errors = self._collector.counter(
            f"{_PREFIX}_upstream_errors",
            "Chain-data service failures",
            ("operation",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_upstream_error(self, operation: str) -> None:
        """Count a failed chain-data call."""
        self._upstream_errors.labels(operation=operation).inc()

    # -- Operation trackers (context managers) --

    @contextmanager
    def track_get_transaction(self) -> Iterator[None]:
        """Track the duration of a transaction lookup."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._get_tx.observe(time.monotonic() - start)

    @contextmanager
    def track_list_transactions(self, selector: str) -> Iterator[None]:
        """Track the duration of a listing by ``block`` or ``address``."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._list_txs.labels(selector=selector).observe(time.monotonic() - start)

    @contextmanager
    def track_send_transaction(self) -> Iterator[None]:
        """Track the duration of a transaction submission."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._send_tx.observe(time.monotonic() - start)
