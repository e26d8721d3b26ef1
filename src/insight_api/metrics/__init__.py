"""Metrics: Prometheus metrics collection and exposure."""

from __future__ import annotations

from insight_api.metrics.collector import ExplorerMetrics, MetricsCollector

__all__ = ["ExplorerMetrics", "MetricsCollector"]
