"""Observability layer: in-memory metrics. No external exporters."""

from placement.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
