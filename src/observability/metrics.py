"""
Prometheus metrics for the userfeedback service.

Defines and exposes metrics for:
- Feedback operations by outcome (ok, forbidden, not_found, error, ...)
- Feedback operation latency
- Current rating mode

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)


class MetricsCollector:
    """
    Prometheus metrics collector for feedback operations.

    Usage:
        metrics = get_metrics()
        metrics.record_operation("publish", "ok", latency=0.012)
    """

    def __init__(self):
        self.operations = Counter(
            "userfeedback_operations_total",
            "Total user feedback API operations",
            ["operation", "outcome"],
        )

        self.operation_latency = Histogram(
            "userfeedback_operation_latency_seconds",
            "Time spent handling a user feedback API operation",
            ["operation"],
            buckets=LATENCY_BUCKETS,
        )

        self.rating_mode = Gauge(
            "userfeedback_rating_mode_enabled",
            "Whether the advanced rating mode is enabled (1) or not (0)",
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_operation(self, operation: str, outcome: str, latency: float | None = None) -> None:
        """
        Record one handled operation.

        Args:
            operation: Operation name (create, get, list, rating, delete, publish)
            outcome: ok, forbidden, not_found, invalid or error
            latency: Handling time in seconds
        """
        self.operations.labels(operation=operation, outcome=outcome).inc()
        if latency is not None and latency >= 0:
            self.operation_latency.labels(operation=operation).observe(latency)

    def set_rating_mode_enabled(self, enabled: bool) -> None:
        self.rating_mode.set(1 if enabled else 0)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
