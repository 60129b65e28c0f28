"""
Prometheus metrics for publish runs.

Metrics Provided:
    - models_processed_total: Counter of models by outcome (uploaded/failed/skipped)
    - thumbnail_renders_total: Counter of renderer invocations by status
    - upload_requests_total: Counter of upload requests by status
    - upload_bytes_total: Counter of bytes sent in model payloads
    - upload_duration_seconds: Histogram of upload request latency

Usage:
    from fuel_publisher.utils.metrics import get_metrics

    metrics = get_metrics()
    with metrics.track_upload():
        result = upload_model(payload, config)

    # Expose on :9090/metrics while a long batch is running
    start_metrics_server(port=9090)
"""

import os
from contextlib import nullcontext
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    REGISTRY,
    CollectorRegistry,
    start_http_server,
)

from fuel_publisher.utils.logging import get_logger

logger = get_logger(__name__)


class PublisherMetrics:
    """
    Centralized Prometheus metrics for the publisher.

    Example:
        >>> metrics = PublisherMetrics(registry=CollectorRegistry())
        >>> metrics.record_model_outcome("uploaded")
    """

    def __init__(
        self, enabled: bool = True, registry: Optional[CollectorRegistry] = None
    ) -> None:
        """
        Initialize metrics collectors.

        Args:
            enabled: Whether metrics collection is enabled
            registry: Custom Prometheus registry (uses default if None)
        """
        self.enabled = enabled
        self.registry = registry if registry is not None else REGISTRY

        if not self.enabled:
            logger.debug("Metrics collection disabled")
            return

        self.models_processed = Counter(
            name="models_processed_total",
            documentation="Total number of model directories processed",
            labelnames=["status"],  # uploaded, failed, skipped
            registry=self.registry,
        )

        self.thumbnail_renders = Counter(
            name="thumbnail_renders_total",
            documentation="Total number of thumbnail renderer invocations",
            labelnames=["status"],  # success, failure
            registry=self.registry,
        )

        self.upload_requests = Counter(
            name="upload_requests_total",
            documentation="Total number of model upload requests",
            labelnames=["status"],  # success, failure
            registry=self.registry,
        )

        self.upload_bytes = Counter(
            name="upload_bytes_total",
            documentation="Total bytes of model files sent",
            registry=self.registry,
        )

        self.upload_duration = Histogram(
            name="upload_duration_seconds",
            documentation="Time spent in upload requests",
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry,
        )

    def track_upload(self):
        """Context manager timing one upload request."""
        if not self.enabled:
            return nullcontext()
        return self.upload_duration.time()

    def record_model_outcome(self, status: str) -> None:
        """Record the terminal state of one model (uploaded, failed, skipped)."""
        if not self.enabled:
            return
        self.models_processed.labels(status=status).inc()

    def record_thumbnail(self, success: bool) -> None:
        if not self.enabled:
            return
        self.thumbnail_renders.labels(status="success" if success else "failure").inc()

    def record_upload_success(self, bytes_uploaded: int) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="success").inc()
        self.upload_bytes.inc(bytes_uploaded)

    def record_upload_failure(self) -> None:
        if not self.enabled:
            return
        self.upload_requests.labels(status="failure").inc()


# Global metrics instance (singleton)
_metrics_instance: Optional[PublisherMetrics] = None


def get_metrics() -> PublisherMetrics:
    """
    Get global metrics instance (singleton).

    Collection can be switched off with METRICS_ENABLED=false.
    """
    global _metrics_instance

    if _metrics_instance is None:
        enabled = os.getenv("METRICS_ENABLED", "true").lower() == "true"
        _metrics_instance = PublisherMetrics(enabled=enabled)

    return _metrics_instance


def start_metrics_server(port: int = 9090, addr: str = "0.0.0.0") -> None:
    """
    Start the Prometheus exporter in a daemon thread.

    Args:
        port: Port to listen on (default: 9090)
        addr: Address to bind to (default: all interfaces)
    """
    logger.info(f"Starting Prometheus metrics server on {addr}:{port}")
    start_http_server(port=port, addr=addr)
