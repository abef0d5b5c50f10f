"""
Prometheus metrics for Drains API
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
import os

# Build info
BUILD_INFO = Gauge(
    'drains_build_info',
    'Build information',
    ['version']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'drains_http_requests_total',
    'Total number of HTTP requests',
    ['status_class', 'path_group']
)

DRAIN_REQUESTS_TOTAL = Counter(
    'drains_requests_total',
    'Total number of drain POST requests',
    ['category']
)

DRAIN_REJECT_TOTAL = Counter(
    'drains_reject_total',
    'Total number of drain requests rejected during admission',
    ['category', 'reason']
)

DRAIN_EVENTS_TOTAL = Counter(
    'drains_events_ingested_total',
    'Total number of rows handed to the store',
    ['category']
)

DRAIN_DUPLICATES_TOTAL = Counter(
    'drains_duplicate_events_total',
    'Events collapsed onto an earlier event with the same id in one request',
    ['category']
)

DRAIN_BATCHES_TOTAL = Counter(
    'drains_batches_written_total',
    'Total number of upsert batches committed',
    ['category']
)

DRAIN_STORE_ERRORS_TOTAL = Counter(
    'drains_store_errors_total',
    'Total number of failed drain store writes',
    ['category']
)

DRAIN_BODY_BYTES = Histogram(
    'drains_body_bytes',
    'Admitted drain body size in bytes',
    ['category'],
    buckets=[1024, 10240, 102400, 512000, 1024000, 2097152, 4194304, 5000000]
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        self._setup_build_info()

    def _setup_build_info(self):
        """Set up build information gauge."""
        version = os.getenv("APP_VERSION", "dev")
        BUILD_INFO.labels(version=version).set(1)

    def increment_requests(self, status_code: int, path: str = "/unknown"):
        """Increment request counter."""
        # Categorize status codes
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        # Categorize paths
        if path.startswith("/drains"):
            path_group = "drains"
        elif path.startswith("/v1"):
            path_group = "ops"
        else:
            path_group = "other"

        REQUESTS_TOTAL.labels(status_class=status_class, path_group=path_group).inc()

    def increment_drain_requests(self, category: str):
        DRAIN_REQUESTS_TOTAL.labels(category=category).inc()

    def increment_reject(self, category: str, reason: str, count: int = 1):
        DRAIN_REJECT_TOTAL.labels(category=category, reason=reason).inc(count)

    def increment_events_ingested(self, category: str, count: int = 1):
        DRAIN_EVENTS_TOTAL.labels(category=category).inc(count)

    def increment_duplicates(self, category: str, count: int = 1):
        if count > 0:
            DRAIN_DUPLICATES_TOTAL.labels(category=category).inc(count)

    def increment_batches_written(self, category: str, count: int = 1):
        DRAIN_BATCHES_TOTAL.labels(category=category).inc(count)

    def increment_store_errors(self, category: str):
        DRAIN_STORE_ERRORS_TOTAL.labels(category=category).inc()

    def observe_body_bytes(self, category: str, size: int):
        DRAIN_BODY_BYTES.labels(category=category).observe(size)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global instance
prometheus_metrics = PrometheusMetrics()
