"""
Prometheus metrics for order pipeline monitoring.

Tracks:
- Pipeline stage events (start, offline, payment_error, ...)
- Payment charge duration
- Work queue jobs by type
- Audit write failures
- Finalizations still pending after the callback fired
"""
from prometheus_client import Counter, Gauge, Histogram

# Pipeline metrics
order_pipeline_events_total = Counter(
    "order_pipeline_events_total",
    "Total order pipeline stage events",
    ["stage"],  # start, offline, payment_error, notification_error, complete_delayed
)

order_payment_duration_seconds = Histogram(
    "order_payment_duration_seconds",
    "Payment gateway charge duration in seconds",
    ["status"],  # success, failed, timeout
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Queue metrics
order_queue_jobs_total = Counter(
    "order_queue_jobs_total",
    "Total deferred jobs pushed to the work queue",
    ["job_type"],  # order.offline, order.retry
)

# Audit metrics
order_audit_write_failures_total = Counter(
    "order_audit_write_failures_total",
    "Total failed audit log appends",
    ["marker"],  # START, DONE
)

# Finalization metrics
order_pending_finalizations = Gauge(
    "order_pending_finalizations",
    "Number of orders whose delayed finalization has not fired yet",
)


class MetricsCollector:
    """Helper class for collecting metrics."""

    @staticmethod
    def record_stage(stage: str) -> None:
        """Record a pipeline stage event."""
        order_pipeline_events_total.labels(stage=stage).inc()

    @staticmethod
    def record_payment_duration(status: str, duration_seconds: float) -> None:
        """Record payment charge duration."""
        order_payment_duration_seconds.labels(status=status).observe(duration_seconds)

    @staticmethod
    def record_queue_job(job_type: str) -> None:
        """Record a job pushed to the work queue."""
        order_queue_jobs_total.labels(job_type=job_type).inc()

    @staticmethod
    def record_audit_failure(marker: str) -> None:
        """Record a failed audit append."""
        order_audit_write_failures_total.labels(marker=marker).inc()

    @staticmethod
    def set_pending_finalizations(count: int) -> None:
        """Set pending finalization count."""
        order_pending_finalizations.set(count)


# Export singleton instance
metrics = MetricsCollector()
