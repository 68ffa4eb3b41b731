"""Prometheus metrics for monitoring risk outcomes, alerts, and collaborator health"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "momo_analysis_total",
    "Transactions analyzed",
    ["risk_level"],  # LOW | MEDIUM | HIGH | CRITICAL
)

alert_counter = Counter(
    "momo_alerts_total",
    "Transactions flagged for a user alert",
)

segments_rejected_counter = Counter(
    "momo_segments_rejected_total",
    "SMS messages in which no transaction could be parsed",
)

# Collaborator metrics
enrichment_failures_counter = Counter(
    "momo_enrichment_failures_total",
    "Failed history/blacklist reads (analysis degraded)",
    ["source"],  # history | blacklist
)

audit_write_failures_counter = Counter(
    "momo_audit_write_failures_total",
    "Audit entries that could not be stored",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(risk_level: str, should_alert: bool) -> None:
    """Record one transaction's outcome for monitoring the risk distribution"""
    analysis_counter.labels(risk_level=risk_level).inc()
    if should_alert:
        alert_counter.inc()
