"""Prometheus metrics for generated events and hook requests."""
from prometheus_client import Counter, Histogram

usage_events_generated_total = Counter(
    "usage_events_generated_total",
    "Total synthetic usage events generated",
    labelnames=["scale"],
)

usage_hook_requests_total = Counter(
    "usage_hook_requests_total",
    "Total usage hook requests by outcome",
    labelnames=["outcome"],  # success, http_status, timeout, transport
)

usage_hook_request_duration_seconds = Histogram(
    "usage_hook_request_duration_seconds",
    "Usage hook request duration in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)
