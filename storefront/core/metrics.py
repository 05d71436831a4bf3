"""Prometheus collectors shared by the HTTP layer and services"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "storefront_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "storefront_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
AUTH_EVENTS = Counter(
    "storefront_auth_events_total",
    "Authentication lifecycle events",
    ["event", "outcome"],
)
