from __future__ import annotations

from prometheus_client import Counter, Histogram, start_http_server

server_requests_total = Counter(
    "gcpal_server_requests_total",
    "Total HTTP requests handled by the sidecar server",
    labelnames=["path", "status"],
)

server_errors_total = Counter(
    "gcpal_server_errors_total",
    "Total errors returned by the sidecar server",
    labelnames=["type"],
)

requests_total = Counter(
    "gcpal_requests_total",
    "Total chat-completion requests sent upstream",
    labelnames=["provider", "status"],
)

request_latency_seconds = Histogram(
    "gcpal_request_latency_seconds",
    "Chat-completion round trip latency",
    buckets=[0.1, 0.3, 0.5, 1, 2, 5, 10, 30, 60],
    labelnames=["provider"],
)


def maybe_start_metrics(*, enable: bool, bind: str, port: int) -> None:
    if not enable:
        return
    start_http_server(port, addr=bind)
