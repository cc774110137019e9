"""Prometheus collectors for Revolut API traffic.

Nothing here starts an exporter; the host application exposes the default
registry however it already does (``make_asgi_app``, ``start_http_server``).
"""
from __future__ import annotations

from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Histogram

__all__ = [
    "get_metric",
    "http_requests_total",
    "http_latency_seconds",
    "http_unauthorized_retries_total",
    "oauth_tokens_issued_total",
    "oauth_refresh_errors_total",
]

# Registration helper (module reloads in tests must not register twice)
_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key not in _METRICS:
        _METRICS[key] = cls(name, *args, **kwargs)
    return _METRICS[key]


http_requests_total = get_metric(
    Counter,
    "revolut_http_requests_total",
    "HTTP requests sent to the Revolut API",
    ["method", "endpoint", "status"],
)

http_latency_seconds = get_metric(
    Histogram,
    "revolut_http_latency_seconds",
    "Latency of Revolut API requests in seconds",
    ["method", "endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

http_unauthorized_retries_total = get_metric(
    Counter,
    "revolut_http_unauthorized_retries_total",
    "Requests replayed after a 401 forced a token refresh",
)

oauth_tokens_issued_total = get_metric(
    Counter,
    "revolut_oauth_tokens_issued_total",
    "Access tokens obtained from the token endpoint",
    ["grant"],
)

oauth_refresh_errors_total = get_metric(
    Counter,
    "revolut_oauth_refresh_errors_total",
    "Failed access token refreshes",
    ["reason"],
)
