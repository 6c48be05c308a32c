"""
Prometheus metrics for the gateway.

This module does NOT start an HTTP exporter. The MCP server runs over stdio,
so metrics are scraped only when METRICS_HTTP_SERVER=1 is set and
maybe_start_http_server() is called by the entrypoint.
"""
from __future__ import annotations

import os
import threading
from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Gauge, Histogram, start_http_server

__all__ = [
    "get_metric",
    "maybe_start_http_server",
    "oauth_tokens_issued_total",
    "oauth_exchange_errors_total",
    "oauth_token_expiry_seconds",
    "oauth_invalidations_total",
    "http_requests_total",
    "http_latency_seconds",
    "operation_results_total",
]

_DEFAULT_PORT = 8001
_exporter_lock = threading.Lock()
_exporter_port: int | None = None

# one collector per metric name; re-importing a module must not register twice
_COLLECTORS: Dict[str, Any] = {}


def get_metric(
    cls: Type[Any],
    name: str,
    documentation: str,
    labels: Tuple[str, ...] | list = (),
    **kwargs: Any,
) -> Any:
    """Return the collector registered as *name*, creating it on first use."""

    existing = _COLLECTORS.get(name)
    if existing is not None:
        if not isinstance(existing, cls):
            raise TypeError(f"metric {name!r} already registered as {type(existing).__name__}")
        return existing
    collector = cls(name, documentation, list(labels), **kwargs)
    _COLLECTORS[name] = collector
    return collector


def maybe_start_http_server() -> bool:
    """Expose /metrics on ``METRICS_PORT`` when ``METRICS_HTTP_SERVER=1``.

    Safe to call repeatedly; the exporter starts at most once per process.
    Returns whether an exporter is running.
    """

    global _exporter_port
    if os.getenv("METRICS_HTTP_SERVER") != "1":
        return _exporter_port is not None
    with _exporter_lock:
        if _exporter_port is None:
            port = int(os.getenv("METRICS_PORT", str(_DEFAULT_PORT)))
            start_http_server(port)
            _exporter_port = port
    return True


# credential lifecycle
oauth_tokens_issued_total = get_metric(
    Counter,
    "paypal_oauth_tokens_issued_total",
    "OAuth access tokens obtained from PayPal",
    ["environment"],
)

oauth_exchange_errors_total = get_metric(
    Counter,
    "paypal_oauth_exchange_errors_total",
    "Failed client-credentials exchanges",
    ["environment", "reason"],
)

oauth_token_expiry_seconds = get_metric(
    Gauge,
    "paypal_oauth_token_expiry_seconds",
    "Seconds until the current access token expires (at issuance)",
    ["environment"],
)

oauth_invalidations_total = get_metric(
    Counter,
    "paypal_oauth_invalidations_total",
    "Cached access tokens discarded after provider rejection",
    ["environment"],
)

# outbound calls and operation outcomes
http_requests_total = get_metric(
    Counter,
    "paypal_http_requests_total",
    "HTTP requests to PayPal",
    ["endpoint", "method", "status"],
)

http_latency_seconds = get_metric(
    Histogram,
    "paypal_http_latency_seconds",
    "Latency for PayPal HTTP requests",
    ["endpoint"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30),
)

operation_results_total = get_metric(
    Counter,
    "paypal_operation_results_total",
    "Gateway operation outcomes",
    ["operation", "result"],
)
