"""
Prometheus metrics collection.

In-memory counters for security events, rate limiting, storage and the
obfuscation codec. Each collector owns its registry unless one is passed in,
so several security contexts can live in one process.
"""

from typing import Optional

import structlog
from prometheus_client import CollectorRegistry, Counter, Info

logger = structlog.get_logger(__name__)


class MetricsCollector:
    """
    Centralized metrics collection for BillGuard.

    Keep metrics simple, use in-memory counters, let the host decide
    whether and how to expose the registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self.service_info = Info(
            "billguard_service",
            "BillGuard service information",
            registry=self.registry,
        )
        self.service_info.info({
            "version": "0.1.0",
            "service": "billguard",
        })

        self.security_events_total = Counter(
            "security_events_total",
            "Total security audit events",
            ["kind", "field"],
            registry=self.registry,
        )

        self.rate_limit_rejections_total = Counter(
            "rate_limit_rejections_total",
            "Total attempts rejected by a rate limiter",
            registry=self.registry,
        )

        self.storage_operations_total = Counter(
            "storage_operations_total",
            "Total keyed store operations",
            ["operation", "outcome"],
            registry=self.registry,
        )

        self.codec_fallbacks_total = Counter(
            "codec_fallbacks_total",
            "Total obfuscation codec fallbacks to plain serialization",
            ["direction"],
            registry=self.registry,
        )

    def record_security_event(self, kind: str, field: str) -> None:
        """Record an audit event."""
        self.security_events_total.labels(kind=kind, field=field).inc()

    def record_rate_limit_rejection(self) -> None:
        self.rate_limit_rejections_total.inc()

    def record_storage_operation(self, operation: str, outcome: str) -> None:
        """Record a store read/write with its outcome (ok, fallback, error, reset)."""
        self.storage_operations_total.labels(operation=operation, outcome=outcome).inc()

    def record_codec_fallback(self, direction: str) -> None:
        self.codec_fallbacks_total.labels(direction=direction).inc()

    def sample(self, name: str, **labels: str) -> float:
        """Current value of a metric sample, 0.0 if it was never recorded."""
        value = self.registry.get_sample_value(name, labels or None)
        return value if value is not None else 0.0
