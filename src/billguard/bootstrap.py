"""
Application bootstrap.

Configures structured logging and builds the security context from settings.
"""

import logging
from functools import lru_cache
from typing import Any, Iterable, Optional

import structlog
from prometheus_client import REGISTRY, CollectorRegistry

from .config import Settings, get_settings
from .core.audit import AuditSink, SecurityEventLogger
from .core.context import SecurityContext
from .core.metrics import MetricsCollector
from .core.orchestrator import LogNotifier, Notifier, ValidationOutcome
from .core.rate_limit import Clock
from .core.storage import FileBackend, InMemoryBackend, StorageBackend
from .core.validators import Sanitizer, Validator


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structured logging for the application."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_backend(settings: Settings) -> StorageBackend:
    """Build the persistence backend named in settings."""
    if settings.storage.backend == "file":
        return FileBackend(settings.storage.root_path)
    return InMemoryBackend()


def create_security_context(
    settings: Optional[Settings] = None,
    backend: Optional[StorageBackend] = None,
    notifier: Optional[Notifier] = None,
    registry: Optional[CollectorRegistry] = None,
    sinks: Iterable[AuditSink] = (),
    clock: Optional[Clock] = None,
) -> SecurityContext:
    """
    Create a security context.

    Anything not passed in is built from settings: the backend from the
    storage section, a log-based notifier, and metrics on a private registry.
    """
    settings = settings or get_settings()
    metrics = MetricsCollector(registry)
    audit = SecurityEventLogger(metrics=metrics, sinks=sinks)

    return SecurityContext(
        settings=settings,
        backend=backend if backend is not None else create_backend(settings),
        notifier=notifier or LogNotifier(),
        audit=audit,
        clock=clock,
    )


@lru_cache()
def get_security_context() -> SecurityContext:
    """Get the default process context, configuring logging on first use."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    return create_security_context(settings, registry=REGISTRY)


def validate_and_sanitize(
    field: str,
    raw_value: Any,
    validator: Validator,
    sanitizer: Optional[Sanitizer] = None,
    custom_message: Optional[str] = None,
) -> ValidationOutcome:
    """Validate a field with the default context's orchestrator."""
    return get_security_context().orchestrator.validate_and_sanitize(
        field, raw_value, validator, sanitizer, custom_message
    )
