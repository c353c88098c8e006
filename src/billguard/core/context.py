"""
Process-scoped security context.

Holds the collaborators shared by the security layer (settings, audit
logger, metrics, codec, notifier, persistence backend) and builds stores,
limiters, forms and error handlers wired to them.
"""

from typing import Any, Dict, Optional, Type, TypeVar

import structlog

from ..config import Settings
from ..models.notification import Notification, Severity
from .audit import SecurityEventLogger
from .codec import ObfuscationCodec
from .errors import ErrorHandler, create_secure_error_handler
from .forms import SecureForm
from .metrics import MetricsCollector
from .orchestrator import Notifier, ValidationOrchestrator
from .rate_limit import Clock, SlidingWindowRateLimiter, create_rate_limiter
from .storage import StorageBackend
from .store import SecureKeyedStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SecurityContext:
    """
    Shared wiring for the security layer.

    Created once by the host (see bootstrap.create_security_context) and
    passed to whatever needs it. The codec key and the audit sinks are fixed
    after construction.
    """

    def __init__(
        self,
        settings: Settings,
        backend: StorageBackend,
        notifier: Notifier,
        audit: SecurityEventLogger,
        clock: Optional[Clock] = None,
    ) -> None:
        self.settings = settings
        self.backend = backend
        self.notifier = notifier
        self.audit = audit
        self.clock = clock
        self.codec = ObfuscationCodec(settings.security.codec_key, audit)
        self.orchestrator = ValidationOrchestrator(audit, notifier)
        self.form_limiter = self.rate_limiter(
            settings.security.form_max_submissions,
            settings.security.form_window_ms,
        )
        self.security_mode_enabled = settings.security.security_mode_enabled

        logger.info(
            "Security context initialized",
            environment=settings.environment,
            backend=type(backend).__name__,
            security_mode=self.security_mode_enabled,
        )

    @property
    def metrics(self) -> Optional[MetricsCollector]:
        return self.audit.metrics

    def store(
        self,
        key: str,
        fallback: T,
        obfuscate: bool = False,
        value_type: Optional[Type[T]] = None,
    ) -> SecureKeyedStore[T]:
        """Open a keyed store against this context's backend."""
        return SecureKeyedStore(
            key,
            fallback,
            self.backend,
            self.codec,
            self.audit,
            obfuscate=obfuscate,
            value_type=value_type,
        )

    def rate_limiter(self, max_attempts: int, window_ms: float) -> SlidingWindowRateLimiter:
        return create_rate_limiter(max_attempts, window_ms, audit=self.audit, clock=self.clock)

    def secure_form(self, path: str) -> SecureForm:
        """A form gate sharing the context's submission limiter."""
        return SecureForm(
            path,
            self.form_limiter,
            self.orchestrator,
            max_field_length=self.settings.security.form_max_field_length,
        )

    def error_handler(self, component_name: str) -> ErrorHandler:
        return create_secure_error_handler(component_name, self.audit, self.settings.environment)

    def log_security_event(self, event: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Record a host-level security event.

        Critical events are also shown to the user in development.
        """
        details = details or {}
        self.audit.log_data_access(event, str(details.get("type", "unknown")))

        if not self.settings.is_production and details.get("critical"):
            message = details.get("message") or "Check logs for details"
            try:
                self.notifier(
                    Notification(
                        title="Security Event",
                        description=f"{event}: {message}",
                        severity=Severity.DESTRUCTIVE,
                    )
                )
            except Exception as e:
                logger.error("Notifier failed", event=event, error=str(e))

    def enable_security_mode(self) -> None:
        self.security_mode_enabled = True
        self.log_security_event("security_mode_enabled")

    def disable_security_mode(self) -> None:
        self.security_mode_enabled = False
        self.log_security_event("security_mode_disabled", {"critical": True})
