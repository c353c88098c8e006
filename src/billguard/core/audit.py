"""
Security event logger.

Write-only audit trail shared by the orchestrator, the rate limiters, the
codec and the keyed stores. Every record goes to structlog, to the metrics
collector and to any extra sinks registered by the host. Sink failures are
contained here and never reach the caller.
"""

from typing import Any, Callable, Iterable, List, Optional

import structlog

from ..models.audit import (
    AuditRecord,
    DataAccessRecord,
    SecurityErrorRecord,
    SuspiciousInputRecord,
    ValidationFailureRecord,
)
from .metrics import MetricsCollector

logger = structlog.get_logger(__name__)

AuditSink = Callable[[AuditRecord], None]


def value_length(value: Any) -> int:
    """Length of the string form of a value; the value itself is never logged."""
    if value is None:
        return 0
    try:
        return len(str(value))
    except Exception:
        return 0


class SecurityEventLogger:
    """
    Structured security audit logger.

    Record kinds:
    - validation failure: input failed a field rule
    - suspicious input: malformed data, decode failure, rule exception
    - data access: keyed store reads and writes
    - security error: exceptions caught by a secure error handler
    """

    def __init__(
        self,
        metrics: Optional[MetricsCollector] = None,
        sinks: Iterable[AuditSink] = (),
    ) -> None:
        self.metrics = metrics
        self._sinks: List[AuditSink] = list(sinks)

    def add_sink(self, sink: AuditSink) -> None:
        """Register an extra destination (console, telemetry, test collector)."""
        self._sinks.append(sink)

    def log_validation_failure(self, field: str, value: Any, reason: str) -> None:
        record = ValidationFailureRecord(field=field, value_length=value_length(value), reason=reason)
        self._emit(record, f"Security: Validation failed for {field}", field=field)

    def log_suspicious_input(self, field: str, value: Any, reason: str = "Suspicious input detected") -> None:
        record = SuspiciousInputRecord(field=field, value_length=value_length(value), reason=reason)
        self._emit(record, f"Security: Suspicious input detected in {field}", field=field)

    def log_data_access(self, operation: str, data_type: str) -> None:
        record = DataAccessRecord(operation=operation, subject_type=data_type)
        self._emit(record, f"Security: Data access - {operation}", field=data_type)

    def log_security_error(self, component: str, error: BaseException) -> None:
        record = SecurityErrorRecord(
            component=component,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._emit(record, f"Security: Error in {component}", field=component)

    def _emit(self, record: AuditRecord, event: str, field: str) -> None:
        """Fan a record out to the log, the metrics and the sinks."""
        kind = record.kind.value
        try:
            payload = record.model_dump(mode="json")
            if isinstance(record, DataAccessRecord):
                logger.info(event, **payload)
            else:
                logger.warning(event, **payload)
        except Exception:
            # Logging must never fail the caller
            pass

        if self.metrics is not None:
            try:
                self.metrics.record_security_event(kind=kind, field=field)
            except Exception as e:
                logger.debug("Failed to record security metric", kind=kind, error=str(e))

        for sink in self._sinks:
            try:
                sink(record)
            except Exception as e:
                logger.debug(
                    "Audit sink failed",
                    kind=kind,
                    error=str(e),
                    error_type=type(e).__name__,
                )
