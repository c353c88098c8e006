"""
Validation orchestrator.

Runs one field through its sanitizer and validator, records failures in the
audit log and notifies the user. Never raises for bad input.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

import structlog

from ..models.notification import Notification, Severity
from .audit import SecurityEventLogger
from .exceptions import ValidationError
from .validators import FieldKind, Sanitizer, Validator, get_rule

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Notifier = Callable[[Notification], None]

SECURITY_ERROR_MESSAGE = "Invalid input detected. Please try again."


@dataclass
class ValidationOutcome(Generic[T]):
    """Result of validating one field. value is the sanitized value, valid or not."""

    is_valid: bool
    value: Optional[T]

    def unwrap(self, field: str = "value") -> T:
        """Return the value, raising ValidationError if it was rejected."""
        if not self.is_valid:
            raise ValidationError(f"Invalid {field}", details={"field": field})
        return self.value  # type: ignore[return-value]


class LogNotifier:
    """Notifier that writes notifications to the structured log."""

    def __call__(self, notification: Notification) -> None:
        logger.info(
            "User notification",
            title=notification.title,
            description=notification.description,
            severity=notification.severity.value,
        )


class CollectingNotifier:
    """Notifier that keeps notifications for the host to render later."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def clear(self) -> None:
        self.notifications.clear()


class ValidationOrchestrator:
    """Glues validator, sanitizer, audit logger and notifier into one call."""

    def __init__(self, audit: SecurityEventLogger, notifier: Notifier) -> None:
        self.audit = audit
        self.notifier = notifier

    def validate_and_sanitize(
        self,
        field: str,
        raw_value: Any,
        validator: Validator,
        sanitizer: Optional[Sanitizer] = None,
        custom_message: Optional[str] = None,
    ) -> ValidationOutcome:
        """
        Sanitize then validate a raw field value.

        Args:
            field: Field name used in audit records and the default message
            raw_value: Value as entered by the user
            validator: Predicate applied to the sanitized value
            sanitizer: Optional transform applied first
            custom_message: Message shown instead of the default on failure

        Returns:
            ValidationOutcome carrying the sanitized value, or None if a rule
            raised
        """
        try:
            sanitized = sanitizer(raw_value) if sanitizer is not None else raw_value
            is_valid = bool(validator(sanitized))
        except Exception as e:
            logger.warning(
                "Validation rule raised",
                field=field,
                error_type=type(e).__name__,
            )
            self.audit.log_suspicious_input(field, raw_value)
            self._notify("Security Error", SECURITY_ERROR_MESSAGE)
            return ValidationOutcome(is_valid=False, value=None)

        if not is_valid:
            self.audit.log_validation_failure(field, raw_value, "Validation failed")
            self._notify("Validation Error", custom_message or f"Please enter a valid {field}")
            return ValidationOutcome(is_valid=False, value=sanitized)

        return ValidationOutcome(is_valid=True, value=sanitized)

    def validate_field(
        self,
        kind: Union[FieldKind, str],
        raw_value: Any,
        custom_message: Optional[str] = None,
        field: Optional[str] = None,
    ) -> ValidationOutcome:
        """Validate with the registered rule for a field kind."""
        rule = get_rule(kind)
        return self.validate_and_sanitize(
            field or rule.kind.value,
            raw_value,
            rule.validate,
            rule.sanitize,
            custom_message or rule.message,
        )

    def _notify(self, title: str, description: str) -> None:
        try:
            self.notifier(Notification(title=title, description=description, severity=Severity.DESTRUCTIVE))
        except Exception as e:
            logger.error("Notifier failed", title=title, error=str(e), error_type=type(e).__name__)
