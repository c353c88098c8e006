"""
Form submission gate and record validation.

SecureForm rate-limits submissions and normalizes submitted text before the
host's handler sees it. FormSchema validates a whole record field by field
through the orchestrator.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import structlog

from ..models.notification import Notification, Severity
from .exceptions import ValidationError
from .orchestrator import ValidationOrchestrator
from .rate_limit import SlidingWindowRateLimiter
from .validators import FieldKind, get_rule, sanitize_text

logger = structlog.get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many submission attempts. Please wait a moment before trying again."

SubmitHandler = Callable[[Dict[str, Any]], Any]


@dataclass
class SubmissionResult:
    """Outcome of a form submission attempt."""

    accepted: bool
    rate_limited: bool = False
    data: Dict[str, Any] = field(default_factory=dict)
    result: Any = None
    error: Optional[str] = None


class SecureForm:
    """
    Rate-limited form submission.

    All forms built on one limiter share its windows; the identifier is
    derived from the form path, so each path is limited separately.
    """

    def __init__(
        self,
        path: str,
        limiter: SlidingWindowRateLimiter,
        orchestrator: ValidationOrchestrator,
        max_field_length: int = 1000,
    ) -> None:
        self.path = path
        self.limiter = limiter
        self.orchestrator = orchestrator
        self.max_field_length = max_field_length

    @property
    def client_id(self) -> str:
        return f"form_{self.path}"

    def submit(self, data: Mapping[str, Any], handler: SubmitHandler) -> SubmissionResult:
        """Gate, normalize and hand a submission to the handler."""
        if not self.limiter(self.client_id):
            self._notify_rate_limited()
            return SubmissionResult(accepted=False, rate_limited=True)

        cleaned = self.normalize(data)
        try:
            result = handler(cleaned)
        except Exception as e:
            logger.error(
                "Secure form submission error",
                path=self.path,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SubmissionResult(accepted=False, data=cleaned, error=type(e).__name__)

        return SubmissionResult(accepted=True, data=cleaned, result=result)

    def normalize(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Trim string fields and cap their length; other values pass through."""
        return {
            key: value.strip()[: self.max_field_length] if isinstance(value, str) else value
            for key, value in data.items()
        }

    def _notify_rate_limited(self) -> None:
        try:
            self.orchestrator.notifier(
                Notification(
                    title="Too many attempts",
                    description=RATE_LIMIT_MESSAGE,
                    severity=Severity.DESTRUCTIVE,
                )
            )
        except Exception as e:
            logger.error("Notifier failed", path=self.path, error=str(e))


@dataclass(frozen=True)
class FieldSpec:
    """One validated field of a record."""

    name: str
    kind: FieldKind
    required: bool = True
    message: Optional[str] = None
    label: Optional[str] = None


@dataclass
class RecordValidation:
    """Result of validating a whole record."""

    is_valid: bool
    values: Dict[str, Any]
    errors: Dict[str, str]


@dataclass(frozen=True)
class FormSchema:
    """
    Field rules for one record type.

    Fields in text_fields are not validated, only passed through the text
    sanitizer. Keys not named by the schema are dropped.
    """

    name: str
    fields: Tuple[FieldSpec, ...]
    text_fields: Tuple[str, ...] = ()

    def validate(self, orchestrator: ValidationOrchestrator, data: Mapping[str, Any]) -> RecordValidation:
        values: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for spec in self.fields:
            raw = data.get(spec.name)
            if not spec.required and raw in (None, ""):
                values[spec.name] = ""
                continue

            rule = get_rule(spec.kind)
            label = spec.label or spec.name
            message = spec.message or rule.message
            outcome = orchestrator.validate_and_sanitize(label, raw, rule.validate, rule.sanitize, message)
            values[spec.name] = outcome.value
            if not outcome.is_valid:
                errors[spec.name] = message or f"Please enter a valid {label}"

        for text_field in self.text_fields:
            values[text_field] = sanitize_text(data.get(text_field) or "")

        if errors:
            logger.info("Record validation failed", schema=self.name, invalid_fields=sorted(errors))

        return RecordValidation(is_valid=not errors, values=values, errors=errors)

    def validate_or_raise(self, orchestrator: ValidationOrchestrator, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate a record, raising ValidationError listing the invalid fields."""
        outcome = self.validate(orchestrator, data)
        if not outcome.is_valid:
            raise ValidationError(
                f"Invalid {self.name} record",
                details={"errors": outcome.errors},
            )
        return outcome.values

    @property
    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields] + list(self.text_fields)


CUSTOMER_FORM = FormSchema(
    name="customer",
    fields=(
        FieldSpec("name", FieldKind.NAME),
        FieldSpec("email", FieldKind.EMAIL, message="Please enter a valid email address"),
        FieldSpec(
            "phone",
            FieldKind.PHONE,
            message="Please enter a valid Indian phone number (+91XXXXXXXXXX or 10 digits)",
        ),
        FieldSpec(
            "gst",
            FieldKind.TAX_ID,
            required=False,
            message="Please enter a valid 15-character GST number",
            label="GST",
        ),
    ),
    text_fields=("address",),
)

PRODUCT_FORM = FormSchema(
    name="product",
    fields=(
        FieldSpec("name", FieldKind.NAME),
        FieldSpec("sku", FieldKind.SKU, message="SKU must be 3-50 alphanumeric characters", label="SKU"),
        FieldSpec("price", FieldKind.PRICE, message="Price must be between 0 and 999,999.99"),
        FieldSpec("stock", FieldKind.QUANTITY, message="Stock must be a positive integer"),
        FieldSpec(
            "lowStockThreshold",
            FieldKind.QUANTITY,
            message="Threshold must be a positive integer",
            label="threshold",
        ),
    ),
    text_fields=("description", "category"),
)
