"""
Tests for the validation orchestrator.

Tests sanitize-then-validate flow, audit records and user notifications.
"""

from typing import List

import pytest

from billguard.core import validators
from billguard.core.exceptions import UnknownFieldError, ValidationError
from billguard.core.orchestrator import (
    SECURITY_ERROR_MESSAGE,
    CollectingNotifier,
    ValidationOrchestrator,
    ValidationOutcome,
)
from billguard.models.audit import AuditRecord, SuspiciousInputRecord, ValidationFailureRecord
from billguard.models.notification import MAX_DESCRIPTION_LENGTH, Severity


class TestValidateAndSanitize:
    """Test validate_and_sanitize outcomes."""

    def test_phone_is_sanitized_and_accepted(
        self, orchestrator: ValidationOrchestrator, notifier: CollectingNotifier
    ) -> None:
        outcome = orchestrator.validate_and_sanitize(
            "phone", "+91 98765 43210", validators.phone, validators.sanitize_phone
        )
        assert outcome == ValidationOutcome(is_valid=True, value="+919876543210")
        assert notifier.notifications == []

    def test_negative_price_rejected_with_sanitized_value(
        self,
        orchestrator: ValidationOrchestrator,
        notifier: CollectingNotifier,
        audit_records: List[AuditRecord],
    ) -> None:
        outcome = orchestrator.validate_and_sanitize("price", -5, validators.price, validators.sanitize_number)
        assert outcome.is_valid is False
        assert outcome.value == -5

        failures = [r for r in audit_records if isinstance(r, ValidationFailureRecord)]
        assert len(failures) == 1
        assert failures[0].field == "price"
        assert failures[0].value_length == 2
        assert failures[0].reason == "Validation failed"

        assert len(notifier.notifications) == 1
        notification = notifier.notifications[0]
        assert notification.title == "Validation Error"
        assert notification.description == "Please enter a valid price"
        assert notification.severity is Severity.DESTRUCTIVE

    def test_custom_message(self, orchestrator: ValidationOrchestrator, notifier: CollectingNotifier) -> None:
        orchestrator.validate_and_sanitize(
            "SKU", "x", validators.sku, validators.sanitize_text, "SKU must be 3-50 alphanumeric characters"
        )
        assert notifier.notifications[0].description == "SKU must be 3-50 alphanumeric characters"

    def test_without_sanitizer_value_passes_through(self, orchestrator: ValidationOrchestrator) -> None:
        outcome = orchestrator.validate_and_sanitize("email", "  a@b.co", validators.email)
        assert outcome.is_valid is False
        assert outcome.value == "  a@b.co"

    def test_oversized_int_is_a_validation_failure(
        self,
        orchestrator: ValidationOrchestrator,
        notifier: CollectingNotifier,
        audit_records: List[AuditRecord],
    ) -> None:
        outcome = orchestrator.validate_and_sanitize("stock", 10**400, validators.quantity)

        assert outcome.is_valid is False
        assert outcome.value == 10**400
        assert [type(r) for r in audit_records] == [ValidationFailureRecord]
        assert notifier.notifications[-1].title == "Validation Error"

    def test_long_message_is_truncated_not_dropped(
        self, orchestrator: ValidationOrchestrator, notifier: CollectingNotifier
    ) -> None:
        orchestrator.validate_and_sanitize("sku", "x", validators.sku, custom_message="m" * 800)

        assert len(notifier.notifications) == 1
        assert notifier.notifications[0].description == "m" * MAX_DESCRIPTION_LENGTH

    def test_long_field_name_still_notifies(
        self, orchestrator: ValidationOrchestrator, notifier: CollectingNotifier
    ) -> None:
        orchestrator.validate_and_sanitize("f" * 600, "x", validators.email)

        assert len(notifier.notifications) == 1
        assert notifier.notifications[0].description.startswith("Please enter a valid fff")

    def test_raw_value_never_recorded(
        self, orchestrator: ValidationOrchestrator, audit_records: List[AuditRecord]
    ) -> None:
        secret = "not-an-email-but-secret"
        orchestrator.validate_and_sanitize("email", secret, validators.email, validators.sanitize_text)
        dumped = [r.model_dump_json() for r in audit_records]
        assert all(secret not in d for d in dumped)
        assert audit_records[0].value_length == len(secret)

    def test_raising_rule_is_contained(
        self,
        orchestrator: ValidationOrchestrator,
        notifier: CollectingNotifier,
        audit_records: List[AuditRecord],
    ) -> None:
        def exploding_validator(value: object) -> bool:
            raise RuntimeError("boom")

        outcome = orchestrator.validate_and_sanitize("name", "Ravi", exploding_validator)

        assert outcome == ValidationOutcome(is_valid=False, value=None)
        assert any(isinstance(r, SuspiciousInputRecord) and r.field == "name" for r in audit_records)
        assert notifier.notifications[-1].title == "Security Error"
        assert notifier.notifications[-1].description == SECURITY_ERROR_MESSAGE

    def test_raising_sanitizer_is_contained(self, orchestrator: ValidationOrchestrator) -> None:
        def exploding_sanitizer(value: object) -> object:
            raise ValueError("bad")

        outcome = orchestrator.validate_and_sanitize("name", "Ravi", validators.name, exploding_sanitizer)
        assert outcome.is_valid is False
        assert outcome.value is None

    def test_failing_notifier_does_not_propagate(self, audit) -> None:
        def broken_notifier(notification: object) -> None:
            raise RuntimeError("toast failed")

        orchestrator = ValidationOrchestrator(audit, broken_notifier)
        outcome = orchestrator.validate_and_sanitize("price", -1, validators.price)
        assert outcome.is_valid is False


class TestValidateField:
    """Test validation through the rule registry."""

    def test_uses_registered_sanitizer(self, orchestrator: ValidationOrchestrator) -> None:
        outcome = orchestrator.validate_field("tax_id", "27aapfu0939f1zv")
        assert outcome.is_valid is True
        assert outcome.value == "27AAPFU0939F1ZV"

    def test_uses_rule_message(self, orchestrator: ValidationOrchestrator, notifier: CollectingNotifier) -> None:
        orchestrator.validate_field("tax_id", "bogus")
        assert notifier.notifications[0].description == "Please enter a valid 15-character GST number"

    def test_price_string_is_parsed(self, orchestrator: ValidationOrchestrator) -> None:
        outcome = orchestrator.validate_field("price", "249.50")
        assert outcome.is_valid is True
        assert outcome.value == 249.5

    def test_unknown_kind_raises(self, orchestrator: ValidationOrchestrator) -> None:
        with pytest.raises(UnknownFieldError):
            orchestrator.validate_field("iban", "DE89")


class TestValidationOutcome:
    """Test outcome helpers."""

    def test_unwrap_valid(self) -> None:
        assert ValidationOutcome(is_valid=True, value=3).unwrap() == 3

    def test_unwrap_invalid_raises(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ValidationOutcome(is_valid=False, value=-3).unwrap("price")
        assert exc_info.value.details == {"field": "price"}
