"""
Tests for field validators and sanitizers.

Covers the exact acceptance rules of every registered field kind.
"""

import math

import pytest

from billguard.core import validators
from billguard.core.exceptions import UnknownFieldError
from billguard.core.validators import FieldKind, RULES, get_rule


class TestEmailValidator:
    """Test email validation."""

    @pytest.mark.parametrize("value", ["john.doe@example.com", "a@b.co", "user+tag@shop.in"])
    def test_valid_emails(self, value: str) -> None:
        assert validators.email(value) is True

    @pytest.mark.parametrize(
        "value",
        ["", "plainaddress", "no-at.example.com", "john@example", "john doe@example.com", "a@b.c\n"],
    )
    def test_invalid_emails(self, value: str) -> None:
        assert validators.email(value) is False

    def test_non_string_rejected(self) -> None:
        assert validators.email(None) is False
        assert validators.email(42) is False


class TestPhoneValidator:
    """Test Indian mobile number validation."""

    @pytest.mark.parametrize(
        "value",
        [
            "9876543210",
            "+919876543210",
            "+91 98765 43210",
            "+91-98765-43210",
            "09876543210",
            "919876543210",
            "7012345678",
            "8012345678",
        ],
    )
    def test_valid_numbers(self, value: str) -> None:
        assert validators.phone(value) is True

    @pytest.mark.parametrize(
        "value",
        ["6876543210", "987654321", "98765432101", "+449876543210", "98765x3210", "٩876543210"],
    )
    def test_invalid_numbers(self, value: str) -> None:
        assert validators.phone(value) is False


class TestTaxIdValidator:
    """Test GSTIN validation."""

    def test_valid_gstin(self) -> None:
        assert validators.tax_id("27AAPFU0939F1ZV") is True

    def test_lowercase_input_is_upper_cased(self) -> None:
        assert validators.tax_id("27aapfu0939f1zv") is True

    @pytest.mark.parametrize(
        "value",
        [
            "47AAPFU0939F1ZV",  # state code starts above 3
            "27AAPFU0939F0ZV",  # entity number 0
            "27AAPFU0939F1XV",  # missing literal Z
            "27AAPFU0939F1Z",  # too short
            "27AAPFU0939F1ZVX",  # too long
        ],
    )
    def test_invalid_gstin(self, value: str) -> None:
        assert validators.tax_id(value) is False


class TestNumericValidators:
    """Test price and quantity validation."""

    @pytest.mark.parametrize("value", [0, 0.0, 10, 199.99, 999999.99])
    def test_valid_prices(self, value: float) -> None:
        assert validators.price(value) is True

    @pytest.mark.parametrize("value", [-5, -0.01, 1000000, 10**400, math.inf, math.nan, "10", True, None])
    def test_invalid_prices(self, value: object) -> None:
        assert validators.price(value) is False

    @pytest.mark.parametrize("value", [0, 1, 5.0, 99999])
    def test_valid_quantities(self, value: float) -> None:
        assert validators.quantity(value) is True

    @pytest.mark.parametrize("value", [-1, 1.5, 100000, 10**400, math.inf, math.nan, "3", False])
    def test_invalid_quantities(self, value: object) -> None:
        assert validators.quantity(value) is False


class TestSkuAndNameValidators:
    """Test SKU and name validation."""

    @pytest.mark.parametrize("value", ["ABC", "sku-001_x", "A" * 50])
    def test_valid_skus(self, value: str) -> None:
        assert validators.sku(value) is True

    @pytest.mark.parametrize("value", ["AB", "A" * 51, "sku 001", "sku/001", ""])
    def test_invalid_skus(self, value: str) -> None:
        assert validators.sku(value) is False

    @pytest.mark.parametrize("value", ["Asha", "Mary-Jane O'Neil", "Dr. Rao", "  Ravi  "])
    def test_valid_names(self, value: str) -> None:
        assert validators.name(value) is True

    @pytest.mark.parametrize("value", ["", "   ", "R2D2", "A" * 101, "<b>x</b>"])
    def test_invalid_names(self, value: str) -> None:
        assert validators.name(value) is False


class TestSanitizers:
    """Test sanitizer transforms."""

    def test_text_strips_markup(self) -> None:
        assert validators.sanitize_text("  <script>alert(1)</script>  ") == "scriptalert(1)/script"

    def test_text_strips_javascript_scheme(self) -> None:
        assert validators.sanitize_text("JavaScript:alert(1)") == "alert(1)"

    def test_text_strips_event_handlers(self) -> None:
        assert validators.sanitize_text('img onerror="x" ONLOAD=y') == 'img "x" y'

    def test_text_coerces_non_strings(self) -> None:
        assert validators.sanitize_text(None) == ""
        assert validators.sanitize_text(12) == "12"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.5", 12.5),
            ("12.5kg", 12.5),
            ("  -3 ", -3.0),
            ("1e3", 1000.0),
            (".5", 0.5),
            ("abc", 0),
            ("", 0),
            ("inf", 0),
            (None, 0),
            (True, 0),
            (-5, -5),
            (7.25, 7.25),
            (math.inf, 0),
            (math.nan, 0),
        ],
    )
    def test_number(self, raw: object, expected: float) -> None:
        assert validators.sanitize_number(raw) == expected

    def test_number_keeps_int_type(self) -> None:
        result = validators.sanitize_number(-5)
        assert result == -5
        assert isinstance(result, int)

    def test_phone_keeps_digits_and_leading_plus(self) -> None:
        assert validators.sanitize_phone("+91 98765-43210") == "+919876543210"
        assert validators.sanitize_phone("(0)98765 43210") == "09876543210"
        assert validators.sanitize_phone("98+765") == "98765"

    def test_tax_id_upper_cases_and_strips(self) -> None:
        assert validators.sanitize_tax_id("27aapfu 0939-f1zv") == "27AAPFU0939F1ZV"


class TestRuleRegistry:
    """Test the field rule registry."""

    def test_every_kind_registered(self) -> None:
        assert set(RULES) == set(FieldKind)

    def test_lookup_by_string(self) -> None:
        rule = get_rule("phone")
        assert rule.kind is FieldKind.PHONE
        assert rule.sanitize is validators.sanitize_phone

    def test_unknown_kind(self) -> None:
        with pytest.raises(UnknownFieldError) as exc_info:
            get_rule("iban")
        assert exc_info.value.error_code == "unknown_field"

    @pytest.mark.parametrize(
        "kind, value",
        [
            (FieldKind.EMAIL, "john.doe@example.com"),
            (FieldKind.PHONE, "+91 98765 43210"),
            (FieldKind.TAX_ID, "27aapfu0939f1zv"),
            (FieldKind.PRICE, 499.5),
            (FieldKind.QUANTITY, 12),
            (FieldKind.SKU, "SKU-001"),
            (FieldKind.NAME, "  Priya Sharma "),
        ],
    )
    def test_sanitized_valid_input_stays_valid(self, kind: FieldKind, value: object) -> None:
        """Sanitizing a valid value never produces an invalid one."""
        rule = get_rule(kind)
        assert rule.validate(value) is True
        assert rule.validate(rule.apply(value)) is True
