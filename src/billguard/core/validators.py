"""
Field validation and sanitization rules.

Validators are total predicates: a value of the wrong type is invalid, not an
error. Sanitizers are total transforms that always produce a best-effort
cleaned value, so the UI can show what would be stored even when the input
is rejected.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, Optional, Union

from .exceptions import UnknownFieldError

Validator = Callable[[Any], bool]
Sanitizer = Callable[[Any], Any]


class FieldKind(str, Enum):
    """Semantic field types with a registered rule."""

    EMAIL = "email"
    PHONE = "phone"
    TAX_ID = "tax_id"
    PRICE = "price"
    QUANTITY = "quantity"
    SKU = "sku"
    NAME = "name"


MAX_PRICE = 999999.99
MAX_QUANTITY = 99999

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
# Indian mobile numbers: optional +91, optional 0, optional 91, then [789] + 9 digits
_PHONE_RE = re.compile(r"(\+91[-\s]?)?0?(91)?[789][0-9]{9}", re.ASCII)
_PHONE_SEPARATORS_RE = re.compile(r"[\s-]")
# GSTIN: state code, PAN, entity number, literal Z, check character
_TAX_ID_RE = re.compile(r"[0-3][0-9][A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]")
_SKU_RE = re.compile(r"[A-Za-z0-9_-]{3,50}")
_NAME_RE = re.compile(r"[A-Za-z\s.\-']{1,100}")

_ANGLE_BRACKETS_RE = re.compile(r"[<>]")
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE | re.ASCII)
_LEADING_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)
_NON_PHONE_RE = re.compile(r"[^0-9+]")
_NON_TAX_ID_RE = re.compile(r"[^A-Z0-9]")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


# Validators

def email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _EMAIL_RE.fullmatch(value) is not None


def phone(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _PHONE_RE.fullmatch(_PHONE_SEPARATORS_RE.sub("", value)) is not None


def tax_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _TAX_ID_RE.fullmatch(value.upper()) is not None


def price(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        return math.isfinite(value) and 0 <= value <= MAX_PRICE
    except (OverflowError, TypeError):
        return False


def quantity(value: Any) -> bool:
    if not _is_number(value):
        return False
    try:
        return math.isfinite(value) and float(value).is_integer() and 0 <= value <= MAX_QUANTITY
    except (OverflowError, TypeError):
        return False


def sku(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _SKU_RE.fullmatch(value) is not None


def name(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return _NAME_RE.fullmatch(value.strip()) is not None


# Sanitizers

def sanitize_text(value: Any) -> str:
    """Strip markup-ish fragments and surrounding whitespace."""
    text = "" if value is None else str(value)
    text = _ANGLE_BRACKETS_RE.sub("", text)
    text = _JS_SCHEME_RE.sub("", text)
    text = _EVENT_HANDLER_RE.sub("", text)
    return text.strip()


def sanitize_number(value: Any) -> Union[int, float]:
    """
    Coerce to a finite number, defaulting to 0.

    Strings are parsed from their leading numeric prefix, so "12.5kg" gives
    12.5. Finite numbers are returned unchanged.
    """
    if isinstance(value, str):
        match = _LEADING_FLOAT_RE.match(value.strip())
        if match is None:
            return 0
        try:
            number: Union[int, float] = float(match.group(0))
        except (OverflowError, ValueError):
            return 0
    elif _is_number(value):
        number = value
    else:
        return 0

    try:
        return number if math.isfinite(number) else 0
    except (OverflowError, TypeError):
        return 0


def sanitize_phone(value: Any) -> str:
    """Keep digits, and a plus sign only in leading position."""
    text = "" if value is None else str(value)
    cleaned = _NON_PHONE_RE.sub("", text)
    if cleaned.startswith("+"):
        return "+" + cleaned[1:].replace("+", "")
    return cleaned.replace("+", "")


def sanitize_tax_id(value: Any) -> str:
    text = "" if value is None else str(value)
    return _NON_TAX_ID_RE.sub("", text.upper())


@dataclass(frozen=True)
class FieldRule:
    """Validator, optional sanitizer and default message for one field kind."""

    kind: FieldKind
    validate: Validator
    sanitize: Optional[Sanitizer] = None
    message: Optional[str] = None

    def apply(self, value: Any) -> Any:
        """Sanitize a value with this rule's sanitizer, if it has one."""
        return self.sanitize(value) if self.sanitize is not None else value


RULES: Dict[FieldKind, FieldRule] = {
    FieldKind.EMAIL: FieldRule(
        FieldKind.EMAIL, email, sanitize_text, "Please enter a valid email address"
    ),
    FieldKind.PHONE: FieldRule(
        FieldKind.PHONE,
        phone,
        sanitize_phone,
        "Please enter a valid Indian phone number (+91XXXXXXXXXX or 10 digits)",
    ),
    FieldKind.TAX_ID: FieldRule(
        FieldKind.TAX_ID, tax_id, sanitize_tax_id, "Please enter a valid 15-character GST number"
    ),
    FieldKind.PRICE: FieldRule(
        FieldKind.PRICE, price, sanitize_number, "Price must be between 0 and 999,999.99"
    ),
    FieldKind.QUANTITY: FieldRule(
        FieldKind.QUANTITY, quantity, sanitize_number, "Quantity must be a whole number between 0 and 99,999"
    ),
    FieldKind.SKU: FieldRule(
        FieldKind.SKU, sku, sanitize_text, "SKU must be 3-50 alphanumeric characters"
    ),
    FieldKind.NAME: FieldRule(FieldKind.NAME, name, sanitize_text),
}


def get_rule(kind: Union[FieldKind, str]) -> FieldRule:
    """Look up the registered rule for a field kind."""
    try:
        return RULES[FieldKind(kind)]
    except (KeyError, ValueError):
        raise UnknownFieldError(str(kind)) from None
