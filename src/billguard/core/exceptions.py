"""
Custom exceptions for BillGuard.

Provides structured error handling with error codes and details. None of
these are fatal to the host: the store and the orchestrator catch them at
their boundary and degrade to safe defaults.
"""

from typing import Any, Dict, Optional


class BillGuardException(Exception):
    """Base exception for BillGuard."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(BillGuardException):
    """Raised when a value fails its field rule."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            error_code="validation_error",
            details=details,
        )


class RateLimitError(BillGuardException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after_ms: Optional[int] = None,
    ) -> None:
        details = {}
        if retry_after_ms:
            details["retry_after_ms"] = retry_after_ms

        super().__init__(
            message=message,
            error_code="rate_limit_exceeded",
            details=details,
        )


class PersistenceError(BillGuardException):
    """Raised when the host key-value store cannot be read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            error_code="persistence_error",
            details=details,
        )


class CodecError(BillGuardException):
    """Raised when stored text cannot be decoded."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            error_code="codec_error",
            details=details,
        )


class UnknownFieldError(BillGuardException):
    """Raised when no rule is registered for a field kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            message=f"No validation rule registered for field kind '{kind}'",
            error_code="unknown_field",
            details={"kind": kind},
        )
