"""
BillGuard - secure client-state layer for a billing/inventory tool.

Validates and sanitizes form fields, rate-limits submissions, and persists
typed values with optional reversible obfuscation and self-healing type
recovery.
"""

__version__ = "0.1.0"

from .bootstrap import (
    configure_logging,
    create_security_context,
    get_security_context,
    validate_and_sanitize,
)
from .core.context import SecurityContext
from .core.rate_limit import create_rate_limiter
from .core.store import SecureKeyedStore

__all__ = [
    "SecureKeyedStore",
    "SecurityContext",
    "configure_logging",
    "create_rate_limiter",
    "create_security_context",
    "get_security_context",
    "validate_and_sanitize",
]
