"""
Pydantic data models package.

Contains the data models for:
- Security audit records
- User-facing notifications
"""

from .audit import (
    AuditKind,
    AuditRecord,
    DataAccessRecord,
    SecurityErrorRecord,
    SuspiciousInputRecord,
    ValidationFailureRecord,
)
from .notification import Notification, Severity

__all__ = [
    # Audit models
    "AuditKind",
    "AuditRecord",
    "DataAccessRecord",
    "SecurityErrorRecord",
    "SuspiciousInputRecord",
    "ValidationFailureRecord",

    # Notification models
    "Notification",
    "Severity",
]
