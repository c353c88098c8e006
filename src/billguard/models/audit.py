"""
Security audit record models.

Records carry field names, lengths and reasons only. Raw input values are
never part of a record.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


class AuditKind(str, Enum):
    """Kinds of security events."""

    VALIDATION_FAILURE = "validation_failure"
    SUSPICIOUS_INPUT = "suspicious_input"
    DATA_ACCESS = "data_access"
    SECURITY_ERROR = "security_error"


class DataAccessRecord(BaseModel):
    """A read or write against the keyed store, or a security-context event."""

    kind: Literal[AuditKind.DATA_ACCESS] = AuditKind.DATA_ACCESS
    operation: str = Field(description="Operation name, e.g. read or write")
    subject_type: str = Field(description="Storage key or event subject")
    timestamp: str = Field(default_factory=utc_timestamp)


class ValidationFailureRecord(BaseModel):
    """A value that failed its field rule."""

    kind: Literal[AuditKind.VALIDATION_FAILURE] = AuditKind.VALIDATION_FAILURE
    field: str
    value_length: int = Field(ge=0)
    reason: str
    timestamp: str = Field(default_factory=utc_timestamp)


class SuspiciousInputRecord(BaseModel):
    """Malformed data, a decode failure, or a rule that raised."""

    kind: Literal[AuditKind.SUSPICIOUS_INPUT] = AuditKind.SUSPICIOUS_INPUT
    field: str
    value_length: int = Field(ge=0)
    reason: str = "Suspicious input detected"
    timestamp: str = Field(default_factory=utc_timestamp)


class SecurityErrorRecord(BaseModel):
    """An error caught by a component's secure error handler."""

    kind: Literal[AuditKind.SECURITY_ERROR] = AuditKind.SECURITY_ERROR
    component: str
    error: str
    error_type: str
    timestamp: str = Field(default_factory=utc_timestamp)


AuditRecord = Union[DataAccessRecord, ValidationFailureRecord, SuspiciousInputRecord, SecurityErrorRecord]
