"""
User-facing notification models.

The host renders these; the core only builds and hands them over.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

MAX_DESCRIPTION_LENGTH = 500


class Severity(str, Enum):
    """Notification severity."""

    INFO = "info"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """Non-blocking message shown to the user."""

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(max_length=MAX_DESCRIPTION_LENGTH)
    severity: Severity = Severity.INFO

    @field_validator("description", mode="before")
    def truncate_description(cls, v: Any) -> Any:
        """Long messages are cut to fit rather than rejected."""
        if isinstance(v, str) and len(v) > MAX_DESCRIPTION_LENGTH:
            return v[:MAX_DESCRIPTION_LENGTH]
        return v
