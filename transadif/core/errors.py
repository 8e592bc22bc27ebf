"""
Issue models and fatal errors.

Every condition the pipeline notices is recorded as an Issue with a code from
the TA-XXX-NNN taxonomy. Non-fatal issues are accumulated per field; fatal
ones are raised as TransadifError subclasses carrying the same Issue.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(Enum):
    """Issue severity levels."""

    FATAL = "fatal"  # Processing of the file is aborted
    ERROR = "error"  # Reported, output still written
    WARN = "warn"  # Corrected or tolerated
    INFO = "info"  # Informational


class Location(BaseModel, frozen=True):
    """Where in the input an issue occurred."""

    file: str | None = None
    record: int | None = None  # 1-indexed, None for header fields
    field_index: int | None = None  # 1-indexed within the record/header
    field: str | None = None
    offset: int | None = None  # byte offset of the field data

    def __str__(self) -> str:
        """Format location for display."""
        parts = []
        if self.file:
            parts.append(self.file)
        if self.record is not None:
            parts.append(f"record {self.record}")
        elif self.field_index is not None:
            parts.append("header")
        if self.field_index is not None:
            parts.append(f"field {self.field_index}")
        if self.field:
            parts.append(f"'{self.field}'")
        if self.offset is not None:
            parts.append(f"byte {self.offset}")
        return ", ".join(parts) if parts else "<unknown>"


class Issue(BaseModel, frozen=True):
    """
    Structured issue.

    Error domains:
    - TA-ENC-*: Encoding names and byte sequences
    - TA-LEN-*: Field length interpretation
    - TA-MOJ-*: Mojibake
    - TA-ENT-*: Entity references
    - TA-OUT-*: Output encoding
    - TA-HDR-*: Header structure
    - TA-IO-*: Input limits
    """

    code: str = Field(
        pattern=r"^TA-[A-Z]{2,5}-\d{3}$",
        description="Issue code, e.g., 'TA-ENC-001'",
    )
    severity: Severity
    title: str = Field(description="Short issue title")
    message: str = Field(description="Detailed message")
    location: Location = Field(
        default_factory=Location,
        description="Where the issue occurred",
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional context (raw value, encoding, etc.)",
    )

    @classmethod
    def fatal(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> Issue:
        """Create a FATAL severity issue."""
        return cls(
            code=code,
            severity=Severity.FATAL,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def error(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> Issue:
        """Create an ERROR severity issue."""
        return cls(
            code=code,
            severity=Severity.ERROR,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def warn(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> Issue:
        """Create a WARN severity issue."""
        return cls(
            code=code,
            severity=Severity.WARN,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    @classmethod
    def info(
        cls,
        code: str,
        title: str,
        message: str,
        *,
        location: Location | None = None,
        context: dict[str, Any] | None = None,
    ) -> Issue:
        """Create an INFO severity issue."""
        return cls(
            code=code,
            severity=Severity.INFO,
            title=title,
            message=message,
            location=location or Location(),
            context=context or {},
        )

    def at(self, location: Location) -> Issue:
        """Return a copy of this issue placed at a location."""
        return self.model_copy(update={"location": location})

    def __str__(self) -> str:
        """Format issue for display."""
        return f"[{self.code}] {self.severity.value.upper()}: {self.title} - {self.message}"


# =============================================================================
# Fatal errors
# =============================================================================


class TransadifError(Exception):
    """Fatal condition that aborts processing of the current file."""

    def __init__(self, issue: Issue) -> None:
        self.issue = issue
        super().__init__(self._format())

    def _format(self) -> str:
        location = str(self.issue.location)
        if location == "<unknown>":
            return f"{self.issue.title}: {self.issue.message}"
        return f"{location}: {self.issue.title}: {self.issue.message}"

    def at(self, location: Location) -> TransadifError:
        """Re-raiseable copy of this error with a location attached."""
        return type(self)(self.issue.at(location))


class UnknownEncodingError(TransadifError):
    """An encoding name is not in the registry."""

    @classmethod
    def for_name(cls, name: str) -> UnknownEncodingError:
        return cls(
            Issue.fatal(
                code="TA-ENC-001",
                title="Unknown encoding",
                message=f"Encoding '{name}' is not supported",
                context={"encoding": name},
            )
        )


class InvalidByteSequenceError(TransadifError):
    """Field bytes do not decode under the chosen encoding (strict mode)."""


class FieldCountMismatchError(TransadifError):
    """Declared field length cannot be reconciled with the data (strict mode)."""


class UnencodableCharacterError(TransadifError):
    """A character has no representation in the output encoding."""


class InputTooLargeError(TransadifError):
    """Input exceeds the configured size limit."""


# =============================================================================
# Issue Codes Registry
# =============================================================================

ERROR_CODES: dict[str, str] = {
    # Encoding errors
    "TA-ENC-001": "Unknown encoding name",
    "TA-ENC-002": "Invalid byte sequence for encoding",
    # Length errors
    "TA-LEN-001": "Declared field length does not match the data",
    # Mojibake
    "TA-MOJ-001": "Potential mojibake left uncorrected",
    # Entities
    "TA-ENT-001": "Malformed entity reference",
    "TA-ENT-002": "Entity reference left unexpanded",
    # Output
    "TA-OUT-001": "Character cannot be represented in the output encoding",
    # Header
    "TA-HDR-001": "Header terminator <eoh> missing",
    # Input
    "TA-IO-001": "Input too large",
}


def get_error_description(code: str) -> str | None:
    """Get the description for an issue code."""
    return ERROR_CODES.get(code)
