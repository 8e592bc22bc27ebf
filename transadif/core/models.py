"""
Core data models.

CRITICAL DESIGN DECISIONS:
- All models are frozen (immutable) once built
- Encodings are referenced by their canonical registry identifier, never by
  codec object, so models stay serializable
- ResolvedField keeps the exact consumed bytes next to the decoded text so
  every correction can be audited against the input
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from .errors import Issue, Severity

if TYPE_CHECKING:
    from collections.abc import Iterator

# =============================================================================
# Enums
# =============================================================================


class Confidence(Enum):
    """How an encoding was chosen, strongest first."""

    EXPLICIT = "explicit"  # Declared in the document or forced by the caller
    VALIDATED = "validated"  # Strictly valid, printable UTF-8
    INFERRED = "inferred"  # Statistical scoring
    FALLBACK = "fallback"  # ISO-8859-1, decodes anything

    @property
    def rank(self) -> int:
        """Higher rank means stronger evidence."""
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank


_CONFIDENCE_RANK = {
    Confidence.EXPLICIT: 3,
    Confidence.VALIDATED: 2,
    Confidence.INFERRED: 1,
    Confidence.FALLBACK: 0,
}


class CorrectionKind(Enum):
    """Kinds of corrective changes applied to a field."""

    LENGTH_REINTERPRETED = "length_reinterpreted"  # Length counted characters
    LENGTH_EXTENDED = "length_extended"  # Span grown to finish a character
    LENGTH_SHRUNK = "length_shrunk"  # Span overran the next tag
    ENCODING_OVERRIDE = "encoding_override"  # Field decoded with its own encoding
    MOJIBAKE = "mojibake"  # Misencoding undone
    ENTITY_EXPANDED = "entity_expanded"  # Character reference replaced
    LOSSY_DECODE = "lossy_decode"  # Undecodable bytes replaced


class Interpretation(Enum):
    """Which reading of the declared length was accepted."""

    BYTES = "bytes"
    CHARACTERS = "characters"
    EXTENDED = "extended"
    SHRUNK = "shrunk"
    FALLBACK = "fallback"


# =============================================================================
# Pipeline models
# =============================================================================


class Correction(BaseModel, frozen=True):
    """A single change applied to a field's text or extent."""

    kind: CorrectionKind
    description: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.description}"


class RawField(BaseModel, frozen=True):
    """
    A field as captured by the tokenizer.

    raw_bytes is a bounded window starting at the field's data. It is long
    enough to hold declared_length characters of any supported encoding plus
    lookahead for the boundary check.
    """

    name: str
    declared_length: int = Field(ge=0)
    tag_type: str | None = None
    raw_bytes: bytes
    offset: int = Field(ge=0, description="Byte offset of the field data in the input")
    reaches_end: bool = Field(
        default=True,
        description="Whether raw_bytes runs to the end of the input",
    )


class DetectionResult(BaseModel, frozen=True):
    """Outcome of encoding detection."""

    encoding: str = Field(description="Canonical registry identifier")
    confidence: Confidence
    score: float = 0.0
    warnings: list[Issue] = Field(default_factory=list)


class LengthResolution(BaseModel, frozen=True):
    """Outcome of the field-length resolver."""

    consumed_byte_length: int = Field(ge=0)
    text: str
    interpretation: Interpretation
    corrections: list[Correction] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True unless the resolver had to fall back."""
        return self.interpretation != Interpretation.FALLBACK


class MojibakeResult(BaseModel, frozen=True):
    """Outcome of the mojibake corrector."""

    text: str
    rounds_applied: int = Field(ge=0)
    score: float


class EntityExpansion(BaseModel, frozen=True):
    """Outcome of entity expansion."""

    text: str
    expanded: int = Field(default=0, ge=0, description="Number of references replaced")
    issues: list[Issue] = Field(default_factory=list)


class TranscodeResult(BaseModel, frozen=True):
    """Encoded bytes plus the characters that needed the policy chain."""

    data: bytes
    substitutions: list[tuple[str, str]] = Field(
        default_factory=list,
        description="(original character, written text) pairs",
    )


class ResolvedField(BaseModel, frozen=True):
    """A field after length resolution, decoding and correction."""

    name: str
    tag_type: str | None = None
    declared_length: int = Field(ge=0)
    text: str
    raw_bytes: bytes = Field(description="Exactly the consumed bytes")
    consumed_byte_length: int = Field(ge=0)
    excess_bytes: bytes = Field(
        default=b"",
        description="Bytes between this field and the next tag, kept verbatim",
    )
    encoding: str = Field(description="Encoding the raw bytes were decoded with")
    offset: int = Field(ge=0)
    corrections: list[Correction] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def corrected(self) -> bool:
        return bool(self.corrections)


class Record(BaseModel, frozen=True):
    """One QSO: the fields between two <eor> markers."""

    index: int = Field(ge=1, description="1-indexed record number")
    fields: list[ResolvedField] = Field(default_factory=list)
    excess_bytes: bytes = b""

    def get(self, name: str) -> ResolvedField | None:
        """Get the first field with a name (case-insensitive)."""
        wanted = name.upper()
        for field in self.fields:
            if field.name.upper() == wanted:
                return field
        return None


class Document(BaseModel, frozen=True):
    """
    A fully resolved ADIF document.

    Built once per input by the pipeline and never modified afterwards.
    """

    preamble: str = ""
    has_header: bool = False
    header_fields: list[ResolvedField] = Field(default_factory=list)
    header_excess: bytes = b""
    records: list[Record] = Field(default_factory=list)
    detection: DetectionResult
    issues: list[Issue] = Field(
        default_factory=list,
        description="Document-level issues (detection, structure)",
    )

    @property
    def encoding(self) -> str:
        """Document-level source encoding."""
        return self.detection.encoding

    def get_header_field(self, name: str) -> ResolvedField | None:
        """Get a header field by name (case-insensitive)."""
        wanted = name.upper()
        for field in self.header_fields:
            if field.name.upper() == wanted:
                return field
        return None

    @property
    def declared_encoding(self) -> str | None:
        """Value of the header ENCODING field, if present."""
        field = self.get_header_field("ENCODING")
        return field.text.strip() if field is not None else None

    def iter_fields(self) -> Iterator[tuple[int | None, ResolvedField]]:
        """Yield (record index or None for header, field) in document order."""
        for field in self.header_fields:
            yield None, field
        for record in self.records:
            for field in record.fields:
                yield record.index, field

    def all_issues(self) -> list[Issue]:
        """Document-level issues followed by per-field issues."""
        issues = list(self.issues)
        for _, field in self.iter_fields():
            issues.extend(field.issues)
        return issues

    @property
    def correction_count(self) -> int:
        return sum(len(field.corrections) for _, field in self.iter_fields())

    @property
    def has_errors(self) -> bool:
        return any(
            i.severity in (Severity.ERROR, Severity.FATAL) for i in self.all_issues()
        )
