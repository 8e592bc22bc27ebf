"""
ADIF processing.

Public API for repairing and re-encoding ADIF logs.

Usage:
    from transadif.core.adif import convert_file
    from transadif.core.config import PipelineConfig

    result = convert_file("log.adi", config=PipelineConfig(output_encoding="UTF-8"))
    Path("fixed.adi").write_bytes(result.output)

API Functions:
    parse_file(path) -> Document
    parse_bytes(data, filename) -> Document
    parse_stream(stream, filename) -> Document
    convert_file(path) -> ConversionResult
    convert_bytes(data, filename) -> ConversionResult
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from pydantic import BaseModel, Field

from transadif.core.config import PipelineConfig
from transadif.core.errors import InputTooLargeError, Issue, Location, Severity
from transadif.core.models import Document

from .debug import FieldDump, dump_records, parse_selection
from .pipeline import build_document, resolve_field
from .tokenizer import AdifTokenizer, Token, TokenKind
from .writer import write_document


class ConversionResult(BaseModel, frozen=True):
    """Output bytes together with the document they were written from."""

    output: bytes
    document: Document
    issues: list[Issue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity in (Severity.ERROR, Severity.FATAL) for i in self.issues)


def _too_large(filename: str, max_bytes: int, size: int | None) -> InputTooLargeError:
    return InputTooLargeError(
        Issue.fatal(
            code="TA-IO-001",
            title="Input too large",
            message=f"Input exceeds maximum size of {max_bytes} bytes",
            location=Location(file=filename),
            context={"max_bytes": max_bytes, "file_size": size},
        )
    )


def _read_path(path: Path, max_bytes: int | None) -> bytes:
    if max_bytes is not None and max_bytes > 0:
        with path.open("rb") as f:
            data = f.read(max_bytes + 1)
        if len(data) > max_bytes:
            size: int | None
            try:
                size = path.stat().st_size
            except OSError:
                size = None
            raise _too_large(str(path), max_bytes, size)
        return data
    return path.read_bytes()


def parse_bytes(
    data: bytes,
    filename: str = "<bytes>",
    *,
    config: PipelineConfig | None = None,
    max_bytes: int | None = None,
) -> Document:
    """
    Resolve ADIF data from bytes.

    Raises:
        InputTooLargeError: If data exceeds max_bytes
        TransadifError: Any other fatal condition
    """
    if max_bytes is not None and max_bytes > 0 and len(data) > max_bytes:
        raise _too_large(filename, max_bytes, len(data))
    return build_document(data, config, filename)


def parse_file(
    path: Path | str,
    *,
    config: PipelineConfig | None = None,
    max_bytes: int | None = None,
) -> Document:
    """
    Resolve an ADIF file.

    Raises:
        FileNotFoundError: If file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return parse_bytes(_read_path(path, max_bytes), str(path), config=config)


def parse_stream(
    stream: BinaryIO,
    filename: str = "<stream>",
    *,
    config: PipelineConfig | None = None,
    max_bytes: int | None = None,
) -> Document:
    """Resolve ADIF data from a binary stream."""
    data = stream.read(max_bytes + 1) if max_bytes is not None and max_bytes > 0 else stream.read()
    return parse_bytes(data, filename, config=config, max_bytes=max_bytes)


def convert_bytes(
    data: bytes,
    filename: str = "<bytes>",
    *,
    config: PipelineConfig | None = None,
    max_bytes: int | None = None,
) -> ConversionResult:
    """
    Resolve ADIF data and write it in the configured output encoding.

    Raises:
        TransadifError: Fatal condition; no output is produced
    """
    config = config or PipelineConfig()
    document = parse_bytes(data, filename, config=config, max_bytes=max_bytes)
    output = write_document(document, config)
    return ConversionResult(output=output, document=document, issues=document.all_issues())


def convert_file(
    path: Path | str,
    *,
    config: PipelineConfig | None = None,
    max_bytes: int | None = None,
) -> ConversionResult:
    """Resolve an ADIF file and write it in the configured output encoding."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return convert_bytes(_read_path(path, max_bytes), str(path), config=config)


# =============================================================================
# Public API Exports
# =============================================================================

__all__ = [
    "AdifTokenizer",
    "ConversionResult",
    "FieldDump",
    "Token",
    "TokenKind",
    "build_document",
    "convert_bytes",
    "convert_file",
    "dump_records",
    "parse_bytes",
    "parse_file",
    "parse_selection",
    "parse_stream",
    "resolve_field",
    "write_document",
]
