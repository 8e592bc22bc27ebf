"""
Output adapter base classes.

Defines the interface for report adapters.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, TextIO

from pydantic import BaseModel

from transadif.core.errors import Issue, Severity

if TYPE_CHECKING:
    from transadif.core.adif import ConversionResult, FieldDump


class OutputFormat(Enum):
    """Supported report formats."""

    TERMINAL = "terminal"
    JSON = "json"


class ReportSummary(BaseModel, frozen=True):
    """Counts shown under a report."""

    file: str
    input_encoding: str
    confidence: str
    output_encoding: str
    record_count: int
    correction_count: int
    fatal_count: int = 0
    error_count: int = 0
    warn_count: int = 0
    info_count: int = 0

    @classmethod
    def from_result(cls, result: ConversionResult, file: str, output_encoding: str) -> ReportSummary:
        document = result.document

        def count(severity: Severity) -> int:
            return sum(1 for i in result.issues if i.severity == severity)

        return cls(
            file=file,
            input_encoding=document.encoding,
            confidence=document.detection.confidence.value,
            output_encoding=output_encoding,
            record_count=len(document.records),
            correction_count=document.correction_count,
            fatal_count=count(Severity.FATAL),
            error_count=count(Severity.ERROR),
            warn_count=count(Severity.WARN),
            info_count=count(Severity.INFO),
        )


class OutputAdapter(ABC):
    """Base class for report adapters."""

    format: OutputFormat

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        self.stream = stream or sys.stderr
        self.color = color

    @abstractmethod
    def render_issues(
        self,
        issues: list[Issue],
        summary: ReportSummary | None = None,
    ) -> str:
        """Render issues to string."""
        pass

    @abstractmethod
    def render_debug(self, dumps: list[FieldDump]) -> str:
        """Render per-field debug dumps to string."""
        pass

    def render_fatal(self, issue: Issue) -> str:
        """Render the issue that aborted processing."""
        return self.render_issues([issue])

    def write(self, content: str) -> None:
        """Write content to stream."""
        self.stream.write(content)
        if not content.endswith("\n"):
            self.stream.write("\n")
        self.stream.flush()


def get_output_adapter(
    format: OutputFormat | str,
    stream: TextIO | None = None,
    color: bool = True,
) -> OutputAdapter:
    """Get an output adapter by format."""
    if isinstance(format, str):
        format = OutputFormat(format)

    if format == OutputFormat.TERMINAL:
        from transadif.cli.output.terminal import TerminalOutput

        return TerminalOutput(stream=stream, color=color)
    elif format == OutputFormat.JSON:
        from transadif.cli.output.json import JsonOutput

        return JsonOutput(stream=stream, color=color)
    else:
        raise ValueError(f"Unknown output format: {format}")
