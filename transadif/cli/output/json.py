"""
JSON output adapter.

Renders issues and debug dumps as JSON for machine processing.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TextIO

from transadif.cli.output.base import OutputAdapter, OutputFormat, ReportSummary
from transadif.core.errors import get_error_description

if TYPE_CHECKING:
    from transadif.core.adif import FieldDump
    from transadif.core.errors import Issue


class JsonOutput(OutputAdapter):
    """JSON output adapter."""

    format = OutputFormat.JSON

    def __init__(self, stream: TextIO | None = None, color: bool = False, indent: int = 2):
        super().__init__(stream=stream, color=False)  # Never colorize JSON
        self.indent = indent

    def render_issues(
        self,
        issues: list[Issue],
        summary: ReportSummary | None = None,
    ) -> str:
        """Render issues as JSON."""
        output: dict[str, Any] = {
            "issues": [self._issue_to_dict(i) for i in issues],
        }

        if summary:
            output["summary"] = summary.model_dump()

        return json.dumps(output, indent=self.indent, default=str, ensure_ascii=False)

    def render_debug(self, dumps: list[FieldDump]) -> str:
        """Render field dumps as JSON."""
        output = {
            "fields": [
                {
                    "record": d.record,
                    "name": d.name,
                    "declared_length": d.declared_length,
                    "hex": d.raw_bytes.hex(),
                    "text": d.text,
                    "char_count": d.char_count,
                    "byte_count": d.byte_count,
                    "encoding": d.encoding,
                    "excess": d.excess,
                    "corrections": d.corrections,
                }
                for d in dumps
            ]
        }
        return json.dumps(output, indent=self.indent, ensure_ascii=False)

    def _issue_to_dict(self, issue: Issue) -> dict[str, Any]:
        """Convert an issue to a dictionary."""
        return {
            "code": issue.code,
            "severity": issue.severity.value,
            "title": issue.title,
            "description": get_error_description(issue.code),
            "message": issue.message,
            "location": issue.location.model_dump(exclude_none=True),
            "context": issue.context,
        }
