"""
Terminal output adapter.

Renders issues and debug dumps with ANSI colors.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from transadif.cli.output.base import OutputAdapter, OutputFormat, ReportSummary

if TYPE_CHECKING:
    from transadif.core.adif import FieldDump
    from transadif.core.errors import Issue


def _supports_unicode(stream: TextIO) -> bool:
    """Check if the stream can print Unicode symbols."""
    try:
        "\u2713".encode(getattr(stream, "encoding", None) or sys.getdefaultencoding())
        return True
    except (UnicodeEncodeError, LookupError):
        return False


SEVERITY_COLORS = {
    "fatal": "bold red",
    "error": "red",
    "warn": "yellow",
    "info": "blue",
}

SEVERITY_SYMBOLS_UNICODE = {
    "fatal": "\u2716",
    "error": "\u2716",
    "warn": "\u26a0",
    "info": "\u2139",
}

SEVERITY_SYMBOLS_ASCII = {
    "fatal": "X",
    "error": "X",
    "warn": "!",
    "info": "i",
}

SUCCESS_SYMBOL_UNICODE = "\u2713"
SUCCESS_SYMBOL_ASCII = "OK"


class TerminalOutput(OutputAdapter):
    """Terminal output with ANSI colors."""

    format = OutputFormat.TERMINAL

    def __init__(self, stream: TextIO | None = None, color: bool = True):
        super().__init__(stream=stream, color=color)
        self._use_color = color and self._is_tty()
        self._use_unicode = _supports_unicode(self.stream)
        self._severity_symbols = (
            SEVERITY_SYMBOLS_UNICODE if self._use_unicode else SEVERITY_SYMBOLS_ASCII
        )
        self._success_symbol = SUCCESS_SYMBOL_UNICODE if self._use_unicode else SUCCESS_SYMBOL_ASCII

    def _is_tty(self) -> bool:
        """Check if output is a TTY."""
        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def render_issues(
        self,
        issues: list[Issue],
        summary: ReportSummary | None = None,
    ) -> str:
        """Render issues to terminal string."""
        lines: list[str] = []

        if summary:
            lines.append(self._style(summary.file, "bold"))
            lines.append(
                f"  {summary.input_encoding} ({summary.confidence}) -> {summary.output_encoding}, "
                f"{summary.record_count} record(s), {summary.correction_count} correction(s)"
            )

        if not issues:
            lines.append(self._style(f"{self._success_symbol} No issues found.", "green"))
            return "\n".join(lines)

        for issue in issues:
            lines.append(self._format_issue(issue))

        if summary:
            lines.append("")
            lines.append(self._format_summary(summary))

        return "\n".join(lines)

    def render_debug(self, dumps: list[FieldDump]) -> str:
        """Render field dumps grouped by QSO."""
        if not dumps:
            return "No matching QSOs."

        lines: list[str] = []
        current = -1
        for dump in dumps:
            if dump.record != current:
                if lines:
                    lines.append("")
                lines.append(self._style(f"QSO {dump.record}", "bold"))
                current = dump.record
            lines.append(f"  {self._style(dump.name, 'bold')} (declared {dump.declared_length})")
            lines.append(f"    raw bytes:   {dump.raw_bytes!r}")
            lines.append(f"    hex:         {dump.hex}")
            lines.append(f"    text:        {dump.text!r}")
            lines.append(f"    characters:  {dump.char_count}")
            lines.append(f"    bytes:       {dump.byte_count}")
            lines.append(f"    encoding:    {dump.encoding}")
            if dump.excess:
                lines.append(f"    excess:      {dump.excess!r}")
            for correction in dump.corrections:
                lines.append(f"    {self._style('corrected', 'yellow')}:   {correction}")
        return "\n".join(lines)

    def _format_issue(self, issue: Issue) -> str:
        """Format a single issue."""
        severity = issue.severity.value
        color = SEVERITY_COLORS.get(severity, "white")
        symbol = self._severity_symbols.get(severity, "*")

        location = issue.location.model_copy(update={"file": None})
        location_str = str(location) if str(location) != "<unknown>" else ""

        styled_symbol = self._style(symbol, color)
        styled_code = self._style(issue.code, "dim")

        if location_str:
            return f"  {styled_symbol} {location_str}: {issue.message} [{styled_code}]"
        else:
            return f"  {styled_symbol} {issue.message} [{styled_code}]"

    def _format_summary(self, summary: ReportSummary) -> str:
        """Format summary line."""
        parts = []

        if summary.fatal_count > 0:
            parts.append(self._style(f"{summary.fatal_count} fatal", "bold red"))
        if summary.error_count > 0:
            parts.append(self._style(f"{summary.error_count} error(s)", "red"))
        if summary.warn_count > 0:
            parts.append(self._style(f"{summary.warn_count} warning(s)", "yellow"))
        if summary.info_count > 0:
            parts.append(self._style(f"{summary.info_count} info", "blue"))

        return f"Found: {', '.join(parts)}"

    def _style(self, text: str, style: str) -> str:
        """Apply style to text if colors are enabled."""
        if not self._use_color:
            return text

        codes = {
            "bold": "\033[1m",
            "dim": "\033[2m",
            "red": "\033[31m",
            "green": "\033[32m",
            "yellow": "\033[33m",
            "blue": "\033[34m",
            "bold red": "\033[1;31m",
            "white": "\033[37m",
        }
        reset = "\033[0m"

        code = codes.get(style, "")
        if code:
            return f"{code}{text}{reset}"
        return text
