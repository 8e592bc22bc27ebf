"""
Output adapters for CLI.

Provides the report formats: terminal and JSON.
"""

from transadif.cli.output.base import (
    OutputAdapter,
    OutputFormat,
    ReportSummary,
    get_output_adapter,
)
from transadif.cli.output.json import JsonOutput
from transadif.cli.output.terminal import TerminalOutput

__all__ = [
    "JsonOutput",
    "OutputAdapter",
    "OutputFormat",
    "ReportSummary",
    "TerminalOutput",
    "get_output_adapter",
]
