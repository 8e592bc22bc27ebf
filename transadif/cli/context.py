"""
CLI exit codes.
"""

from __future__ import annotations

from enum import IntEnum

from transadif.core.errors import Issue, Severity


class ExitCode(IntEnum):
    """CLI exit codes following Unix conventions."""

    SUCCESS = 0  # Output written, nothing worse than warnings
    ERROR = 1  # Output written, errors reported
    FATAL = 2  # Processing aborted, no output
    USAGE = 64  # Command line usage error
    CONFIG = 78  # Configuration error


def get_exit_code(issues: list[Issue]) -> ExitCode:
    """Determine exit code from reported issues."""
    severities = {issue.severity for issue in issues}
    if Severity.FATAL in severities:
        return ExitCode.FATAL
    if Severity.ERROR in severities:
        return ExitCode.ERROR
    return ExitCode.SUCCESS
