"""Tests for CLI output adapters."""

import io
import json

import pytest

from transadif.cli.context import ExitCode, get_exit_code
from transadif.cli.output import (
    JsonOutput,
    OutputFormat,
    ReportSummary,
    TerminalOutput,
    get_output_adapter,
)
from transadif.core.adif import convert_bytes, dump_records
from transadif.core.errors import Issue, Location, Severity


def make_issue(
    code: str = "TA-LEN-001",
    severity: Severity = Severity.WARN,
    message: str = "Test message",
    record: int | None = 3,
) -> Issue:
    """Create a test issue."""
    return Issue(
        code=code,
        severity=severity,
        title="Test Issue",
        message=message,
        location=Location(file="log.adi", record=record, field_index=1, field="name"),
    )


def make_summary() -> ReportSummary:
    result = convert_bytes(b"<comment:14>Tom &amp Jerry<eor>")
    return ReportSummary.from_result(result, "log.adi", "UTF-8")


class TestTerminalOutput:
    """Tests for TerminalOutput."""

    def test_render_no_issues(self) -> None:
        output = TerminalOutput(color=False)
        assert "No issues found" in output.render_issues([])

    def test_render_with_issues(self) -> None:
        issues = [
            make_issue(severity=Severity.ERROR, message="Error message"),
            make_issue(code="TA-ENT-001", message="Warning message"),
        ]
        result = TerminalOutput(color=False).render_issues(issues)
        assert "Error message" in result
        assert "Warning message" in result
        assert "record 3" in result
        assert "TA-ENT-001" in result

    def test_summary(self) -> None:
        summary = make_summary()
        result = TerminalOutput(color=False).render_issues([make_issue()], summary)
        assert "log.adi" in result
        assert "UTF-8 (validated) -> UTF-8" in result
        assert "Found: 1 warning(s)" in result

    def test_no_color_codes_when_disabled(self) -> None:
        result = TerminalOutput(color=False).render_issues([make_issue()])
        assert "\033[" not in result

    def test_render_debug(self) -> None:
        document = convert_bytes("<name:11>José García<eor>".encode()).document
        result = TerminalOutput(color=False).render_debug(dump_records(document))
        assert "QSO 1" in result
        assert "name (declared 11)" in result
        assert "bytes:       13" in result
        assert "length_reinterpreted" in result

    def test_render_debug_empty(self) -> None:
        assert TerminalOutput(color=False).render_debug([]) == "No matching QSOs."

    def test_write_appends_newline(self) -> None:
        stream = io.StringIO()
        TerminalOutput(stream=stream, color=False).write("hello")
        assert stream.getvalue() == "hello\n"


class TestJsonOutput:
    """Tests for JsonOutput."""

    def test_render_issues(self) -> None:
        result = json.loads(JsonOutput().render_issues([make_issue()], make_summary()))
        assert result["issues"][0]["code"] == "TA-LEN-001"
        assert result["issues"][0]["severity"] == "warn"
        assert result["issues"][0]["location"]["record"] == 3
        assert result["issues"][0]["description"] == "Declared field length does not match the data"
        assert result["summary"]["record_count"] == 1
        assert result["summary"]["warn_count"] == 1

    def test_render_fatal(self) -> None:
        issue = make_issue(code="TA-OUT-001", severity=Severity.FATAL)
        result = json.loads(JsonOutput().render_fatal(issue))
        assert result["issues"][0]["severity"] == "fatal"
        assert "summary" not in result

    def test_render_debug(self) -> None:
        document = convert_bytes(b"<name:4>Jos\xc3\xa9<eor>").document
        result = json.loads(JsonOutput().render_debug(dump_records(document)))
        field = result["fields"][0]
        assert field["hex"] == "4a6f73c3a9"
        assert field["text"] == "José"
        assert field["byte_count"] == 5


class TestAdapterFactory:
    """Tests for get_output_adapter()."""

    def test_by_enum(self) -> None:
        assert isinstance(get_output_adapter(OutputFormat.JSON), JsonOutput)

    def test_by_name(self) -> None:
        assert isinstance(get_output_adapter("terminal"), TerminalOutput)

    def test_unknown(self) -> None:
        with pytest.raises(ValueError):
            get_output_adapter("xml")


class TestExitCodes:
    """Tests for get_exit_code()."""

    def test_success_with_warnings(self) -> None:
        assert get_exit_code([make_issue()]) is ExitCode.SUCCESS

    def test_error(self) -> None:
        assert get_exit_code([make_issue(), make_issue(severity=Severity.ERROR)]) is ExitCode.ERROR

    def test_fatal(self) -> None:
        assert get_exit_code([make_issue(severity=Severity.FATAL)]) is ExitCode.FATAL
