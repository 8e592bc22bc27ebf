"""Tests for CLI main module."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from transadif.cli.main import app

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

runner = CliRunner()

SIMPLE_LOG = b"<call:4>K1AB<eor>"


class TestCliBasics:
    """Basic CLI tests."""

    def test_version_option(self) -> None:
        """Test --version option."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "transadif" in result.output
        assert "0.1.0" in result.output

    def test_version_short_option(self) -> None:
        """Test -V short option."""
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0

    def test_help_option(self) -> None:
        """Test --help option."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--input-encoding" in result.output

    def test_missing_input_file(self, tmp_path: Path) -> None:
        """Test that a missing input is a usage error."""
        result = runner.invoke(app, [str(tmp_path / "missing.adi")])
        assert result.exit_code == 2


class TestConvert:
    """Tests for conversion."""

    def test_file_to_file(self, write_log: Callable[..., Path], tmp_path: Path) -> None:
        out = tmp_path / "out.adi"
        result = runner.invoke(app, [str(write_log(SIMPLE_LOG)), "-o", str(out), "-q"])
        assert result.exit_code == 0
        assert out.read_bytes() == b"<eoh>\n<call:4>K1AB\n<eor>\n"

    def test_stdin_to_stdout(self) -> None:
        result = runner.invoke(app, ["-q"], input=SIMPLE_LOG)
        assert result.exit_code == 0
        assert result.stdout_bytes == b"<eoh>\n<call:4>K1AB\n<eor>\n"

    def test_output_encoding(self, latin1_log: bytes) -> None:
        result = runner.invoke(app, ["-q", "-e", "latin1"], input=latin1_log)
        assert result.exit_code == 0
        assert b"<ENCODING:10>ISO-8859-1\n" in result.stdout_bytes
        assert b"<name:4>Jos\xe9\n" in result.stdout_bytes

    def test_ascii_transliteration(self) -> None:
        data = "<name:5>café<eor>".encode()
        result = runner.invoke(app, ["-q", "-e", "ascii", "-a"], input=data)
        assert result.exit_code == 0
        assert b"<name:4>cafe\n" in result.stdout_bytes

    def test_empty_replacement(self) -> None:
        data = "<name:5>café<eor>".encode()
        result = runner.invoke(app, ["-q", "-e", "ascii", "-r", ""], input=data)
        assert result.exit_code == 0
        assert b"<name:9>caf&0xE9;\n" in result.stdout_bytes

    def test_delete(self) -> None:
        data = "<name:5>café<eor>".encode()
        result = runner.invoke(app, ["-q", "-e", "ascii", "--delete"], input=data)
        assert b"<name:3>caf\n" in result.stdout_bytes

    def test_forced_input_encoding(self) -> None:
        data = b"<name:4>Jos\xe9<eor>"
        result = runner.invoke(app, ["-q", "-i", "cp1252"], input=data)
        assert result.exit_code == 0
        assert "<name:4>José\n".encode() in result.stdout_bytes

    def test_mojibake_repaired(self, mojibake_log: bytes) -> None:
        result = runner.invoke(app, ["-q"], input=mojibake_log)
        assert result.exit_code == 0
        assert "<name:4>René\n".encode() in result.stdout_bytes


class TestReports:
    """Tests for the issue report."""

    def test_terminal_report(self, write_log: Callable[..., Path], tmp_path: Path) -> None:
        path = write_log(b"<comment:14>Tom &amp Jerry<eor>")
        result = runner.invoke(app, [str(path), "-o", str(tmp_path / "out.adi"), "--no-color"])
        assert result.exit_code == 0
        assert "TA-ENT-001" in result.output
        assert "Found: 1 warning(s)" in result.output

    def test_clean_report(self, write_log: Callable[..., Path], tmp_path: Path) -> None:
        path = write_log(SIMPLE_LOG)
        result = runner.invoke(app, [str(path), "-o", str(tmp_path / "out.adi"), "--no-color"])
        assert "No issues found" in result.output

    def test_json_report(self, mojibake_log: bytes, write_log: Callable[..., Path], tmp_path: Path) -> None:
        path = write_log(mojibake_log)
        result = runner.invoke(
            app, [str(path), "-o", str(tmp_path / "out.adi"), "--report", "json"]
        )
        report = json.loads(result.output)
        assert report["issues"] == []
        assert report["summary"]["correction_count"] == 1
        assert report["summary"]["input_encoding"] == "UTF-8"

    def test_unknown_report_format(self) -> None:
        result = runner.invoke(app, ["--report", "xml"], input=SIMPLE_LOG)
        assert result.exit_code == 64


class TestExitCodes:
    """Tests for exit codes."""

    def test_strict_mojibake_is_an_error(
        self, mojibake_log: bytes, write_log: Callable[..., Path], tmp_path: Path
    ) -> None:
        out = tmp_path / "out.adi"
        result = runner.invoke(app, [str(write_log(mojibake_log)), "-o", str(out), "-s", "-q"])
        assert result.exit_code == 1
        assert "<name:5>RenÃ©".encode() in out.read_bytes()

    def test_strict_length_mismatch_is_fatal(
        self, write_log: Callable[..., Path], tmp_path: Path
    ) -> None:
        out = tmp_path / "out.adi"
        path = write_log("<name:11>José García<eor>".encode())
        result = runner.invoke(app, [str(path), "-o", str(out), "-s", "--no-color"])
        assert result.exit_code == 2
        assert "TA-LEN-001" in result.output
        assert not out.exists()

    def test_strict_unencodable_is_fatal(self) -> None:
        data = "<name:5>café<eor>".encode()
        result = runner.invoke(app, ["-s", "-e", "ascii"], input=data)
        assert result.exit_code == 2
        assert "TA-OUT-001" in result.output

    def test_unknown_output_encoding(self) -> None:
        result = runner.invoke(app, ["-e", "klingon"], input=SIMPLE_LOG)
        assert result.exit_code == 64

    def test_long_replacement(self) -> None:
        result = runner.invoke(app, ["-r", "ab"], input=SIMPLE_LOG)
        assert result.exit_code == 64

    def test_max_bytes(self) -> None:
        result = runner.invoke(app, ["--max-bytes", "5"], input=SIMPLE_LOG)
        assert result.exit_code == 2
        assert "TA-IO-001" in result.output

    def test_max_bytes_from_environment(self) -> None:
        result = runner.invoke(app, [], input=SIMPLE_LOG, env={"TRANSADIF_MAX_BYTES": "5"})
        assert result.exit_code == 2

    def test_invalid_thresholds_file(self, tmp_path: Path) -> None:
        path = tmp_path / "thresholds.yaml"
        path.write_text("thresholds:\n  max_control_ratio: 5\n", encoding="utf-8")
        result = runner.invoke(app, ["--thresholds", str(path)], input=SIMPLE_LOG)
        assert result.exit_code == 78


class TestDebug:
    """Tests for --debug dumps."""

    def test_debug_dump(self, utf8_log: bytes, write_log: Callable[..., Path], tmp_path: Path) -> None:
        path = write_log(utf8_log)
        result = runner.invoke(
            app, [str(path), "-o", str(tmp_path / "out.adi"), "-d", "1", "-q", "--no-color"]
        )
        assert result.exit_code == 0
        assert "QSO 1" in result.output
        assert "QSO 2" not in result.output
        assert "EA4XYZ" in result.output

    def test_debug_missing_qso(self, utf8_log: bytes, write_log: Callable[..., Path], tmp_path: Path) -> None:
        path = write_log(utf8_log)
        result = runner.invoke(app, [str(path), "-o", str(tmp_path / "out.adi"), "-d", "7", "-q"])
        assert "QSO 7 does not exist" in result.output

    def test_invalid_selection(self) -> None:
        result = runner.invoke(app, ["-d", "x"], input=SIMPLE_LOG)
        assert result.exit_code == 64
