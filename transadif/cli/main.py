"""
Main CLI application.

Entry point for the transadif command.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path  # noqa: TC003
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError

import transadif
from transadif.cli.context import ExitCode, get_exit_code
from transadif.cli.output import OutputFormat, ReportSummary, get_output_adapter

# Default input size limit for CLI usage (can be overridden via flag/env).
_DEFAULT_MAX_BYTES = 100 * 1024 * 1024  # 100 MiB


def _resolve_max_bytes(max_bytes: int | None) -> int | None:
    if max_bytes is not None:
        return None if max_bytes <= 0 else max_bytes

    env_value = os.environ.get("TRANSADIF_MAX_BYTES")
    if env_value:
        try:
            parsed = int(env_value)
        except ValueError:
            raise typer.BadParameter("TRANSADIF_MAX_BYTES must be an integer") from None
        return None if parsed <= 0 else parsed

    return _DEFAULT_MAX_BYTES


app = typer.Typer(
    name="transadif",
    help="Repair and re-encode ADIF log files",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"transadif {transadif.__version__}")
        raise typer.Exit()


@app.command()
def convert(
    input: Annotated[
        Path | None,
        typer.Argument(help="Input ADIF file (reads stdin if omitted)", exists=True, dir_okay=False),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file (writes stdout if omitted)"),
    ] = None,
    input_encoding: Annotated[
        str | None,
        typer.Option("--input-encoding", "-i", help="Force the input encoding and skip detection"),
    ] = None,
    encoding: Annotated[
        str,
        typer.Option("--encoding", "-e", help="Output encoding (UTF-8, ISO-8859-1, Windows-1252, ASCII, ...)"),
    ] = "UTF-8",
    transcode: Annotated[
        bool,
        typer.Option("--transcode", "-t", help="Replace characters with compatible ones (curly quotes, dashes)"),
    ] = False,
    replace: Annotated[
        str,
        typer.Option("--replace", "-r", help="Replacement for unencodable characters ('' writes &0xHH;)"),
    ] = "?",
    delete: Annotated[
        bool,
        typer.Option("--delete", help="Delete unencodable characters"),
    ] = False,
    ascii_transliterate: Annotated[
        bool,
        typer.Option("--ascii", "-a", help="Transliterate to characters without diacritics"),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", "-s", help="Report problems instead of correcting them"),
    ] = False,
    debug: Annotated[
        str | None,
        typer.Option("--debug", "-d", metavar="QSOS", help="Dump fields of QSOs ('1,3,5' or 'all') to stderr"),
    ] = None,
    report: Annotated[
        str,
        typer.Option("--report", help="Report format: terminal, json"),
    ] = "terminal",
    thresholds: Annotated[
        Path | None,
        typer.Option("--thresholds", help="YAML file with scoring thresholds", exists=True, dir_okay=False),
    ] = None,
    max_bytes: Annotated[
        int | None,
        typer.Option(
            "--max-bytes",
            help="Maximum input size in bytes (0 = unlimited). Defaults to TRANSADIF_MAX_BYTES or 100MiB.",
        ),
    ] = None,
    color: Annotated[
        bool,
        typer.Option("--color/--no-color", help="Enable/disable colored output"),
    ] = True,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress the issue report"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log detection and corrections"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Repair the encoding of an ADIF file and write it in the chosen encoding."""
    from transadif.core.adif import convert_bytes, dump_records, parse_selection
    from transadif.core.codec import get_registry
    from transadif.core.config import (
        CharacterPolicy,
        PipelineConfig,
        get_default_thresholds,
        load_thresholds,
    )
    from transadif.core.errors import TransadifError

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        output_format = OutputFormat(report)
    except ValueError:
        typer.echo(f"Unknown report format: {report}", err=True)
        typer.echo("Available formats: terminal, json", err=True)
        raise typer.Exit(ExitCode.USAGE) from None

    target = get_registry().find(encoding)
    if target is None:
        typer.echo(f"Unsupported output encoding: {encoding}", err=True)
        raise typer.Exit(ExitCode.USAGE)

    selection: set[int] | None = None
    if debug is not None:
        try:
            selection = parse_selection(debug)
        except ValueError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(ExitCode.USAGE) from None

    try:
        policy = CharacterPolicy(
            transcode=transcode,
            transliterate=ascii_transliterate,
            delete=delete,
            replacement=None if delete else replace,
        )
    except ValidationError:
        typer.echo("--replace takes a single character or an empty string", err=True)
        raise typer.Exit(ExitCode.USAGE) from None

    try:
        scoring = load_thresholds(thresholds) if thresholds else get_default_thresholds()
    except (ValueError, OSError, yaml.YAMLError) as e:
        typer.echo(f"Invalid thresholds file: {e}", err=True)
        raise typer.Exit(ExitCode.CONFIG) from None

    config = PipelineConfig(
        output_encoding=target.identifier,
        input_encoding=input_encoding,
        policy=policy,
        strict=strict,
        thresholds=scoring,
    )

    max_bytes_value = _resolve_max_bytes(max_bytes)
    adapter = get_output_adapter(output_format, color=color)

    if input is not None:
        filename = str(input)
        with input.open("rb") as f:
            data = f.read(max_bytes_value + 1) if max_bytes_value else f.read()
    else:
        filename = "<stdin>"
        stdin = typer.get_binary_stream("stdin")
        data = stdin.read(max_bytes_value + 1) if max_bytes_value else stdin.read()

    try:
        result = convert_bytes(data, filename, config=config, max_bytes=max_bytes_value)
    except TransadifError as e:
        adapter.write(adapter.render_fatal(e.issue))
        raise typer.Exit(ExitCode.FATAL) from None

    if debug is not None:
        if selection is not None:
            known = {r.index for r in result.document.records}
            for missing in sorted(selection - known):
                typer.echo(f"QSO {missing} does not exist", err=True)
        adapter.write(adapter.render_debug(dump_records(result.document, selection)))

    if output:
        output.write_bytes(result.output)
    else:
        stdout = typer.get_binary_stream("stdout")
        stdout.write(result.output)
        stdout.flush()

    if not quiet:
        summary = ReportSummary.from_result(result, filename, target.identifier)
        adapter.write(adapter.render_issues(result.issues, summary))

    raise typer.Exit(get_exit_code(result.issues))


# =============================================================================
# CLI Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
