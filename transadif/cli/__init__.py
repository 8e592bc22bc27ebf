"""
CLI for TransADIF.

Command-line interface for repairing and re-encoding ADIF logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from transadif.cli.context import ExitCode, get_exit_code

if TYPE_CHECKING:
    from typer import Typer

    app: Typer


def __getattr__(name: str) -> Any:
    if name == "app":
        from transadif.cli.main import app as _app

        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ExitCode",
    "app",
    "get_exit_code",
]
