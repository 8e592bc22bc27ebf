"""
Pytest configuration and fixtures for transadif tests.

Provides fixtures for:
- Sample ADIF logs in several encodings
- Writing samples to temporary files
- Common pipeline configurations
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from transadif.core.config import CharacterPolicy, PipelineConfig

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def adif_field(name: str, value: bytes, length: int | None = None) -> bytes:
    """Build one field; length defaults to the byte length of value."""
    declared = len(value) if length is None else length
    return f"<{name}:{declared}>".encode("ascii") + value


# =============================================================================
# Sample Logs
# =============================================================================


@pytest.fixture
def utf8_log() -> bytes:
    """UTF-8 log with byte-counted lengths and two QSOs."""
    return (
        b"Exported by a logger\n"
        b"<adif_ver:5>3.1.4 <eoh>\n"
        + adif_field("call", b"EA4XYZ")
        + adif_field("name", "José García".encode())
        + b"<eor>\n"
        + adif_field("call", b"DL1ABC")
        + adif_field("qth", "Köln".encode())
        + b"<eor>\n"
    )


@pytest.fixture
def latin1_log() -> bytes:
    """ISO-8859-1 log that declares its encoding."""
    return (
        adif_field("ENCODING", b"ISO-8859-1")
        + b"<eoh>\n"
        + adif_field("call", b"EA4XYZ")
        + adif_field("name", "José".encode("latin-1"))
        + b"<eor>\n"
    )


@pytest.fixture
def mojibake_log() -> bytes:
    """UTF-8 log whose name field was double-encoded once."""
    return adif_field("call", b"F5ABC") + adif_field("name", "RenÃ©".encode()) + b"<eor>\n"


# =============================================================================
# Files
# =============================================================================


@pytest.fixture
def write_log(tmp_path: Path) -> Callable[[bytes, str], Path]:
    """Factory writing bytes to a file under tmp_path."""

    def _write(data: bytes, name: str = "log.adi") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


# =============================================================================
# Configurations
# =============================================================================


@pytest.fixture
def strict_config() -> PipelineConfig:
    """Report-only configuration."""
    return PipelineConfig(strict=True)


@pytest.fixture
def ascii_config() -> PipelineConfig:
    """US-ASCII output with transliteration."""
    return PipelineConfig(
        output_encoding="US-ASCII",
        policy=CharacterPolicy(transliterate=True),
    )
