"""
Per-QSO debug dumps.

Shows, for selected records, what each field looked like in the input and
what the pipeline made of it.
"""

from __future__ import annotations

from pydantic import BaseModel

from transadif.core.codec import get_registry
from transadif.core.models import Document

# Full hex view up to this many bytes, a preview beyond
HEX_PREVIEW_BYTES = 32
HEX_PREVIEW_HEAD = 16


class FieldDump(BaseModel, frozen=True):
    """Debug view of one field."""

    record: int
    name: str
    declared_length: int
    raw_bytes: bytes
    hex: str
    text: str
    char_count: int
    byte_count: int
    excess: str
    encoding: str
    corrections: list[str]


def hex_view(data: bytes) -> str:
    """Space-separated hex, truncated after 16 bytes for long values."""
    if len(data) <= HEX_PREVIEW_BYTES:
        return data.hex(" ")
    rest = len(data) - HEX_PREVIEW_HEAD
    return f"{data[:HEX_PREVIEW_HEAD].hex(' ')} ... ({rest} more bytes)"


def parse_selection(value: str) -> set[int] | None:
    """
    Parse a QSO selection.

    "all" selects every record (returned as None); otherwise a comma
    separated list of 1-based record numbers.

    Raises:
        ValueError: On anything else
    """
    value = value.strip()
    if value.lower() == "all":
        return None
    selected: set[int] = set()
    for part in value.split(","):
        part = part.strip()
        if not (part.isascii() and part.isdigit()) or int(part) < 1:
            raise ValueError(f"Invalid QSO number: '{part}'")
        selected.add(int(part))
    return selected


def dump_records(document: Document, selection: set[int] | None = None) -> list[FieldDump]:
    """Field dumps for the selected records (all when selection is None)."""
    source = get_registry().lookup(document.encoding)
    dumps: list[FieldDump] = []
    for record in document.records:
        if selection is not None and record.index not in selection:
            continue
        for field in record.fields:
            dumps.append(
                FieldDump(
                    record=record.index,
                    name=field.name,
                    declared_length=field.declared_length,
                    raw_bytes=field.raw_bytes,
                    hex=hex_view(field.raw_bytes),
                    text=field.text,
                    char_count=field.char_count,
                    byte_count=field.consumed_byte_length,
                    excess=source.decode(field.excess_bytes, "replace"),
                    encoding=field.encoding,
                    corrections=[str(c) for c in field.corrections],
                )
            )
    return dumps
