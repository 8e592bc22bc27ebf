"""
ADIF tag grammar.

Tags are ASCII in every supported encoding:
- Field tag: <NAME:LENGTH> or <NAME:LENGTH:TYPE>
- End of header: <eoh>
- End of record: <eor>

Matching is case-insensitive.
"""

from __future__ import annotations

import re

FIELD_TAG = re.compile(
    rb"<([A-Za-z0-9_]+):(\d{1,9})(?::([A-Za-z0-9_]+))?>",
)

# Field tag or terminator. Group 4 is set for terminators.
ANY_TAG = re.compile(
    rb"<(?:([A-Za-z0-9_]+):(\d{1,9})(?::([A-Za-z0-9_]+))?|(eoh|eor))>",
    re.IGNORECASE,
)

EOH_TAG = re.compile(rb"<eoh>", re.IGNORECASE)
EOR_TAG = re.compile(rb"<eor>", re.IGNORECASE)

# Header field declaring the document encoding
ENCODING_TAG = re.compile(rb"<encoding:(\d{1,9})(?::[A-Za-z0-9_]+)?>", re.IGNORECASE)

# Whitespace allowed between a field value and the next tag
_SEPARATOR = re.compile(rb"[ \t\r\n\f\v]*")


def is_tag_start(data: bytes) -> bool:
    """Check whether data starts with a field tag or a section terminator."""
    return ANY_TAG.match(data) is not None


def is_boundary(data: bytes, pos: int, reaches_end: bool) -> bool:
    """
    Check whether a field may end at pos.

    The bytes after pos, once separator whitespace is skipped, must start a
    tag. Running out of bytes counts only when data reaches the end of the
    input.
    """
    if pos > len(data):
        return False
    after = _SEPARATOR.match(data, pos).end()  # type: ignore[union-attr]
    if after >= len(data):
        return reaches_end
    return ANY_TAG.match(data, after) is not None
