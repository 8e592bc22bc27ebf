"""
Character reference expansion.

Recognized forms:
- &name;   HTML5 named references
- &#N;     decimal
- &#xH;    hexadecimal
- &0xH;    the form written for characters an output encoding lacks

Malformed references are left verbatim and reported as warnings.
"""

from __future__ import annotations

import re
from html.entities import html5

from transadif.core.errors import Issue
from transadif.core.models import EntityExpansion

DEFAULT_LOOKAHEAD = 32

# What may follow '&' for the text to be read as a reference
_REFERENCE_START = re.compile(r"[#A-Za-z0-9]")

_DECIMAL = re.compile(r"#([0-9]+)")
_HEX = re.compile(r"#[xX]([0-9A-Fa-f]+)|0[xX]([0-9A-Fa-f]+)")
_NAME = re.compile(r"[A-Za-z][A-Za-z0-9]*")


def _code_point(value: int) -> str | None:
    if value <= 0 or value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        return None
    return chr(value)


def resolve_reference(body: str) -> str | None:
    """
    Text a reference body (between '&' and ';') stands for.

    Returns None for unknown names and invalid code points.
    """
    if match := _DECIMAL.fullmatch(body):
        return _code_point(int(match.group(1)))
    if match := _HEX.fullmatch(body):
        return _code_point(int(match.group(1) or match.group(2), 16))
    if _NAME.fullmatch(body):
        return html5.get(body + ";")
    return None


def _malformed(reference: str, reason: str) -> Issue:
    return Issue.warn(
        code="TA-ENT-001",
        title="Malformed entity reference",
        message=f"'{reference}' left as is: {reason}",
        context={"reference": reference},
    )


def expand(text: str, *, max_lookahead: int = DEFAULT_LOOKAHEAD) -> EntityExpansion:
    """
    Replace character references in text.

    Args:
        text: Field text
        max_lookahead: How far after '&' to look for the closing ';'

    Returns:
        EntityExpansion with the new text, the number of replacements and
        one warning per malformed reference
    """
    if "&" not in text:
        return EntityExpansion(text=text)

    parts: list[str] = []
    issues: list[Issue] = []
    expanded = 0
    pos = 0

    while (amp := text.find("&", pos)) >= 0:
        parts.append(text[pos:amp])
        start = amp + 1

        # A bare '&' is plain text
        if not _REFERENCE_START.match(text, start):
            parts.append("&")
            pos = start
            continue

        semicolon = text.find(";", start, start + max_lookahead)
        if semicolon < 0:
            reference = text[amp : start + max_lookahead].split()[0]
            issues.append(_malformed(reference, "no terminating ';'"))
            parts.append("&")
            pos = start
            continue

        reference = text[amp : semicolon + 1]
        replacement = resolve_reference(text[start:semicolon])
        if replacement is None:
            issues.append(_malformed(reference, "unknown name or invalid code point"))
            parts.append("&")
            pos = start
            continue

        parts.append(replacement)
        expanded += 1
        pos = semicolon + 1

    parts.append(text[pos:])
    return EntityExpansion(text="".join(parts), expanded=expanded, issues=issues)
