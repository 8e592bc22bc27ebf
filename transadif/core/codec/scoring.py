"""
Text quality heuristics.

Two measures are used throughout the codec package:

- control_ratio: share of characters that never appear in real log text
  (C0/C1 controls other than whitespace, unassigned and private-use code
  points, surrogates, U+FFFD). Used as the printability bound.
- quality_score: 1 / (1 + penalty), where the penalty counts bad characters
  and mojibake pairs. 1.0 means nothing suspicious was found. Comparing two
  readings of the same text by this score tells which one is less corrupted.

plausibility() rates decoded text for encoding inference.
"""

from __future__ import annotations

import unicodedata
from encodings import cp1252

from transadif.core.config import ScoringThresholds, get_default_thresholds

_ALLOWED_CONTROLS = frozenset("\t\n\r")
_BAD_CATEGORIES = frozenset({"Cc", "Cn", "Co", "Cs"})
_REPLACEMENT = "\ufffd"

# Characters above U+00FF that Windows-1252 maps into 0x80-0x9F
_CP1252_HIGH = {
    char: byte
    for byte, char in enumerate(cp1252.decoding_table)
    if char != "\ufffe" and ord(char) > 0xFF
}


def is_bad_char(char: str) -> bool:
    """Check whether a character marks broken or binary text."""
    if char in _ALLOWED_CONTROLS:
        return False
    return char == _REPLACEMENT or unicodedata.category(char) in _BAD_CATEGORIES


def control_ratio(text: str) -> float:
    """Share of bad characters in text (0.0 for empty text)."""
    if not text:
        return 0.0
    return sum(1 for c in text if is_bad_char(c)) / len(text)


def is_printable(text: str, thresholds: ScoringThresholds | None = None) -> bool:
    """Check text against the printability bound."""
    thresholds = thresholds or get_default_thresholds()
    return control_ratio(text) <= thresholds.max_control_ratio


def byte_value(char: str) -> int | None:
    """Byte a character came from if it was decoded as Windows-1252/ISO-8859-1."""
    code = ord(char)
    if code <= 0xFF:
        return code
    return _CP1252_HIGH.get(char)


def mojibake_pairs(text: str) -> int:
    """
    Count UTF-8 lead/continuation byte pairs read as single-byte characters.

    "Ã©" is one pair: 'Ã' is byte 0xC3 (a UTF-8 lead byte) and '©' is
    byte 0xA9 (a continuation byte).
    """
    pairs = 0
    previous: int | None = None
    for char in text:
        value = byte_value(char)
        if (
            previous is not None
            and value is not None
            and 0xC2 <= previous <= 0xF4
            and 0x80 <= value <= 0xBF
        ):
            pairs += 1
        previous = value
    return pairs


def penalty(text: str, thresholds: ScoringThresholds | None = None) -> float:
    """Weighted count of suspicious characters and pairs."""
    thresholds = thresholds or get_default_thresholds()
    replacements = text.count(_REPLACEMENT)
    bad = sum(1 for c in text if is_bad_char(c)) - replacements
    return (
        bad * thresholds.control_penalty
        + replacements * thresholds.replacement_penalty
        + mojibake_pairs(text) * thresholds.mojibake_pair_penalty
    )


def quality_score(text: str, thresholds: ScoringThresholds | None = None) -> float:
    """Score in (0, 1]; higher is cleaner."""
    return 1.0 / (1.0 + penalty(text, thresholds))


# =============================================================================
# Plausibility of decoded text
# =============================================================================


def _script(char: str) -> str | None:
    """Coarse script of a letter, None for non-letters."""
    if not char.isalpha():
        return None
    code = ord(char)
    if code < 0x80 or 0xC0 <= code <= 0x24F or 0x1E00 <= code <= 0x1EFF:
        return "latin"
    if 0x370 <= code <= 0x3FF:
        return "greek"
    if 0x400 <= code <= 0x52F:
        return "cyrillic"
    if 0x3040 <= code <= 0x30FF or 0x31F0 <= code <= 0x31FF or 0xFF66 <= code <= 0xFF9F:
        return "kana"
    if 0x4E00 <= code <= 0x9FFF or 0x3400 <= code <= 0x4DBF or 0xF900 <= code <= 0xFAFF:
        return "cjk"
    if 0xAC00 <= code <= 0xD7AF or 0x1100 <= code <= 0x11FF or 0x3130 <= code <= 0x318F:
        return "hangul"
    return "other"


# Scripts that legitimately sit inside the same word
_COMPATIBLE_SCRIPTS = {
    "latin": {"latin"},
    "greek": {"greek"},
    "cyrillic": {"cyrillic"},
    "kana": {"kana", "cjk"},
    "cjk": {"kana", "cjk", "hangul"},
    "hangul": {"hangul", "cjk"},
}


def _letter_points(text: str, index: int, script: str) -> float:
    if script == "other":
        return 0.25
    compatible = _COMPATIBLE_SCRIPTS[script]
    for neighbour in (index - 1, index + 1):
        if 0 <= neighbour < len(text):
            other = _script(text[neighbour])
            if other is not None and other not in compatible:
                return 0.0
    return 1.0


def plausibility(text: str) -> float:
    """
    Rate how much the non-ASCII part of text looks like real writing.

    Letters whose neighbours are letters of the same script score 1,
    punctuation and symbols 0.5, bad characters 0. Mojibake pairs are
    subtracted. Text without non-ASCII characters rates 0.0 so it never
    favours one candidate over another.
    """
    total = 0
    points = 0.0
    for index, char in enumerate(text):
        if ord(char) < 0x80:
            continue
        total += 1
        if is_bad_char(char):
            continue
        script = _script(char)
        if script is not None:
            points += _letter_points(text, index, script)
        elif unicodedata.category(char)[0] in "PSZN":
            points += 0.5
    if total == 0:
        return 0.0
    points -= 2 * mojibake_pairs(text)
    return max(0.0, points / total)
