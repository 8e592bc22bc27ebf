"""
Output transcoding.

Characters the target encoding can represent are written as is. For every
other character the policy chain is tried in order:

1. transcode: a compatible stand-in (curly quotes to straight quotes, ...)
2. transliterate: strip diacritics, then map remaining letters (ß -> ss)
3. delete, or write the replacement character
   (an empty replacement writes the &0xHH; reference instead)

If nothing applies, or in strict mode, the character is a fatal error.
"""

from __future__ import annotations

import unicodedata

from transadif.core.config import CharacterPolicy
from transadif.core.errors import Issue, UnencodableCharacterError
from transadif.core.models import TranscodeResult

from .registry import EncodingCandidate, get_registry

# Visually or semantically equivalent characters
COMPATIBLE: dict[str, str] = {
    "\u00a0": " ",  # no-break space
    "\u2002": " ",
    "\u2003": " ",
    "\u2007": " ",
    "\u2009": " ",
    "\u202f": " ",
    "\u200b": "",  # zero width space
    "«": '"',
    "»": '"',
    "‐": "-",
    "‑": "-",
    "‒": "-",
    "–": "-",
    "—": "-",
    "―": "-",
    "−": "-",
    "‘": "'",
    "’": "'",
    "‚": ",",
    "‛": "'",
    "“": '"',
    "”": '"',
    "„": '"',
    "‟": '"',
    "′": "'",
    "″": '"',
    "‹": "<",
    "›": ">",
    "…": "...",
    "•": "*",
    "·": ".",
    "×": "x",
    "⁄": "/",
    "€": "EUR",
    "©": "(C)",
    "®": "(R)",
    "™": "TM",
    "°": "deg",
}

# Letters that survive decomposition
TRANSLITERATION: dict[str, str] = {
    "ß": "ss",
    "ẞ": "SS",
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ø": "o",
    "Ø": "O",
    "đ": "d",
    "Đ": "D",
    "ð": "d",
    "Ð": "D",
    "ħ": "h",
    "Ħ": "H",
    "ı": "i",
    "ł": "l",
    "Ł": "L",
    "þ": "th",
    "Þ": "Th",
    "ŀ": "l",
    "Ŀ": "L",
}


def transliterate(char: str) -> str:
    """ASCII-leaning approximation of a character (may be unchanged)."""
    if char in TRANSLITERATION:
        return TRANSLITERATION[char]
    decomposed = unicodedata.normalize("NFKD", char)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return "".join(TRANSLITERATION.get(c, c) for c in stripped)


def entity_reference(char: str) -> str:
    """The &0xHH; reference for a character."""
    return f"&0x{ord(char):02X};"


def _encodable(text: str, target: EncodingCandidate) -> bool:
    try:
        target.encode(text)
    except UnicodeEncodeError:
        return False
    return True


def _substitute(
    char: str,
    target: EncodingCandidate,
    policy: CharacterPolicy,
    strict: bool,
) -> str:
    """Text written in place of an unencodable character."""
    if not strict:
        if policy.transcode and char in COMPATIBLE and _encodable(COMPATIBLE[char], target):
            return COMPATIBLE[char]
        if policy.transliterate:
            approximation = transliterate(char)
            if approximation and approximation != char and _encodable(approximation, target):
                return approximation
        if policy.delete:
            return ""
        if policy.replacement == "":
            return entity_reference(char)
        if policy.replacement is not None and _encodable(policy.replacement, target):
            return policy.replacement

    raise UnencodableCharacterError(
        Issue.fatal(
            code="TA-OUT-001",
            title="Unencodable character",
            message=f"'{char}' (U+{ord(char):04X}) cannot be written as {target.identifier}",
            context={"character": char, "code_point": f"U+{ord(char):04X}", "encoding": target.identifier},
        )
    )


def encode_report(
    text: str,
    target: EncodingCandidate | str,
    policy: CharacterPolicy | None = None,
    *,
    strict: bool = False,
) -> TranscodeResult:
    """
    Encode text, applying the policy to unrepresentable characters.

    Raises:
        UnencodableCharacterError: No policy step handles a character, or strict mode
    """
    if isinstance(target, str):
        target = get_registry().lookup(target)
    policy = policy or CharacterPolicy()

    try:
        return TranscodeResult(data=target.encode(text))
    except UnicodeEncodeError:
        pass

    out = bytearray()
    substitutions: list[tuple[str, str]] = []
    for char in text:
        try:
            out += target.encode(char)
        except UnicodeEncodeError:
            written = _substitute(char, target, policy, strict)
            substitutions.append((char, written))
            out += target.encode(written)
    return TranscodeResult(data=bytes(out), substitutions=substitutions)


def encode(
    text: str,
    target: EncodingCandidate | str,
    policy: CharacterPolicy | None = None,
    *,
    strict: bool = False,
) -> bytes:
    """Encode text; see encode_report."""
    return encode_report(text, target, policy, strict=strict).data
