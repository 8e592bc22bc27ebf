"""
Field-length resolver.

A declared ADIF length may count bytes (the format's definition) or
characters (what many loggers actually write). Given the declared length
and the bytes from the field's start, the resolver finds the real extent
of the value by trying, in order:

A         the first L bytes, ending on a tag boundary
B         the first L characters, ending on a tag boundary
extend    A cut a multi-byte character in half; finish the character
shrink    A ran into the next tag; back off to the last boundary
fallback  A anyway, with a warning (lossy if the bytes do not decode)

Strict mode accepts only a clean A.
"""

from __future__ import annotations

from collections.abc import Callable

from transadif.core import grammar
from transadif.core.errors import (
    FieldCountMismatchError,
    InvalidByteSequenceError,
    Issue,
)
from transadif.core.models import (
    Correction,
    CorrectionKind,
    Interpretation,
    LengthResolution,
)

from .registry import EncodingCandidate, get_registry

BoundaryCheck = Callable[[bytes, int, bool], bool]

# Longest character in any supported encoding
MAX_CHAR_BYTES = 4


def _try_decode(candidate: EncodingCandidate, data: bytes) -> str | None:
    try:
        return candidate.decode(data)
    except UnicodeDecodeError:
        return None


def _corrected(
    raw: bytes,
    end: int,
    encoding: EncodingCandidate,
    interpretation: Interpretation,
    kind: CorrectionKind,
    description: str,
) -> LengthResolution:
    return LengthResolution(
        consumed_byte_length=end,
        text=encoding.decode(raw[:end]),
        interpretation=interpretation,
        corrections=[Correction(kind=kind, description=description)],
    )


def resolve(
    declared_length: int,
    raw: bytes,
    encoding: EncodingCandidate | str,
    *,
    reaches_end: bool = True,
    strict: bool = False,
    is_boundary: BoundaryCheck = grammar.is_boundary,
) -> LengthResolution:
    """
    Determine how many bytes of raw belong to the field value.

    Args:
        declared_length: Length from the field tag
        raw: Bytes starting at the field value
        encoding: Candidate or registry name used to decode
        reaches_end: Whether raw runs to the end of the input
        strict: Raise instead of correcting
        is_boundary: Check that a value may end at a position

    Returns:
        LengthResolution; clean is False only for the fallback

    Raises:
        FieldCountMismatchError: strict mode and A does not end on a boundary
        InvalidByteSequenceError: strict mode and A does not decode
    """
    if isinstance(encoding, str):
        encoding = get_registry().lookup(encoding)
    length = declared_length

    a_end = min(length, len(raw))
    a_text = _try_decode(encoding, raw[:a_end])
    a_bounded = a_end == length and is_boundary(raw, a_end, reaches_end)

    if a_bounded and a_text is not None:
        return LengthResolution(
            consumed_byte_length=a_end,
            text=a_text,
            interpretation=Interpretation.BYTES,
        )

    if strict:
        context = {"declared_length": length, "encoding": encoding.identifier}
        if a_bounded:
            raise InvalidByteSequenceError(
                Issue.fatal(
                    code="TA-ENC-002",
                    title="Invalid byte sequence",
                    message=f"Field bytes are not valid {encoding.identifier}",
                    context=context,
                )
            )
        raise FieldCountMismatchError(
            Issue.fatal(
                code="TA-LEN-001",
                title="Field length mismatch",
                message=f"Declared length {length} does not end on a tag boundary",
                context=context,
            )
        )

    if not a_bounded:
        resolution = _reinterpret(length, raw, encoding, reaches_end, is_boundary)
        if resolution is not None:
            return resolution

    return _fallback(length, raw[:a_end], a_text, encoding, a_bounded)


def _reinterpret(
    length: int,
    raw: bytes,
    encoding: EncodingCandidate,
    reaches_end: bool,
    is_boundary: BoundaryCheck,
) -> LengthResolution | None:
    """Try B, extend and shrink, in that order."""
    # B: the length counts characters
    boundaries = encoding.char_boundaries(raw, length)
    if length > 0 and len(boundaries) == length:
        end = boundaries[-1]
        if end != length and is_boundary(raw, end, reaches_end):
            return _corrected(
                raw,
                end,
                encoding,
                Interpretation.CHARACTERS,
                CorrectionKind.LENGTH_REINTERPRETED,
                f"declared length {length} counted characters, consumed {end} bytes",
            )

    # Undercount: the first L bytes end inside a multi-byte character
    if 0 < length <= len(raw):
        nearby = encoding.char_boundaries(raw[: length + MAX_CHAR_BYTES])
        after = [p for p in nearby if p > length]
        if length not in nearby and after and is_boundary(raw, after[0], reaches_end):
            return _corrected(
                raw,
                after[0],
                encoding,
                Interpretation.EXTENDED,
                CorrectionKind.LENGTH_EXTENDED,
                f"extended from {length} to {after[0]} bytes to complete a character",
            )

    # Overcount: the first L bytes run into the next tag. The value cannot
    # reach past that tag, even when the input ends within L bytes.
    limit = length
    next_tag = grammar.ANY_TAG.search(raw)
    if next_tag is not None and next_tag.start() < limit:
        limit = next_tag.start()
    candidates = [0, *encoding.char_boundaries(raw[:limit])]
    for end in reversed(candidates):
        if end < length and is_boundary(raw, end, reaches_end):
            return _corrected(
                raw,
                end,
                encoding,
                Interpretation.SHRUNK,
                CorrectionKind.LENGTH_SHRUNK,
                f"shrunk from {length} to {end} bytes before the next tag",
            )

    return None


def _fallback(
    length: int,
    span: bytes,
    text: str | None,
    encoding: EncodingCandidate,
    bounded: bool,
) -> LengthResolution:
    """Keep the first L bytes and report why no reading fitted."""
    corrections: list[Correction] = []
    if text is None:
        text = encoding.decode(span, "replace")
        corrections.append(
            Correction(
                kind=CorrectionKind.LOSSY_DECODE,
                description=f"undecodable {encoding.identifier} bytes replaced",
            )
        )

    if bounded:
        issue = Issue.warn(
            code="TA-ENC-002",
            title="Invalid byte sequence",
            message=f"Field bytes are not valid {encoding.identifier}",
            context={"encoding": encoding.identifier},
        )
    else:
        issue = Issue.warn(
            code="TA-LEN-001",
            title="Field length mismatch",
            message=(
                f"No reading of declared length {length} ends on a tag boundary, "
                f"kept {len(span)} bytes"
            ),
            context={"declared_length": length, "encoding": encoding.identifier},
        )

    return LengthResolution(
        consumed_byte_length=len(span),
        text=text,
        interpretation=Interpretation.FALLBACK,
        corrections=corrections,
        issues=[issue],
    )
