"""
Document pipeline.

Turns raw ADIF bytes into a Document:
1. Strip a UTF-8 BOM
2. Pick the document encoding (override, ENCODING header field, detection)
3. Resolve every field in order: length, per-field encoding, mojibake, entities
4. Attach the bytes between tags as excess of the preceding field or record

Fields are resolved strictly in sequence: where one field ends decides
where the next tag is searched for.
"""

from __future__ import annotations

import logging

from transadif.core.codec import correct, detect, expand, get_registry, resolve
from transadif.core.codec.detector import UTF8_BOM
from transadif.core.codec.registry import EncodingCandidate
from transadif.core.config import PipelineConfig
from transadif.core.errors import Issue, Location, TransadifError
from transadif.core.grammar import ANY_TAG, ENCODING_TAG, EOH_TAG
from transadif.core.models import (
    Correction,
    CorrectionKind,
    Document,
    RawField,
    Record,
    ResolvedField,
)

from .tokenizer import AdifTokenizer, TokenKind

logger = logging.getLogger(__name__)


def declared_encoding(tokenizer: AdifTokenizer) -> str | None:
    """Value of the ENCODING header field, found without decoding the header."""
    if not tokenizer.has_header:
        return None
    data = tokenizer.data
    eoh = EOH_TAG.search(data, tokenizer.body_start)
    end = eoh.start() if eoh is not None else len(data)
    match = ENCODING_TAG.search(data, tokenizer.body_start, end)
    if match is None:
        return None
    value = data[match.end() : match.end() + int(match.group(1))]
    name = value.decode("ascii", errors="ignore").strip()
    return name or None


def _value_span(raw: RawField) -> bytes:
    """Bytes from the field start up to the next tag."""
    match = ANY_TAG.search(raw.raw_bytes)
    return raw.raw_bytes[: match.start()] if match is not None else raw.raw_bytes


def resolve_field(
    raw: RawField,
    encoding: EncodingCandidate,
    config: PipelineConfig,
    *,
    allow_override: bool = True,
) -> ResolvedField:
    """
    Resolve one field.

    Raises:
        TransadifError: Strict mode and the field cannot be read as declared
    """
    registry = get_registry()
    thresholds = config.thresholds

    resolution = resolve(
        raw.declared_length,
        raw.raw_bytes,
        encoding,
        reaches_end=raw.reaches_end,
        strict=config.strict,
    )
    corrections = list(resolution.corrections)

    if not resolution.clean and allow_override and config.allow_inference:
        detection = detect(_value_span(raw), thresholds=thresholds)
        if detection.encoding != encoding.identifier:
            alternative = registry.lookup(detection.encoding)
            retry = resolve(
                raw.declared_length,
                raw.raw_bytes,
                alternative,
                reaches_end=raw.reaches_end,
            )
            if retry.clean:
                logger.debug(
                    "Field %s at byte %d decoded as %s", raw.name, raw.offset, alternative.identifier
                )
                corrections = [
                    Correction(
                        kind=CorrectionKind.ENCODING_OVERRIDE,
                        description=(
                            f"decoded as {alternative.identifier} instead of {encoding.identifier}"
                        ),
                    ),
                    *retry.corrections,
                ]
                resolution = retry
                encoding = alternative

    issues: list[Issue] = list(resolution.issues)
    text = resolution.text

    mojibake = correct(text, encoding.identifier, config.max_mojibake_rounds, thresholds=thresholds)
    if mojibake.rounds_applied:
        if config.strict:
            issues.append(
                Issue.error(
                    code="TA-MOJ-001",
                    title="Potential mojibake",
                    message=f"Text looks misencoded; correction would read '{mojibake.text}'",
                    context={"suggestion": mojibake.text, "rounds": mojibake.rounds_applied},
                )
            )
        else:
            corrections.append(
                Correction(
                    kind=CorrectionKind.MOJIBAKE,
                    description=f"{mojibake.rounds_applied} round(s) of mojibake undone",
                )
            )
            text = mojibake.text

    expansion = expand(text, max_lookahead=thresholds.entity_lookahead)
    issues.extend(expansion.issues)
    if expansion.expanded:
        if config.strict:
            issues.append(
                Issue.error(
                    code="TA-ENT-002",
                    title="Unexpanded entity reference",
                    message=(
                        f"{expansion.expanded} reference(s) left as written; "
                        f"expansion would read '{expansion.text}'"
                    ),
                    context={"suggestion": expansion.text, "references": expansion.expanded},
                )
            )
        else:
            corrections.append(
                Correction(
                    kind=CorrectionKind.ENTITY_EXPANDED,
                    description=f"{expansion.expanded} reference(s) expanded",
                )
            )
            text = expansion.text

    if corrections:
        logger.debug(
            "Field %s at byte %d: %s", raw.name, raw.offset, "; ".join(str(c) for c in corrections)
        )

    consumed = resolution.consumed_byte_length
    return ResolvedField(
        name=raw.name,
        tag_type=raw.tag_type,
        declared_length=raw.declared_length,
        text=text,
        raw_bytes=raw.raw_bytes[:consumed],
        consumed_byte_length=consumed,
        encoding=encoding.identifier,
        offset=raw.offset,
        corrections=corrections,
        issues=issues,
    )


def _with_excess(item: ResolvedField | Record, gap: bytes) -> ResolvedField | Record:
    if not gap:
        return item
    return item.model_copy(update={"excess_bytes": item.excess_bytes + gap})


def build_document(
    data: bytes,
    config: PipelineConfig | None = None,
    filename: str | None = None,
) -> Document:
    """
    Resolve a complete ADIF document.

    Args:
        data: Raw file content
        config: Pipeline configuration (defaults apply when None)
        filename: Used in issue locations

    Returns:
        Document with all fields resolved

    Raises:
        TransadifError: Fatal condition, located at the offending field
    """
    config = config or PipelineConfig()
    registry = get_registry()
    issues: list[Issue] = []

    if data.startswith(UTF8_BOM):
        data = data[len(UTF8_BOM) :]

    tokenizer = AdifTokenizer(data)

    forced: EncodingCandidate | None = None
    if config.input_encoding:
        forced = registry.find(config.input_encoding)
        if forced is None:
            issues.append(
                Issue.warn(
                    code="TA-ENC-001",
                    title="Unknown encoding",
                    message=f"Input encoding '{config.input_encoding}' is not supported, detecting instead",
                    location=Location(file=filename),
                    context={"encoding": config.input_encoding},
                )
            )

    declared = forced.identifier if forced is not None else declared_encoding(tokenizer)
    detection = detect(
        data,
        declared,
        config.allow_inference,
        thresholds=config.thresholds,
    )
    issues.extend(w.at(Location(file=filename)) for w in detection.warnings)
    encoding = registry.lookup(detection.encoding)
    logger.debug("Document encoding %s (%s)", encoding.identifier, detection.confidence.value)

    if tokenizer.all_preamble and data.strip():
        issues.append(
            Issue.info(
                code="TA-HDR-001",
                title="No header terminator",
                message="No <eoh> found, the whole input is kept as preamble",
                location=Location(file=filename),
            )
        )

    header_fields: list[ResolvedField] = []
    header_excess = b""
    records: list[Record] = []
    current: list[ResolvedField] = []
    record_index = 1
    in_header = tokenizer.has_header
    # Where the next gap goes: a field list, "record", "header" or None
    gap_target: list[ResolvedField] | str | None = None

    def attach(gap: bytes) -> None:
        nonlocal header_excess
        if not gap:
            return
        if isinstance(gap_target, list) and gap_target:
            gap_target[-1] = _with_excess(gap_target[-1], gap)  # type: ignore[assignment]
        elif gap_target == "record" and records:
            records[-1] = _with_excess(records[-1], gap)  # type: ignore[assignment]
        elif gap_target == "header":
            header_excess += gap

    while (token := tokenizer.next_token()) is not None:
        attach(token.gap)

        if token.kind is TokenKind.FIELD:
            assert token.field is not None
            fields = header_fields if in_header else current
            location = Location(
                file=filename,
                record=None if in_header else record_index,
                field_index=len(fields) + 1,
                field=token.field.name,
                offset=token.field.offset,
            )
            try:
                field = resolve_field(
                    token.field,
                    encoding,
                    config,
                    allow_override=forced is None,
                )
            except TransadifError as exc:
                raise exc.at(location) from exc
            tokenizer.consume(field.consumed_byte_length)
            if field.issues:
                field = field.model_copy(update={"issues": [i.at(location) for i in field.issues]})
            fields.append(field)
            gap_target = fields

        elif token.kind is TokenKind.END_OF_HEADER:
            in_header = False
            gap_target = "header"

        else:
            records.append(Record(index=record_index, fields=current))
            current = []
            record_index += 1
            gap_target = "record"

    attach(tokenizer.remainder)
    if current:
        # Trailing record without <eor>
        records.append(Record(index=record_index, fields=current))

    return Document(
        preamble=encoding.decode(tokenizer.preamble, "replace"),
        has_header=tokenizer.has_header,
        header_fields=header_fields,
        header_excess=header_excess,
        records=records,
        detection=detection,
        issues=issues,
    )
