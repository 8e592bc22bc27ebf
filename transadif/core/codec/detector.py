"""
Encoding detection for ADIF data.

Detection priority (first success wins):
1. Explicit declaration (ENCODING header field or caller override)
2. UTF-8 fast path: BOM, or valid UTF-8 that passes the printability bound
3. Statistical inference over the registry, corroborated by charset-normalizer
4. Fallback to ISO-8859-1, which decodes any byte

Detection never fails.
"""

from __future__ import annotations

import logging

from charset_normalizer import from_bytes

from transadif.core.config import ScoringThresholds, get_default_thresholds
from transadif.core.errors import Issue
from transadif.core.models import Confidence, DetectionResult

from .registry import ISO_8859_1, UTF_8, EncodingCandidate, EncodingRegistry, get_registry
from .scoring import control_ratio, plausibility

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


def detect(
    data: bytes,
    declared_encoding: str | None = None,
    allow_inference: bool = True,
    *,
    thresholds: ScoringThresholds | None = None,
    registry: EncodingRegistry | None = None,
) -> DetectionResult:
    """
    Choose the source encoding of a document or field.

    Args:
        data: Bytes to examine
        declared_encoding: Name found in the data or forced by the caller
        allow_inference: Whether statistical inference may run

    Returns:
        DetectionResult; unknown declared names are reported as warnings
    """
    thresholds = thresholds or get_default_thresholds()
    registry = registry or get_registry()
    warnings: list[Issue] = []

    # Step 1: explicit declaration
    if declared_encoding is not None and declared_encoding.strip():
        candidate = registry.find(declared_encoding)
        if candidate is not None:
            logger.debug("Using declared encoding %s", candidate.identifier)
            return DetectionResult(
                encoding=candidate.identifier,
                confidence=Confidence.EXPLICIT,
                score=1.0,
            )
        logger.debug("Declared encoding %r is unknown", declared_encoding)
        warnings.append(
            Issue.warn(
                code="TA-ENC-001",
                title="Unknown encoding",
                message=f"Declared encoding '{declared_encoding}' is not supported, detecting instead",
                context={"encoding": declared_encoding},
            )
        )

    # Step 2: UTF-8 fast path
    if data.startswith(UTF8_BOM):
        return DetectionResult(
            encoding=UTF_8.identifier,
            confidence=Confidence.VALIDATED,
            score=1.0,
            warnings=warnings,
        )
    try:
        text = UTF_8.decode(data)
    except UnicodeDecodeError:
        text = None
    if text is not None and control_ratio(text) <= thresholds.max_control_ratio:
        return DetectionResult(
            encoding=UTF_8.identifier,
            confidence=Confidence.VALIDATED,
            score=1.0,
            warnings=warnings,
        )

    # Step 3: statistical inference
    if allow_inference:
        ranked = rank_candidates(data, thresholds=thresholds, registry=registry)
        if ranked:
            best, score = ranked[0]
            logger.debug("Inference picked %s (score %.3f)", best.identifier, score)
            if score >= thresholds.min_inference_score:
                return DetectionResult(
                    encoding=best.identifier,
                    confidence=Confidence.INFERRED,
                    score=score,
                    warnings=warnings,
                )

    # Step 4: fallback
    logger.debug("Falling back to %s", ISO_8859_1.identifier)
    return DetectionResult(
        encoding=ISO_8859_1.identifier,
        confidence=Confidence.FALLBACK,
        score=0.0,
        warnings=warnings,
    )


def rank_candidates(
    data: bytes,
    *,
    thresholds: ScoringThresholds | None = None,
    registry: EncodingRegistry | None = None,
) -> list[tuple[EncodingCandidate, float]]:
    """
    Score every candidate that decodes data without errors.

    Returns:
        (candidate, score) pairs, best first; ties keep registry order
    """
    thresholds = thresholds or get_default_thresholds()
    registry = registry or get_registry()

    scored: list[tuple[EncodingCandidate, float]] = []
    for candidate in registry.inference_candidates:
        try:
            text = candidate.decode(data)
        except UnicodeDecodeError:
            continue
        score = (
            thresholds.plausibility_weight * plausibility(text)
            + thresholds.signature_weight * candidate.signature_density(data)
        )
        scored.append((candidate, score))

    if len(data) >= thresholds.corroboration_min_bytes and scored:
        pick = _corroborate(data, [c for c, _ in scored], registry)
        if pick is not None:
            scored = [
                (c, s + thresholds.corroboration_bonus if c is pick else s) for c, s in scored
            ]

    scored.sort(key=lambda item: (-item[1], registry.preference_index(item[0])))
    return scored


def _corroborate(
    data: bytes,
    candidates: list[EncodingCandidate],
    registry: EncodingRegistry,
) -> EncodingCandidate | None:
    """Ask charset-normalizer to pick among candidates."""
    results = from_bytes(data, cp_isolation=[c.codec for c in candidates])
    best = results.best()
    if best is None:
        return None
    pick = registry.find(best.encoding)
    if pick is not None and pick in candidates:
        logger.debug("charset-normalizer suggests %s", pick.identifier)
        return pick
    return None
