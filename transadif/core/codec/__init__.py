"""
Encoding resolution core.

Registry, detection, field-length resolution, mojibake correction,
entity expansion and output transcoding.
"""

from __future__ import annotations

from .detector import detect, rank_candidates
from .entities import expand
from .mojibake import correct
from .registry import (
    BUILTIN_ENCODINGS,
    ISO_8859_1,
    US_ASCII,
    UTF_8,
    WINDOWS_1252,
    EncodingCandidate,
    EncodingRegistry,
    get_registry,
)
from .resolver import resolve
from .scoring import control_ratio, plausibility, quality_score
from .transcoder import encode, encode_report

__all__ = [
    "BUILTIN_ENCODINGS",
    "ISO_8859_1",
    "US_ASCII",
    "UTF_8",
    "WINDOWS_1252",
    "EncodingCandidate",
    "EncodingRegistry",
    "control_ratio",
    "correct",
    "detect",
    "encode",
    "encode_report",
    "expand",
    "get_registry",
    "plausibility",
    "quality_score",
    "rank_candidates",
    "resolve",
]
