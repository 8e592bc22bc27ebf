"""
Mojibake correction.

Mojibake is UTF-8 text that was decoded with a single-byte code page,
possibly more than once ("é" -> "Ã©" -> "ÃƒÂ©"). One correction round
re-encodes the text into the code page assumed at decode time and reads
the complete UTF-8 sequences in the result as UTF-8 again. Bytes that are
not part of a valid sequence keep their original character, so fields that
mix clean and corrupted text are repaired too.

The corrector is a small state machine over (rounds, text, score): each
transition tries one more round and is taken only if the score improves,
or stays equal while the text gets shorter. It stops at the first round
that does neither or after max_rounds, so it always terminates and correct
text is returned unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from transadif.core.config import ScoringThresholds, get_default_thresholds
from transadif.core.models import MojibakeResult

from .registry import EncodingCandidate, get_registry
from .scoring import is_printable, quality_score

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 4

# Well-formed UTF-8 multi-byte sequences (no overlongs, no surrogates)
UTF8_SEQUENCE = re.compile(
    rb"[\xc2-\xdf][\x80-\xbf]"
    rb"|\xe0[\xa0-\xbf][\x80-\xbf]"
    rb"|[\xe1-\xec\xee\xef][\x80-\xbf]{2}"
    rb"|\xed[\x80-\x9f][\x80-\xbf]"
    rb"|\xf0[\x90-\xbf][\x80-\xbf]{2}"
    rb"|[\xf1-\xf3][\x80-\xbf]{3}"
    rb"|\xf4[\x80-\x8f][\x80-\xbf]{2}"
)


@dataclass(frozen=True)
class _State:
    text: str
    score: float
    rounds: int = 0


def round_codecs(source_encoding: str | None = None) -> tuple[EncodingCandidate, ...]:
    """Code pages a round may undo, the source encoding first."""
    registry = get_registry()
    codecs: list[EncodingCandidate] = []
    source = registry.find(source_encoding) if source_encoding else None
    if source is not None and source.single_byte:
        codecs.append(source)
    for candidate in registry.mojibake_codecs:
        if candidate not in codecs:
            codecs.append(candidate)
    return tuple(codecs)


def undo_once(text: str, codec: EncodingCandidate) -> tuple[str, int] | None:
    """
    Undo one layer of misdecoding through codec.

    Returns:
        (candidate text, number of UTF-8 sequences decoded), or None if
        text cannot be represented in codec
    """
    try:
        data = codec.encode(text)
    except UnicodeEncodeError:
        return None

    parts: list[str] = []
    sequences = 0
    pos = 0
    for match in UTF8_SEQUENCE.finditer(data):
        parts.append(codec.decode(data[pos : match.start()]))
        parts.append(match.group(0).decode("utf-8"))
        sequences += 1
        pos = match.end()
    parts.append(codec.decode(data[pos:]))
    return "".join(parts), sequences


def _rank(score: float, text: str) -> tuple[float, int]:
    # Equal scores: the shorter text has more sequences decoded ("ÃÂ©" -> "Ã©")
    return score, -len(text)


def _step(
    state: _State,
    codecs: tuple[EncodingCandidate, ...],
    thresholds: ScoringThresholds,
) -> _State | None:
    """Best next state, or None when no round improves the score."""
    best: _State | None = None
    for codec in codecs:
        undone = undo_once(state.text, codec)
        if undone is None:
            continue
        candidate, sequences = undone
        if sequences == 0 or not is_printable(candidate, thresholds):
            continue
        score = quality_score(candidate, thresholds)
        if _rank(score, candidate) > _rank(state.score, state.text) and (
            best is None or _rank(score, candidate) > _rank(best.score, best.text)
        ):
            best = _State(candidate, score, state.rounds + 1)
    return best


def correct(
    text: str,
    source_encoding: str | None = None,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    *,
    thresholds: ScoringThresholds | None = None,
) -> MojibakeResult:
    """
    Undo up to max_rounds layers of mojibake.

    Args:
        text: Decoded field text
        source_encoding: Encoding the text was decoded with
        max_rounds: Upper bound on rounds

    Returns:
        MojibakeResult with the best text found and rounds applied
    """
    thresholds = thresholds or get_default_thresholds()
    codecs = round_codecs(source_encoding)

    state = _State(text, quality_score(text, thresholds))
    while state.rounds < max_rounds:
        following = _step(state, codecs, thresholds)
        if following is None:
            break
        logger.debug("Mojibake round %d: %r -> %r", following.rounds, state.text, following.text)
        state = following

    return MojibakeResult(text=state.text, rounds_applied=state.rounds, score=state.score)
