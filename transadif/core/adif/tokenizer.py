"""
ADIF tokenizer.

ADIF files consist of:
- An optional free-text preamble
- Header fields terminated by <eoh>
- Records, each a run of fields terminated by <eor>

The tokenizer only finds tags. Field values are not decoded here: a field
token carries a bounded window of raw bytes, and the caller tells the
tokenizer how many of them the value really used by calling consume()
before asking for the next token.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from transadif.core.grammar import ANY_TAG, EOH_TAG, EOR_TAG
from transadif.core.models import RawField

# Bytes read past the longest possible value, for boundary checks
LOOKAHEAD = 1024

# Longest character in any supported encoding
MAX_CHAR_BYTES = 4


class TokenKind(Enum):
    """Kinds of tokens."""

    FIELD = auto()
    END_OF_HEADER = auto()
    END_OF_RECORD = auto()


class TokenizerState(Enum):
    """Section of the document being scanned."""

    HEADER = auto()  # Before <eoh>
    RECORDS = auto()  # After <eoh>, or no header at all
    AWAITING_CONSUME = auto()  # A field token was returned
    DONE = auto()  # Input exhausted


class TokenizerError(Exception):
    """Tokenizer used out of order."""


@dataclass(frozen=True)
class Token:
    """
    One tag.

    gap holds the bytes between the end of the previous token (or consumed
    field value) and this tag.
    """

    kind: TokenKind
    offset: int
    gap: bytes = b""
    field: RawField | None = None


def _split_preamble(data: bytes) -> tuple[int, bool]:
    """
    Find where the tagged body starts.

    Returns:
        (body start, has_header). A body start of len(data) means the
        whole input is preamble.
    """
    eoh = EOH_TAG.search(data)
    if eoh is not None:
        eor = EOR_TAG.search(data, 0, eoh.start())
        if eor is None:
            first = ANY_TAG.search(data)
            return (first.start() if first is not None else eoh.start()), True

    stripped = len(data) - len(data.lstrip())
    if ANY_TAG.match(data, stripped):
        return stripped, False

    return len(data), False


class AdifTokenizer:
    """
    Pull tokenizer over a complete input buffer.

    Usage:
        tokenizer = AdifTokenizer(data)
        while (token := tokenizer.next_token()) is not None:
            if token.kind is TokenKind.FIELD:
                tokenizer.consume(resolved_length)
    """

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.body_start, self.has_header = _split_preamble(data)
        self._pos = self.body_start
        self._field_start = 0
        self._state = TokenizerState.HEADER if self.has_header else TokenizerState.RECORDS
        self._section = self._state
        if self.body_start >= len(data):
            self._state = TokenizerState.DONE

    @property
    def preamble(self) -> bytes:
        """Bytes before the first tag."""
        return self.data[: self.body_start]

    @property
    def all_preamble(self) -> bool:
        """True when the input holds no tags the tokenizer will read."""
        return self.body_start >= len(self.data)

    @property
    def position(self) -> int:
        """Current scan position."""
        return self._pos

    @property
    def remainder(self) -> bytes:
        """Bytes after the last token (valid once next_token returned None)."""
        if self._state is not TokenizerState.DONE:
            return b""
        return self.data[self._pos :]

    def next_token(self) -> Token | None:
        """
        Get the next token, or None at the end of input.

        Raises:
            TokenizerError: If the previous field was not consumed
        """
        if self._state is TokenizerState.AWAITING_CONSUME:
            raise TokenizerError("consume() must be called after a field token")
        if self._state is TokenizerState.DONE:
            return None

        search_from = self._pos
        while True:
            match = ANY_TAG.search(self.data, search_from)
            if match is None:
                self._state = TokenizerState.DONE
                return None

            terminator = match.group(4)
            # A second <eoh> inside the records is plain text
            if terminator and terminator.lower() == b"eoh" and self._section is TokenizerState.RECORDS:
                search_from = match.end()
                continue
            break

        gap = self.data[self._pos : match.start()]

        if terminator:
            self._pos = match.end()
            if terminator.lower() == b"eoh":
                self._section = self._state = TokenizerState.RECORDS
                return Token(TokenKind.END_OF_HEADER, match.start(), gap)
            return Token(TokenKind.END_OF_RECORD, match.start(), gap)

        length = int(match.group(2))
        start = match.end()
        window_end = start + MAX_CHAR_BYTES * length + LOOKAHEAD
        tag_type = match.group(3)
        field = RawField(
            name=match.group(1).decode("ascii"),
            declared_length=length,
            tag_type=tag_type.decode("ascii") if tag_type else None,
            raw_bytes=self.data[start:window_end],
            offset=start,
            reaches_end=window_end >= len(self.data),
        )
        self._field_start = start
        self._pos = start
        self._state = TokenizerState.AWAITING_CONSUME
        return Token(TokenKind.FIELD, match.start(), gap, field)

    def consume(self, length: int) -> None:
        """
        Mark length bytes of the current field value as used.

        Raises:
            TokenizerError: If no field is pending or length is negative
        """
        if self._state is not TokenizerState.AWAITING_CONSUME:
            raise TokenizerError("consume() called without a pending field")
        if length < 0:
            raise TokenizerError(f"cannot consume {length} bytes")
        self._pos = min(self._field_start + length, len(self.data))
        self._state = self._section
