"""
Encoding Registry.

Closed table of the encodings found in legacy logs. Each entry carries its
decode/encode functions and a byte signature as plain data. The registry is
built once at import time and never modified, so it can be shared freely
between threads.
"""

from __future__ import annotations

import codecs
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from encodings import cp1252

from transadif.core.errors import UnknownEncodingError

Decoder = Callable[[bytes, str], str]
Encoder = Callable[[str, str], bytes]


# WHATWG windows-1252: the five bytes Python's cp1252 leaves undefined map to
# the C1 control with the same value, so every byte decodes.
_WINDOWS_1252_TABLE = "".join(
    chr(byte) if char == "\ufffe" else char
    for byte, char in enumerate(cp1252.decoding_table)
)
_WINDOWS_1252_ENCODING_MAP = codecs.charmap_build(_WINDOWS_1252_TABLE)


def _decode_windows_1252(data: bytes, errors: str = "strict") -> str:
    return codecs.charmap_decode(data, errors, _WINDOWS_1252_TABLE)[0]


def _encode_windows_1252(text: str, errors: str = "strict") -> bytes:
    return codecs.charmap_encode(text, errors, _WINDOWS_1252_ENCODING_MAP)[0]


def _codec_decoder(codec: str) -> Decoder:
    def decode(data: bytes, errors: str = "strict") -> str:
        return data.decode(codec, errors)

    return decode


def _codec_encoder(codec: str) -> Encoder:
    def encode(text: str, errors: str = "strict") -> bytes:
        return text.encode(codec, errors)

    return encode


def normalize_name(name: str) -> str:
    """Reduce an encoding name to a lookup key ('ISO_8859-1' -> 'iso88591')."""
    return re.sub(r"[\s_\-]", "", name).lower()


@dataclass(frozen=True)
class EncodingCandidate:
    """
    One supported encoding.

    identifier is the canonical name written to ENCODING header fields.
    codec is the Python codec name used to identify the encoding in
    third-party results. total means every byte value decodes.
    """

    identifier: str
    codec: str
    aliases: tuple[str, ...]
    single_byte: bool
    total: bool
    signature: re.Pattern[bytes] | None
    decoder: Decoder
    encoder: Encoder

    def decode(self, data: bytes, errors: str = "strict") -> str:
        """Decode bytes; raises UnicodeDecodeError in strict mode."""
        return self.decoder(data, errors)

    def encode(self, text: str, errors: str = "strict") -> bytes:
        """Encode text; raises UnicodeEncodeError in strict mode."""
        return self.encoder(text, errors)

    def can_encode(self, char: str) -> bool:
        """Check whether a character is representable."""
        try:
            self.encode(char)
        except UnicodeEncodeError:
            return False
        return True

    def char_boundaries(self, data: bytes, limit: int | None = None) -> list[int]:
        """
        Byte offsets at which each decoded character ends.

        Decoding stops at the first illegal sequence, at an incomplete
        sequence at the end of data, or after limit characters.
        """
        if limit is not None and limit <= 0:
            return []

        if self.single_byte and self.total:
            end = len(data) if limit is None else min(len(data), limit)
            return list(range(1, end + 1))

        decoder = codecs.getincrementaldecoder(self.codec)("strict")
        boundaries: list[int] = []
        for i in range(len(data)):
            try:
                produced = decoder.decode(data[i : i + 1])
            except UnicodeDecodeError:
                break
            boundaries.extend([i + 1] * len(produced))
            if limit is not None and len(boundaries) >= limit:
                return boundaries[:limit]
        return boundaries

    def signature_density(self, data: bytes) -> float:
        """
        Share of high bytes (>= 0x80) that sit inside signature matches.

        Returns 0.0 for data without high bytes.
        """
        high = sum(1 for b in data if b >= 0x80)
        if high == 0 or self.signature is None:
            return 0.0
        covered = 0
        for match in self.signature.finditer(data):
            covered += sum(1 for b in match.group(0) if b >= 0x80)
        return min(1.0, covered / high)


def _candidate(
    identifier: str,
    codec: str,
    aliases: Iterable[str],
    *,
    single_byte: bool,
    total: bool = False,
    signature: bytes | None = None,
    decoder: Decoder | None = None,
    encoder: Encoder | None = None,
) -> EncodingCandidate:
    return EncodingCandidate(
        identifier=identifier,
        codec=codec,
        aliases=tuple(aliases),
        single_byte=single_byte,
        total=total,
        signature=re.compile(signature) if signature is not None else None,
        decoder=decoder or _codec_decoder(codec),
        encoder=encoder or _codec_encoder(codec),
    )


# Accented letters next to ASCII letters, as in "Müller" or "José"
_LATIN_SIGNATURE = rb"(?<=[A-Za-z])[\xc0-\xff]|[\xc0-\xff](?=[A-Za-z])"

UTF_8 = _candidate(
    "UTF-8",
    "utf-8",
    ["utf-8", "utf8"],
    single_byte=False,
    signature=rb"[\xc2-\xdf][\x80-\xbf]|[\xe0-\xef][\x80-\xbf]{2}|[\xf0-\xf4][\x80-\xbf]{3}",
)
WINDOWS_1252 = _candidate(
    "Windows-1252",
    "cp1252",
    ["windows-1252", "cp1252", "win1252", "x-cp1252"],
    single_byte=True,
    total=True,
    signature=_LATIN_SIGNATURE + rb"|[\x80\x85\x91-\x97\x99]",
    decoder=_decode_windows_1252,
    encoder=_encode_windows_1252,
)
ISO_8859_1 = _candidate(
    "ISO-8859-1",
    "latin-1",
    ["iso-8859-1", "iso8859-1", "latin1", "latin-1", "l1", "iso-ir-100"],
    single_byte=True,
    total=True,
    signature=_LATIN_SIGNATURE,
)
US_ASCII = _candidate(
    "US-ASCII",
    "ascii",
    ["us-ascii", "ascii", "ansi_x3.4-1968"],
    single_byte=True,
)
ISO_8859_15 = _candidate(
    "ISO-8859-15",
    "iso8859-15",
    ["iso-8859-15", "latin9", "latin-9"],
    single_byte=True,
    total=True,
    signature=_LATIN_SIGNATURE,
)
WINDOWS_1250 = _candidate(
    "Windows-1250",
    "cp1250",
    ["windows-1250", "cp1250", "win1250"],
    single_byte=True,
    signature=_LATIN_SIGNATURE + rb"|[\x8a\x8c-\x8f\x9a\x9c-\x9f]",
)
WINDOWS_1251 = _candidate(
    "Windows-1251",
    "cp1251",
    ["windows-1251", "cp1251", "win1251"],
    single_byte=True,
    signature=rb"[\xc0-\xff\xa8\xb8]{2,}",
)
KOI8_R = _candidate(
    "KOI8-R",
    "koi8-r",
    ["koi8-r", "koi8"],
    single_byte=True,
    total=True,
    signature=rb"[\xc0-\xff\xa3\xb3]{2,}",
)
SHIFT_JIS = _candidate(
    "Shift_JIS",
    "shift_jis",
    ["shift_jis", "shift-jis", "sjis", "ms_kanji"],
    single_byte=False,
    signature=rb"[\x81-\x9f\xe0-\xef][\x40-\x7e\x80-\xfc]|[\xa1-\xdf]",
)
EUC_JP = _candidate(
    "EUC-JP",
    "euc_jp",
    ["euc-jp", "eucjp"],
    single_byte=False,
    signature=rb"[\xa1-\xfe]{2}|\x8e[\xa1-\xdf]",
)
GBK = _candidate(
    "GBK",
    "gbk",
    ["gbk", "cp936", "gb2312"],
    single_byte=False,
    signature=rb"[\x81-\xfe][\x40-\x7e\x80-\xfe]",
)
BIG5 = _candidate(
    "Big5",
    "big5",
    ["big5", "big5-tw", "csbig5"],
    single_byte=False,
    signature=rb"[\xa1-\xf9][\x40-\x7e\xa1-\xfe]",
)
EUC_KR = _candidate(
    "EUC-KR",
    "euc_kr",
    ["euc-kr", "euckr", "ks_c_5601-1987"],
    single_byte=False,
    signature=rb"[\xb0-\xc8][\xa1-\xfe]",
)

# Registry order doubles as the tie-break preference order
BUILTIN_ENCODINGS: tuple[EncodingCandidate, ...] = (
    UTF_8,
    WINDOWS_1252,
    ISO_8859_1,
    ISO_8859_15,
    WINDOWS_1250,
    WINDOWS_1251,
    KOI8_R,
    SHIFT_JIS,
    EUC_JP,
    GBK,
    BIG5,
    EUC_KR,
    US_ASCII,
)


class EncodingRegistry:
    """
    Read-only lookup table of encoding candidates.

    Lookups accept any alias, any spelling variant of it ('ISO_8859-1',
    'iso88591') and Python codec names ('latin_1').
    """

    def __init__(self, candidates: Iterable[EncodingCandidate]) -> None:
        self._candidates = tuple(candidates)
        by_name: dict[str, EncodingCandidate] = {}
        for candidate in self._candidates:
            keys = [candidate.identifier, candidate.codec, *candidate.aliases]
            for key in keys:
                by_name.setdefault(normalize_name(key), candidate)
            by_name.setdefault(normalize_name(codecs.lookup(candidate.codec).name), candidate)
        self._by_name = by_name

    def __iter__(self) -> Iterator[EncodingCandidate]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None

    def find(self, name: str) -> EncodingCandidate | None:
        """Get a candidate by name, or None if unknown."""
        if not name or not name.strip():
            return None
        candidate = self._by_name.get(normalize_name(name.strip()))
        if candidate is not None:
            return candidate
        try:
            codec_name = codecs.lookup(name.strip()).name
        except LookupError:
            return None
        return self._by_name.get(normalize_name(codec_name))

    def lookup(self, name: str) -> EncodingCandidate:
        """
        Get a candidate by name.

        Raises:
            UnknownEncodingError: If the name is not supported
        """
        candidate = self.find(name)
        if candidate is None:
            raise UnknownEncodingError.for_name(name)
        return candidate

    def preference_index(self, candidate: EncodingCandidate) -> int:
        """Position in the tie-break order (lower wins)."""
        return self._candidates.index(candidate)

    @property
    def inference_candidates(self) -> tuple[EncodingCandidate, ...]:
        """Candidates scored by statistical inference."""
        return tuple(c for c in self._candidates if c is not US_ASCII)

    @property
    def mojibake_codecs(self) -> tuple[EncodingCandidate, ...]:
        """Single-byte encodings UTF-8 is most often misread as."""
        return (WINDOWS_1252, ISO_8859_1)


REGISTRY = EncodingRegistry(BUILTIN_ENCODINGS)


def get_registry() -> EncodingRegistry:
    """Get the process-wide encoding registry."""
    return REGISTRY
