"""Tests for the field-length resolver."""

import pytest

from transadif.core.codec import UTF_8, get_registry, resolve
from transadif.core.errors import FieldCountMismatchError, InvalidByteSequenceError
from transadif.core.models import CorrectionKind, Interpretation

NAME = "José García"  # 11 characters, 13 bytes in UTF-8


class TestByteReading:
    """Tests for the declared length read as bytes."""

    def test_clean_field(self) -> None:
        resolution = resolve(5, b"K1ABC<eor>", "UTF-8")
        assert resolution.interpretation is Interpretation.BYTES
        assert resolution.consumed_byte_length == 5
        assert resolution.text == "K1ABC"
        assert resolution.clean
        assert resolution.corrections == []

    def test_byte_counted_multibyte_value(self) -> None:
        resolution = resolve(13, NAME.encode() + b"<call:4>K1AB", UTF_8)
        assert resolution.interpretation is Interpretation.BYTES
        assert resolution.text == NAME

    def test_whitespace_before_next_tag(self) -> None:
        resolution = resolve(5, b"K1ABC \r\n<eor>", "UTF-8")
        assert resolution.interpretation is Interpretation.BYTES

    def test_end_of_input_is_a_boundary(self) -> None:
        resolution = resolve(5, b"K1ABC", "UTF-8")
        assert resolution.interpretation is Interpretation.BYTES

    def test_truncated_window_is_not_a_boundary(self) -> None:
        resolution = resolve(5, b"K1ABC", "UTF-8", reaches_end=False)
        assert not resolution.clean

    def test_empty_value(self) -> None:
        resolution = resolve(0, b"<eor>", "UTF-8")
        assert resolution.consumed_byte_length == 0
        assert resolution.text == ""
        assert resolution.clean


class TestReinterpretation:
    """Tests for character counts and off-by-some lengths."""

    def test_character_count(self) -> None:
        """Test that a length counting characters consumes all their bytes."""
        resolution = resolve(11, NAME.encode() + b"<eor>", "UTF-8")
        assert resolution.interpretation is Interpretation.CHARACTERS
        assert resolution.consumed_byte_length == 13
        assert resolution.text == NAME
        assert [c.kind for c in resolution.corrections] == [CorrectionKind.LENGTH_REINTERPRETED]
        assert resolution.issues == []

    def test_extend_to_complete_character(self) -> None:
        """Test a byte length that stops inside a character."""
        resolution = resolve(3, "éé".encode() + b"<eor>", "UTF-8")
        assert resolution.interpretation is Interpretation.EXTENDED
        assert resolution.consumed_byte_length == 4
        assert resolution.text == "éé"
        assert [c.kind for c in resolution.corrections] == [CorrectionKind.LENGTH_EXTENDED]

    def test_shrink_before_next_tag(self) -> None:
        """Test a length one byte too long."""
        resolution = resolve(14, NAME.encode() + b"<call:4>K1AB", "UTF-8")
        assert resolution.interpretation is Interpretation.SHRUNK
        assert resolution.consumed_byte_length == 13
        assert resolution.text == NAME
        assert [c.kind for c in resolution.corrections] == [CorrectionKind.LENGTH_SHRUNK]

    def test_shrink_stops_at_first_tag_near_end_of_input(self) -> None:
        """Test a length running past the end of input over later tags."""
        resolution = resolve(50, b"K1ABC<eor>\n", "UTF-8")
        assert resolution.interpretation is Interpretation.SHRUNK
        assert resolution.consumed_byte_length == 5
        assert resolution.text == "K1ABC"

    @pytest.mark.parametrize(
        ("encoding", "text"),
        [("UTF-8", "日本語"), ("Shift_JIS", "日本語"), ("GBK", "中文"), ("UTF-8", "Привет")],
    )
    def test_character_reading_covers_encoded_bytes(self, encoding: str, text: str) -> None:
        """Test that a character-count reading never consumes fewer bytes than the text."""
        candidate = get_registry().lookup(encoding)
        encoded = candidate.encode(text)
        resolution = resolve(len(text), encoded + b"<eor>", candidate)
        assert resolution.consumed_byte_length >= len(encoded)
        assert resolution.text == text


class TestFallback:
    """Tests for the fallback reading."""

    def test_no_reading_fits(self) -> None:
        resolution = resolve(3, b"abcdef", "UTF-8")
        assert resolution.interpretation is Interpretation.FALLBACK
        assert resolution.consumed_byte_length == 3
        assert resolution.text == "abc"
        assert [i.code for i in resolution.issues] == ["TA-LEN-001"]

    def test_invalid_bytes_decoded_lossily(self) -> None:
        resolution = resolve(4, b"Jos\xe9<eor>", "UTF-8")
        assert resolution.interpretation is Interpretation.FALLBACK
        assert resolution.text == "Jos\ufffd"
        assert [c.kind for c in resolution.corrections] == [CorrectionKind.LOSSY_DECODE]
        assert [i.code for i in resolution.issues] == ["TA-ENC-002"]


class TestStrict:
    """Tests for strict mode."""

    def test_clean_field_accepted(self) -> None:
        resolution = resolve(5, b"K1ABC<eor>", "UTF-8", strict=True)
        assert resolution.text == "K1ABC"

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(FieldCountMismatchError) as exc_info:
            resolve(11, NAME.encode() + b"<eor>", "UTF-8", strict=True)
        assert exc_info.value.issue.code == "TA-LEN-001"

    def test_invalid_bytes_raise(self) -> None:
        with pytest.raises(InvalidByteSequenceError) as exc_info:
            resolve(4, b"Jos\xe9<eor>", "UTF-8", strict=True)
        assert exc_info.value.issue.code == "TA-ENC-002"


class TestCustomBoundary:
    """Tests for a caller-supplied boundary check."""

    def test_boundary_check_is_used(self) -> None:
        def anywhere(data: bytes, pos: int, reaches_end: bool) -> bool:
            return True

        resolution = resolve(3, b"abcdef", "UTF-8", is_boundary=anywhere)
        assert resolution.interpretation is Interpretation.BYTES
        assert resolution.text == "abc"
