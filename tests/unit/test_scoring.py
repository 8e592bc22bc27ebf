"""Tests for text quality heuristics."""

from transadif.core.codec.scoring import (
    byte_value,
    control_ratio,
    is_printable,
    mojibake_pairs,
    plausibility,
    quality_score,
)


class TestControlRatio:
    """Tests for control_ratio()."""

    def test_clean_text(self) -> None:
        assert control_ratio("K1ABC") == 0.0

    def test_empty_text(self) -> None:
        assert control_ratio("") == 0.0

    def test_whitespace_controls_allowed(self) -> None:
        """Test that tab, LF and CR do not count."""
        assert control_ratio("a\tb\r\n") == 0.0

    def test_control_characters(self) -> None:
        assert control_ratio("a\x01") == 0.5

    def test_replacement_character(self) -> None:
        assert control_ratio("ab\ufffd") == 1 / 3

    def test_is_printable(self) -> None:
        assert is_printable("José")
        assert not is_printable("\x00\x01\x02")


class TestMojibakePairs:
    """Tests for mojibake pair counting."""

    def test_single_pair(self) -> None:
        assert mojibake_pairs("Ã©") == 1

    def test_clean_accent(self) -> None:
        assert mojibake_pairs("é") == 0

    def test_cp1252_high_characters(self) -> None:
        """Test that characters from 0x80-0x9F count by their byte value."""
        assert byte_value("€") == 0x80
        assert mojibake_pairs("â€™") == 1

    def test_characters_outside_single_byte_range(self) -> None:
        assert byte_value("日") is None
        assert mojibake_pairs("日本") == 0


class TestQualityScore:
    """Tests for quality_score()."""

    def test_clean_text_scores_one(self) -> None:
        assert quality_score("José García") == 1.0

    def test_mojibake_scores_lower(self) -> None:
        assert quality_score("JosÃ© GarcÃ\u00ada") < quality_score("José García")

    def test_more_layers_score_lower(self) -> None:
        assert quality_score("ÃƒÂ©") < quality_score("Ã©")


class TestPlausibility:
    """Tests for plausibility()."""

    def test_ascii_rates_zero(self) -> None:
        """Test that ASCII text favours no candidate."""
        assert plausibility("K1ABC") == 0.0

    def test_accented_latin_word(self) -> None:
        assert plausibility("José") == 1.0

    def test_cyrillic_word(self) -> None:
        assert plausibility("Привет") == 1.0

    def test_mixed_script_word(self) -> None:
        """Test that a Cyrillic letter inside a Latin word rates zero."""
        assert plausibility("JosИ") == 0.0

    def test_symbol_rates_half(self) -> None:
        assert plausibility("5 °C") == 0.5

    def test_mojibake_pair_penalized(self) -> None:
        assert plausibility("JosÃ©") < plausibility("José")
