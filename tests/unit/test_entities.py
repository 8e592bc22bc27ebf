"""Tests for character reference expansion."""

import pytest

from transadif.core.codec import expand
from transadif.core.codec.entities import resolve_reference


class TestExpand:
    """Tests for expand()."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("AT&amp;T", "AT&T"),
            ("Jos&#233;", "José"),
            ("Jos&#xE9;", "José"),
            ("Jos&#Xe9;", "José"),
            ("Jos&0xE9;", "José"),
            ("Jos&eacute;", "José"),
            ("&lt;73&gt;", "<73>"),
        ],
    )
    def test_references_expanded(self, text: str, expected: str) -> None:
        result = expand(text)
        assert result.text == expected
        assert result.issues == []

    def test_expansion_count(self) -> None:
        result = expand("&amp;&lt;&#65;")
        assert result.text == "&<A"
        assert result.expanded == 3

    def test_text_without_ampersand(self) -> None:
        result = expand("K1ABC")
        assert result.text == "K1ABC"
        assert result.expanded == 0

    def test_bare_ampersand_is_text(self) -> None:
        result = expand("rock & roll")
        assert result.text == "rock & roll"
        assert result.issues == []

    def test_missing_semicolon(self) -> None:
        result = expand("Tom &amp Jerry")
        assert result.text == "Tom &amp Jerry"
        assert result.expanded == 0
        assert [i.code for i in result.issues] == ["TA-ENT-001"]
        assert result.issues[0].context["reference"] == "&amp"

    def test_unknown_name(self) -> None:
        result = expand("&bogus;")
        assert result.text == "&bogus;"
        assert [i.code for i in result.issues] == ["TA-ENT-001"]

    @pytest.mark.parametrize("text", ["&#0;", "&#xD800;", "&#1114112;"])
    def test_invalid_code_point(self, text: str) -> None:
        result = expand(text)
        assert result.text == text
        assert len(result.issues) == 1

    def test_semicolon_beyond_lookahead(self) -> None:
        text = "&" + "a" * 40 + ";"
        result = expand(text)
        assert result.text == text
        assert len(result.issues) == 1

    def test_custom_lookahead(self) -> None:
        assert expand("&eacute;", max_lookahead=3).text == "&eacute;"
        assert expand("&eacute;", max_lookahead=8).text == "é"

    def test_valid_after_malformed(self) -> None:
        result = expand("&bogus; &amp;")
        assert result.text == "&bogus; &"
        assert result.expanded == 1
        assert len(result.issues) == 1


class TestResolveReference:
    """Tests for resolve_reference()."""

    def test_named(self) -> None:
        assert resolve_reference("uuml") == "ü"

    def test_decimal(self) -> None:
        assert resolve_reference("#252") == "ü"

    def test_hex_forms(self) -> None:
        assert resolve_reference("#xFC") == "ü"
        assert resolve_reference("0xFC") == "ü"

    def test_unknown(self) -> None:
        assert resolve_reference("nosuchname") is None
        assert resolve_reference("#x") is None
