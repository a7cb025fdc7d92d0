"""Unterminated constructs fail the whole parse.

The lexer never returns a partial document: an unclosed bracket or a
missing trailing delimiter raises ParseError located at the start of the
construct being scanned.
"""

import pytest

from scriptorium.errors import ParseError
from scriptorium.lexer import Lexer


class TestUnterminatedConstructs:
    """Every bracketed construct reports a missing closer."""

    @pytest.mark.parametrize(
        "source",
        [
            "-{abc",
            "+{abc",
            "^{abc",
            "?{abc",
            ".abbr[dni",
            ".abbr[dni]{domini",
            ".head{Title",
            ".supplied{x",
            ".norm{x",
            "<abc",
            "[...3",
            "[...3<ab",
        ],
    )
    def test_unterminated_raises(self, source: str) -> None:
        with pytest.raises(ParseError):
            Lexer(source).parse()

    def test_unclosed_bracket_message(self) -> None:
        with pytest.raises(ParseError, match=r"Unclosed bracket, expected '\}'"):
            Lexer("-{abc").parse()

    def test_missing_trailing_delimiter(self) -> None:
        """``-{x}`` without the closing ``-`` names what was found."""
        with pytest.raises(ParseError, match="Expected '-', found end of input"):
            Lexer("-{x}").parse()

    def test_abbreviation_without_expansion(self) -> None:
        with pytest.raises(ParseError, match="Expected '\\{', found 'd'"):
            Lexer(".abbr[dni]domini").parse()

    def test_supplied_without_closer(self) -> None:
        with pytest.raises(ParseError, match="Expected '>'"):
            Lexer("a <bc").parse()


class TestErrorLocation:
    """ParseError carries the construct's line and column."""

    def test_location_of_construct_start(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Lexer("ok\n  -{x").parse()
        assert exc_info.value.lineno == 2
        assert exc_info.value.col_offset == 3

    def test_source_file_in_message(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            Lexer("<abc", source_file="leaf.dsl").parse()
        assert str(exc_info.value).startswith("leaf.dsl:1:1 ")
        assert exc_info.value.source_file == "leaf.dsl"
