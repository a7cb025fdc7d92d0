"""Lexer construct recognition.

Each DSL construct is checked in isolation and next to plain text, so the
priority order of the scanner (``///`` before ``//``, ``~//`` before ``~``)
is covered.
"""

import pytest

from scriptorium.errors import ParseError
from scriptorium.lexer import Lexer, format_break, lex
from scriptorium.nodes import (
    Abbreviation,
    Addition,
    CompoundJoin,
    Deletion,
    Entity,
    Gap,
    Head,
    LineBreak,
    Norm,
    Note,
    PageBreak,
    Supplied,
    SuppliedBlock,
    Text,
    Unclear,
    WordBoundary,
    WordContinuation,
)


def nodes(source: str) -> tuple:  # type: ignore[type-arg]
    return lex(source).nodes


class TestBreaks:
    """Line and page breaks."""

    def test_line_break_with_label(self) -> None:
        assert nodes("word //5 next") == (
            Text("word "),
            LineBreak("5"),
            Text(" next"),
        )

    def test_line_break_without_label(self) -> None:
        assert nodes("//") == (LineBreak(None),)

    def test_line_break_label_is_digits_only(self) -> None:
        assert nodes("//12a") == (LineBreak("12"), Text("a"))

    def test_page_break_label_runs_to_whitespace(self) -> None:
        assert nodes("///12v rest") == (PageBreak("12v"), Text(" rest"))

    def test_page_break_without_label(self) -> None:
        assert nodes("///") == (PageBreak(""),)

    def test_continued_line_break(self) -> None:
        assert nodes("ok~//3 ay") == (
            Text("ok"),
            WordContinuation(),
            LineBreak("3"),
            Text(" ay"),
        )

    def test_continued_page_break(self) -> None:
        assert nodes("ok~///{2r}") == (Text("ok"), WordContinuation(), PageBreak("2r"))

    def test_continued_break_label_stops_before_letters(self) -> None:
        assert nodes("hef~//2ir") == (
            Text("hef"),
            WordContinuation(),
            LineBreak("2"),
            Text("ir"),
        )
        assert nodes("hef~///2ir") == (Text("hef"), WordContinuation(), PageBreak("2"), Text("ir"))

    def test_braced_break_labels(self) -> None:
        assert nodes("hef~//{2}ir") == (
            Text("hef"),
            WordContinuation(),
            LineBreak("2"),
            Text("ir"),
        )
        assert nodes("//{5a} x") == (LineBreak("5a"), Text(" x"))
        assert nodes("///{1 r}") == (PageBreak("1 r"),)

    def test_unclosed_braced_label(self) -> None:
        with pytest.raises(ParseError, match="Expected '}'"):
            nodes("//{5a")

    def test_continued_line_break_without_label(self) -> None:
        assert nodes("ok~// x") == (Text("ok"), WordContinuation(), LineBreak(None), Text(" x"))


class TestFormatBreak:
    """Written break labels lex back unchanged."""

    @pytest.mark.parametrize(
        "marker,label,expected",
        [
            ("//", "5", "//5"),
            ("//", "5a", "//{5a}"),
            ("//", None, "//"),
            ("///", "12v", "///12v"),
            ("///", "1 r", "///{1 r}"),
            ("///", "", "///"),
        ],
    )
    def test_top_level(self, marker: str, label: str | None, expected: str) -> None:
        assert format_break(marker, label) == expected

    def test_inline_labels_are_braced(self) -> None:
        assert format_break("//", "2", inline=True) == "~//{2}"
        assert format_break("///", "1v", inline=True) == "~///{1v}"
        assert format_break("//", None, inline=True) == "~//"

    @pytest.mark.parametrize("label", ["7", "5a", "iv", "12-13"])
    def test_line_label_survives_lexing(self, label: str) -> None:
        assert nodes(format_break("//", label) + " next") == (LineBreak(label), Text(" next"))
        assert nodes("a" + format_break("//", label, inline=True) + "b") == (
            Text("a"),
            WordContinuation(),
            LineBreak(label),
            Text("b"),
        )


class TestInlineConstructs:
    """Single-token editorial constructs."""

    def test_abbreviation(self) -> None:
        assert nodes(".abbr[dni]{domini}") == (Abbreviation("dni", "domini"),)

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("[...]", Gap(None, None)),
            ("[...3]", Gap(3, None)),
            ("[...<ab>]", Gap(None, "ab")),
            ("[...3<ab>]", Gap(3, "ab")),
        ],
    )
    def test_gap_forms(self, source: str, expected: Gap) -> None:
        assert nodes(source) == (expected,)

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("<t>", Supplied("t")),
            ("-{x}-", Deletion("x")),
            ("+{x}+", Addition("x")),
            ("^{x}", Note("x")),
            ("?{x}?", Unclear("x")),
        ],
    )
    def test_editorial_wrappers(self, source: str, expected: object) -> None:
        assert nodes(source) == (expected,)

    def test_nested_brackets_in_deletion(self) -> None:
        assert nodes("-{a<b>c}-") == (Deletion("a<b>c"),)

    def test_text_around_construct(self) -> None:
        assert nodes("a+{b}+c") == (Text("a"), Addition("b"), Text("c"))


class TestEntities:
    """``:name:`` references and colons that are not entities."""

    def test_entity(self) -> None:
        assert nodes(":eth:") == (Entity("eth"),)

    def test_entity_inside_word(self) -> None:
        assert nodes("ma:thorn:r") == (Text("ma"), Entity("thorn"), Text("r"))

    def test_entity_name_with_digits_and_underscore(self) -> None:
        assert nodes(":a_1:") == (Entity("a_1"),)

    @pytest.mark.parametrize("source", ["a: b", "a:b", "::", ": x :"])
    def test_colon_that_is_not_an_entity_is_text(self, source: str) -> None:
        assert nodes(source) == (Text(source),)


class TestJoinsAndBoundaries:
    """Compound joins and explicit word boundaries."""

    def test_compound_join(self) -> None:
        assert nodes("upp~haf") == (Text("upp"), CompoundJoin(), Text("haf"))

    def test_word_boundary(self) -> None:
        assert nodes("a|b") == (Text("a"), WordBoundary(), Text("b"))


class TestBlocks:
    """Braced blocks whose body is DSL."""

    def test_head(self) -> None:
        assert nodes(".head{Title}") == (Head("Title"),)

    def test_norm(self) -> None:
        assert nodes(".norm{ok}") == (Norm("ok"),)

    def test_supplied_block_keeps_inner_braces(self) -> None:
        assert nodes(".supplied{a -{b}- c}") == (SuppliedBlock("a -{b}- c"),)


class TestDocument:
    """The Document wrapper."""

    def test_empty_source(self) -> None:
        document = lex("")
        assert len(document) == 0
        assert list(document) == []

    def test_lexer_class_matches_function(self) -> None:
        source = "a //1 .abbr[x]{y}"
        assert Lexer(source).parse() == lex(source)
