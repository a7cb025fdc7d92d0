"""Tests for scriptorium utility modules."""

import logging


class TestGetLogger:
    """Tests for get_logger."""

    def test_prefixes_bare_names(self) -> None:
        from scriptorium.utils.logger import get_logger

        assert get_logger("patching").name == "scriptorium.patching"

    def test_keeps_package_names(self) -> None:
        from scriptorium.utils.logger import get_logger

        assert get_logger("scriptorium.lexer.core").name == "scriptorium.lexer.core"
        assert get_logger("scriptorium").name == "scriptorium"

    def test_does_not_match_similar_prefix(self) -> None:
        """A name that merely starts with the package name is still prefixed."""
        from scriptorium.utils.logger import get_logger

        assert get_logger("scriptoriumx").name == "scriptorium.scriptoriumx"

    def test_returns_standard_logger(self) -> None:
        from scriptorium.utils.logger import get_logger

        assert isinstance(get_logger("x"), logging.Logger)
        assert get_logger("x") is get_logger("scriptorium.x")


class TestEscaping:
    """Tests for markup escaping helpers."""

    def test_escape_xml_all_five(self) -> None:
        from scriptorium.markup import escape_xml

        assert escape_xml("<a & \"b\" 'c'>") == "&lt;a &amp; &quot;b&quot; &apos;c&apos;&gt;"

    def test_escape_text_leaves_quotes(self) -> None:
        from scriptorium.markup import escape_text

        assert escape_text("a < b & \"c\"") == "a &lt; b &amp; \"c\""

    def test_format_empty_tag_sorts_attributes(self) -> None:
        from scriptorium.markup import format_empty_tag

        assert format_empty_tag("lb", {"n": "2", "ed": "A"}) == '<lb ed="A" n="2"/>'
        assert format_empty_tag("pb", {}) == "<pb/>"

    def test_format_empty_tag_escapes_values(self) -> None:
        from scriptorium.markup import format_empty_tag

        assert format_empty_tag("lb", {"n": 'a"b'}) == '<lb n="a&quot;b"/>'


class TestMarkupBuilder:
    """Tests for the MarkupBuilder accumulator."""

    def test_append_and_build(self) -> None:
        from scriptorium.markup import MarkupBuilder

        mb = MarkupBuilder()
        mb.append("<w>").append("orð").append_line("</w>")
        assert mb.build() == "<w>orð</w>\n"

    def test_empty_fragments_skipped(self) -> None:
        from scriptorium.markup import MarkupBuilder

        mb = MarkupBuilder()
        mb.append("")
        assert not mb
        mb.append_line()
        assert mb.build() == "\n"
