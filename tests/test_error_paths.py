"""Error-path and malformed input tests.

Covers exception formatting and hierarchy, and the places where bad input
degrades to a marker instead of failing.
"""

import pytest

from scriptorium import Compiler, CompilerConfig, compile_dsl, export_document, import_tei
from scriptorium.errors import (
    ManifestError,
    ParseError,
    SchemaError,
    ScriptoriumError,
    TeiImportError,
)

# =========================================================================
# Exception formatting
# =========================================================================


class TestParseErrorFormatting:
    """Verify ParseError produces well-formatted messages."""

    def test_message_only(self) -> None:
        err = ParseError("Expected '}'")
        assert str(err) == "Expected '}'"
        assert err.lineno is None
        assert err.col_offset is None

    def test_with_line_number(self) -> None:
        assert str(ParseError("bad", lineno=42)) == "42 bad"

    def test_with_line_and_column(self) -> None:
        assert str(ParseError("bad", lineno=10, col_offset=5)) == "10:5 bad"

    def test_with_source_file(self) -> None:
        err = ParseError("bad", lineno=1, col_offset=3, source_file="folio.dsl")
        assert str(err) == "folio.dsl:1:3 bad"
        assert err.message == "bad"

    def test_source_file_only(self) -> None:
        assert str(ParseError("bad", source_file="folio.dsl")) == "folio.dsl bad"


class TestOtherErrors:
    """Messages and attributes of the remaining exceptions."""

    def test_schema_error(self) -> None:
        err = SchemaError("menota.rng", "no such file")
        assert str(err) == "Schema 'menota.rng': no such file"
        assert err.schema_name == "menota.rng"

    def test_manifest_error_with_type(self) -> None:
        assert str(ManifestError("Unknown type", "Foo")) == "Unknown type (_type='Foo')"

    def test_manifest_error_without_type(self) -> None:
        assert str(ManifestError("Missing '_type' field")) == "Missing '_type' field"

    @pytest.mark.parametrize("cls", [ParseError, TeiImportError, ManifestError])
    def test_hierarchy(self, cls: type) -> None:
        assert issubclass(cls, ScriptoriumError)
        assert issubclass(SchemaError, ScriptoriumError)


# =========================================================================
# Lexer failures
# =========================================================================


class TestUnterminatedConstructs:
    """Every bracketed construct fails hard when left open."""

    @pytest.mark.parametrize(
        "source",
        [
            ".abbr[dni",
            ".abbr[dni]",
            ".abbr[dni]{domini",
            "[...3<ab]",
            "[...3",
            "<supplied",
            "-{deleted}",
            "+{added",
            "?{unclear",
            "^{note",
            ".supplied{a",
            ".norm{a",
            ".head{a",
        ],
    )
    def test_parse_error(self, source: str) -> None:
        with pytest.raises(ParseError):
            compile_dsl(source)

    def test_no_partial_output(self) -> None:
        with pytest.raises(ParseError):
            compile_dsl("many words before -{the end", config=CompilerConfig(word_wrap=True))


# =========================================================================
# Graceful degradation
# =========================================================================


class TestDegradedOutput:
    """Fragments that do not lex become comments, not exceptions."""

    def test_bad_block_content(self) -> None:
        assert compile_dsl(".head{a -{b}}") == "<head><!-- parse error: a -{b} --></head>"

    def test_word_without_content(self) -> None:
        compiler = Compiler(CompilerConfig(word_wrap=True, multi_level=True))
        assert compiler.compile_word_from_dsl("|", {}) == "<w><!-- no word content: | --></w>\n"

    def test_punctuation_without_mark(self) -> None:
        compiler = Compiler(CompilerConfig(word_wrap=True, multi_level=True))
        assert compiler.compile_punctuation_from_dsl("a&b") == "<pc>a&amp;b</pc>\n"

    def test_unlexable_edit_deletes_content(self) -> None:
        result = import_tei("<TEI><body><p><w>a</w></p></body></TEI>")
        assert export_document(result.manifest, "-{a") == "<TEI><body><p></p></body></TEI>"

    def test_comment_marker_is_escaped(self) -> None:
        compiler = Compiler(CompilerConfig(word_wrap=True))
        assert compiler.compile_fragment_from_dsl("<a") == "<!-- parse error: &lt;a -->"
