"""Tests for single-level compilation."""

import pytest

from scriptorium import compile_dsl
from scriptorium.annotations import (
    Annotation,
    AnnotationSet,
    AnnotationType,
    LemmaMapping,
    NoteValue,
    SemanticValue,
    WordTarget,
)
from scriptorium.compiler import Compiler
from scriptorium.config import CompilerConfig
from scriptorium.entities import EntityDefinition, EntityRegistry
from scriptorium.errors import ParseError

WRAP = CompilerConfig(word_wrap=True)


def _registry() -> EntityRegistry:
    registry = EntityRegistry()
    registry.add("eth", EntityDefinition("U+00F0", "ð"))
    return registry


class TestInlineMarkup:
    """Constructs compiled without word wrapping."""

    def test_plain_text_is_escaped(self) -> None:
        assert compile_dsl("a & b") == "a &amp; b"

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("-{b}-", "<del>b</del>"),
            ("+{b}+", "<add>b</add>"),
            ("?{b}?", "<unclear>b</unclear>"),
            ("^{b}", "<note>b</note>"),
            ("<b>", "<supplied>b</supplied>"),
        ],
    )
    def test_editorial_elements(self, source: str, expected: str) -> None:
        assert compile_dsl(source) == expected

    def test_abbreviation(self) -> None:
        assert compile_dsl(".abbr[dni]{domini}") == (
            "<choice><abbr>dni</abbr><expan>domini</expan></choice>"
        )

    def test_gap_with_quantity(self) -> None:
        assert compile_dsl("[...3]") == '<gap reason="illegible" quantity="3" unit="chars"/>'

    def test_gap_with_reading(self) -> None:
        assert compile_dsl("[...<ab>]") == (
            '<gap reason="illegible"/><supplied>ab</supplied>'
        )

    def test_compound_join_is_a_space(self) -> None:
        assert compile_dsl("upp~haf") == "upp haf"

    def test_unknown_entity_stays_a_reference(self) -> None:
        assert compile_dsl(":eth:") == "&eth;"

    def test_known_entity_resolves(self) -> None:
        assert compile_dsl(":eth:", entities=_registry()) == "ð"


class TestBreaks:
    """Line and page breaks."""

    def test_labelled_line_break(self) -> None:
        assert compile_dsl("//5") == '<lb n="5"/>\n'

    def test_unlabelled_line_break(self) -> None:
        assert compile_dsl("//") == "<lb/>\n"

    def test_auto_line_numbers(self) -> None:
        config = CompilerConfig(auto_line_numbers=True)
        assert compile_dsl("// //", config=config) == '<lb n="1"/>\n <lb n="2"/>\n'

    def test_explicit_label_still_counts(self) -> None:
        config = CompilerConfig(auto_line_numbers=True)
        assert compile_dsl("//7 //", config=config) == '<lb n="7"/>\n <lb n="2"/>\n'

    def test_page_break(self) -> None:
        assert compile_dsl("///1r") == '<pb n="1r"/>\n'

    def test_wrap_pages(self) -> None:
        config = CompilerConfig(wrap_pages=True)
        assert compile_dsl("///1r a ///1v b", config=config) == (
            '<pb n="1r"/>\n<p>\n a </p>\n<pb n="1v"/>\n<p>\n b</p>\n'
        )


class TestWordWrapping:
    """Words and punctuation with word_wrap enabled."""

    def test_words_and_break(self) -> None:
        assert compile_dsl("word //5 next", config=WRAP) == (
            '<w>word</w>\n<lb n="5"/>\n<w>next</w>\n'
        )

    def test_punctuation(self) -> None:
        assert compile_dsl("ok.", config=WRAP) == "<w>ok</w>\n<pc>.</pc>\n"

    def test_lemma_attributes(self) -> None:
        lemmas = {1: LemmaMapping("koma", "xVB fF tPT mIN p3 nS")}
        xml = compile_dsl("hann kom", config=WRAP, lemma_mappings=lemmas)
        assert xml == '<w>hann</w>\n<w lemma="koma" me:msa="xVB fF tPT mIN p3 nS">kom</w>\n'

    def test_semantic_annotation_becomes_ana(self) -> None:
        annotations = AnnotationSet(
            [
                Annotation(
                    "s1",
                    AnnotationType.SEMANTIC,
                    WordTarget(0),
                    SemanticValue("person", "king"),
                )
            ]
        )
        xml = compile_dsl("Haraldr", config=WRAP, annotations=annotations)
        assert xml == '<w ana="#person:king">Haraldr</w>\n'

    def test_note_annotation_becomes_child(self) -> None:
        annotations = AnnotationSet(
            [Annotation("n1", AnnotationType.NOTE, WordTarget(0), NoteValue("sic", "editorial"))]
        )
        xml = compile_dsl("orð", config=WRAP, annotations=annotations)
        assert xml == '<w>orð<note type="editorial">sic</note></w>\n'

    def test_head_block(self) -> None:
        xml = compile_dsl(".head{Title}", config=WRAP)
        assert xml.startswith("<head>")
        assert xml.endswith("</head>")
        assert "Title" in xml


class TestCompilerConfigResolution:
    """A Compiler without a config reads the context's config."""

    def test_context_config_used(self) -> None:
        from scriptorium.config import compile_config_context

        compiler = Compiler()
        with compile_config_context(WRAP):
            assert compiler.compile("a") == "<w>a</w>\n"
        assert compiler.compile("a") == "a"

    def test_explicit_config_wins(self) -> None:
        from scriptorium.config import compile_config_context

        compiler = Compiler(CompilerConfig())
        with compile_config_context(WRAP):
            assert compiler.compile("a") == "a"


class TestErrors:
    """A failed compile yields no output."""

    def test_unclosed_construct_raises(self) -> None:
        with pytest.raises(ParseError):
            compile_dsl("a -{b")

    def test_source_file_in_error(self) -> None:
        with pytest.raises(ParseError, match="^leaf.dsl:"):
            compile_dsl("<abc", source_file="leaf.dsl")


class TestIdempotence:
    """Identical inputs give identical output."""

    def test_repeat_compile(self) -> None:
        compiler = Compiler(CompilerConfig(word_wrap=True, multi_level=True))
        source = "upp~haf .abbr[dni]{domini} //2 :eth:at."
        assert compiler.compile(source) == compiler.compile(source)
