"""Tests for the top-level public API."""

import scriptorium
from scriptorium import (
    AnnotationSet,
    Compiler,
    CompilerConfig,
    EntityDefinition,
    EntityRegistry,
    LemmaMapping,
    WordTarget,
    compile_dsl,
    export_document,
    flatten_segments,
    import_tei,
)
from scriptorium.annotations import Annotation, AnnotationType, NoteValue


class TestCompileDsl:
    """compile_dsl convenience function."""

    def test_abbreviation(self) -> None:
        assert compile_dsl(".abbr[dni]{domini}") == (
            "<choice><abbr>dni</abbr><expan>domini</expan></choice>"
        )

    def test_deletion(self) -> None:
        assert compile_dsl("a -{b}-") == "a <del>b</del>"

    def test_entities(self) -> None:
        registry = EntityRegistry()
        registry.add("eth", EntityDefinition("U+00F0", "ð"))
        assert compile_dsl("ma:eth:r :zzz:", entities=registry) == "maðr &zzz;"

    def test_lemmas_and_notes(self) -> None:
        annotations = AnnotationSet(
            [Annotation("n", AnnotationType.NOTE, WordTarget(1), NoteValue("sic"))]
        )
        xml = compile_dsl(
            "hann kom",
            config=CompilerConfig(word_wrap=True),
            lemma_mappings={0: LemmaMapping("hann", "xPE")},
            annotations=annotations,
        )
        assert xml == '<w lemma="hann" me:msa="xPE">hann</w>\n<w>kom<note>sic</note></w>\n'

    def test_page_wrapping(self) -> None:
        xml = compile_dsl("///1r a ///1v b", config=CompilerConfig(wrap_pages=True))
        assert xml == '<pb n="1r"/>\n<p>\n a </p>\n<pb n="1v"/>\n<p>\n b</p>\n'

    def test_compiler_usage_example(self) -> None:
        compiler = Compiler(CompilerConfig(word_wrap=True))
        assert compiler.compile("word //5 next") == '<w>word</w>\n<lb n="5"/>\n<w>next</w>\n'


class TestRoundTrip:
    """import_tei -> edit -> export_document."""

    SOURCE = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<TEI xmlns:me="http://www.menota.org/ns/1.0">\n'
        "  <teiHeader><title>AM 132 fol</title></teiHeader>\n"
        '  <text><body xml:id="b1">\n'
        '    <div type="saga"><p><w><choice><me:facs>konungr</me:facs>'
        "<me:dipl>konungr</me:dipl><me:norm>konungr</me:norm></choice></w> "
        "<w><choice><me:facs>reið</me:facs><me:dipl>reið</me:dipl>"
        "<me:norm>reið</me:norm></choice></w></p></div>\n"
        "  </body></text>\n"
        "</TEI>\n"
    )

    def test_import(self) -> None:
        result = import_tei(self.SOURCE)
        assert result.dsl == "konungr reið"
        assert result.is_multilevel
        assert result.manifest.body_open_tag == '<body xml:id="b1">'

    def test_unchanged_export_is_identical(self) -> None:
        result = import_tei(self.SOURCE)
        assert export_document(result.manifest, result.dsl) == self.SOURCE

    def test_edit_touches_only_the_edited_word(self) -> None:
        result = import_tei(self.SOURCE)
        xml = export_document(result.manifest, "konungrinn reið")
        assert xml.startswith(self.SOURCE[: self.SOURCE.index("<w>")])
        assert "<me:facs>konungrinn</me:facs>" in xml
        assert "<w><choice><me:facs>reið</me:facs>" in xml
        assert xml.endswith("</p></div>\n  </body></text>\n</TEI>\n")

    def test_edited_export_reimports(self) -> None:
        result = import_tei(self.SOURCE)
        xml = export_document(result.manifest, "konungrinn reið heim")
        assert import_tei(xml).dsl == "konungrinn reið heim"

    def test_flatten_segments(self) -> None:
        result = import_tei(self.SOURCE)
        assert flatten_segments(result.manifest.segments) == result.dsl

    def test_explicit_compiler(self) -> None:
        result = import_tei(self.SOURCE)
        registry = EntityRegistry()
        registry.add("eth", EntityDefinition("U+00F0", "ð"))
        compiler = Compiler(CompilerConfig(word_wrap=True, multi_level=True), entities=registry)
        xml = export_document(result.manifest, "konungr rei:eth:", compiler)
        assert "<me:facs>rei&eth;</me:facs>" in xml
        assert "<me:dipl>reið</me:dipl>" in xml


class TestExports:
    """Package surface."""

    def test_version(self) -> None:
        assert scriptorium.__version__ == "0.1.0"

    def test_core_api(self) -> None:
        for name in ("compile_dsl", "import_tei", "export_document", "compute_patches"):
            assert callable(getattr(scriptorium, name))
