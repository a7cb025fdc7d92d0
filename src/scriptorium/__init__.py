"""
Scriptorium: manuscript transcription DSL to TEI XML, and back.

Compiles a compact plain-text markup for manuscript transcription into
TEI XML (plain or MENOTA three-level), and round-trips existing TEI
documents through an editable DSL projection that preserves untouched
markup byte for byte.

Quick Start:
    >>> from scriptorium import compile_dsl
    >>> compile_dsl(".abbr[dni]{domini}")
    '<choice><abbr>dni</abbr><expan>domini</expan></choice>'

Round Trip:
    >>> from scriptorium import import_tei, export_document
    >>> result = import_tei(tei_xml)
    >>> edited = result.dsl.replace("konungr", "konungrinn")
    >>> new_xml = export_document(result.manifest, edited)

Multi-level output:
    >>> from scriptorium import CompilerConfig, Compiler
    >>> compiler = Compiler(CompilerConfig(word_wrap=True, multi_level=True))
    >>> xml = compiler.compile(":eth:at")
"""

from collections.abc import Iterable, Mapping

from scriptorium.annotations import (
    Annotation,
    AnnotationSet,
    AnnotationType,
    CharTarget,
    LemmaMapping,
    SpanTarget,
    WordTarget,
)
from scriptorium.compiler import CompileContext, Compiler
from scriptorium.config import (
    CompilerConfig,
    compile_config_context,
    get_compile_config,
    reset_compile_config,
    set_compile_config,
)
from scriptorium.entities import EntityDefinition, EntityRegistry
from scriptorium.errors import (
    ManifestError,
    ParseError,
    SchemaError,
    ScriptoriumError,
    TeiImportError,
)
from scriptorium.importer import (
    ImportManifest,
    ImportResult,
    Segment,
    import_tei,
    segments_to_dsl,
)
from scriptorium.lexer import Lexer, lex
from scriptorium.nodes import Document, Node
from scriptorium.normalizer import LevelDictionary
from scriptorium.patching import (
    Delete,
    Insert,
    Keep,
    Modify,
    PatchOperation,
    compute_patches,
    reconstruct,
)
from scriptorium.tokenizer import WordTokenizer, tokenize

__version__ = "0.1.0"


def compile_dsl(
    source: str,
    *,
    config: CompilerConfig | None = None,
    entities: EntityRegistry | None = None,
    dictionary: LevelDictionary | None = None,
    lemma_mappings: Mapping[int, LemmaMapping] | None = None,
    annotations: AnnotationSet | None = None,
    source_file: str | None = None,
) -> str:
    """Compile DSL source to TEI XML.

    Args:
        source: DSL text
        config: Output flags (uses the context's config if None)
        entities: Entity registry for resolving ``:name:`` references
        dictionary: Level dictionary for normalized-level mappings
        lemma_mappings: Lemma attributes keyed by word index
        annotations: Annotations keyed to word indices
        source_file: Optional source file path for error messages

    Returns:
        XML fragment (no document wrapper)

    Raises:
        ParseError: The source has an unterminated construct.

    Example:
        >>> compile_dsl("a -{b}-")
        'a <del>b</del>'
    """
    compiler = Compiler(
        config,
        entities=entities,
        dictionary=dictionary,
        lemma_mappings=lemma_mappings,
        annotations=annotations,
    )
    return compiler.compile(source, source_file)


def flatten_segments(segments: Iterable[Segment]) -> str:
    """Editable DSL projection of an imported segment list."""
    return segments_to_dsl(segments)


def export_document(
    manifest: ImportManifest,
    edited_dsl: str,
    compiler: Compiler | None = None,
) -> str:
    """Apply edited DSL to an imported document and return the full XML.

    Untouched words, breaks and all structural markup are emitted exactly
    as they were imported. Edited and inserted content is recompiled with
    ``compiler`` (a multi-level, word-wrapping compiler when the document
    is multi-level, a word-wrapping one otherwise).
    """
    if compiler is None:
        compiler = Compiler(
            CompilerConfig(word_wrap=True, multi_level=manifest.is_multilevel)
        )
    patches = compute_patches(manifest.segments, edited_dsl)
    return manifest.export(reconstruct(manifest.segments, patches, compiler))


__all__ = [
    "Annotation",
    "AnnotationSet",
    "AnnotationType",
    "CharTarget",
    "CompileContext",
    "Compiler",
    "CompilerConfig",
    "Delete",
    "Document",
    "EntityDefinition",
    "EntityRegistry",
    "ImportManifest",
    "ImportResult",
    "Insert",
    "Keep",
    "LemmaMapping",
    "LevelDictionary",
    "Lexer",
    "ManifestError",
    "Modify",
    "Node",
    "ParseError",
    "PatchOperation",
    "SchemaError",
    "ScriptoriumError",
    "Segment",
    "SpanTarget",
    "TeiImportError",
    "WordTarget",
    "WordTokenizer",
    "__version__",
    "compile_config_context",
    "compile_dsl",
    "compute_patches",
    "export_document",
    "flatten_segments",
    "get_compile_config",
    "import_tei",
    "lex",
    "reconstruct",
    "reset_compile_config",
    "set_compile_config",
    "tokenize",
]
