"""TEI compiler using the MarkupBuilder pattern.

Compiles DSL text to TEI markup in one pass over the grouped node sequence,
either single-level (plain ``<w>`` content) or MENOTA multi-level (a
``<choice>`` of facsimile, diplomatic and normalized readings per word).

Thread Safety:
All per-compile state is encapsulated in CompileContext, created fresh for
each compile() call. Multiple threads can share one Compiler as long as the
registry, dictionary and annotations it was built with are not mutated.

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from scriptorium.annotations import AnnotationSet, LemmaMapping
from scriptorium.compiler.attributes import WordAttributesMixin
from scriptorium.compiler.char_injection import character_ranges, inject_character_tags
from scriptorium.compiler.levels import LevelRendererMixin, gap_marker
from scriptorium.config import CompilerConfig, get_compile_config
from scriptorium.entities import EntityRegistry
from scriptorium.errors import ParseError
from scriptorium.lexer import lex
from scriptorium.markup import MarkupBuilder, escape_xml
from scriptorium.nodes import (
    Abbreviation,
    Addition,
    Block,
    Break,
    CompoundJoin,
    Deletion,
    Document,
    Entity,
    Gap,
    Group,
    Head,
    LineBreak,
    Node,
    Norm,
    Note,
    PageBreak,
    Punctuation,
    Supplied,
    SuppliedBlock,
    Text,
    Unclear,
    Word,
)
from scriptorium.normalizer import LevelDictionary
from scriptorium.tokenizer import WordTokenizer

logger = logging.getLogger(__name__)

_LEVELS_TEMPLATE = (
    "<{tag}{attrs}>\n"
    "  <choice>\n"
    "    <me:facs>{facs}</me:facs>\n"
    "    <me:dipl>{dipl}</me:dipl>\n"
    "    <me:norm>{norm}</me:norm>\n"
    "  </choice>{notes}\n"
    "</{tag}>\n"
)


def _levels(tag: str, facs: str, dipl: str, norm: str, attrs: str = "", notes: str = "") -> str:
    return _LEVELS_TEMPLATE.format(
        tag=tag, attrs=attrs, facs=facs, dipl=dipl, norm=norm, notes=notes
    )


def _break_tag(node: Break) -> str:
    """Break markup for fragments, where no line counter applies."""
    if isinstance(node, PageBreak):
        return f'<pb n="{escape_xml(node.label)}"/>\n'
    if node.label is not None:
        return f'<lb n="{escape_xml(node.label)}"/>\n'
    return "<lb/>\n"


@dataclass(slots=True)
class CompileContext:
    """Per-compile mutable state.

    Created fresh for each compile() call, so word indices and line numbers
    always start from zero.

    Thread Safety:
        Each compile() call creates its own CompileContext instance.
    """

    config: CompilerConfig
    word_index: int = 0
    line_number: int = 0
    in_page_paragraph: bool = False


class Compiler(LevelRendererMixin, WordAttributesMixin):
    """Compile DSL text to TEI markup.

    Usage:
        >>> from scriptorium.config import CompilerConfig
        >>> Compiler(CompilerConfig(word_wrap=True)).compile("word //5 next")
        '<w>word</w>\\n<lb n="5"/>\\n<w>next</w>\\n'

    Thread Safety:
        Multiple threads can safely share a single Compiler instance.
        Each compile() call creates an independent CompileContext.

    """

    __slots__ = (
        "_config",
        "_entities",
        "_dictionary",
        "_lemma_mappings",
        "_annotations",
        "_tokenizer",
    )

    def __init__(
        self,
        config: CompilerConfig | None = None,
        *,
        entities: EntityRegistry | None = None,
        dictionary: LevelDictionary | None = None,
        lemma_mappings: Mapping[int, LemmaMapping] | None = None,
        annotations: AnnotationSet | None = None,
    ) -> None:
        """Initialize compiler.

        Args:
            config: Output flags. When omitted, the context's config (see
                scriptorium.config) is read at compile time.
            entities: Registry used to resolve ``:name:`` entities
            dictionary: Level dictionary for diplomatic and normalized text
            lemma_mappings: Confirmed lemmas keyed by word index
            annotations: Annotations keyed by word index via ``for_word``
        """
        self._config = config
        self._entities = entities if entities is not None else EntityRegistry()
        self._dictionary = dictionary
        self._lemma_mappings: Mapping[int, LemmaMapping] = lemma_mappings or {}
        self._annotations = annotations
        self._tokenizer = WordTokenizer()

    @property
    def config(self) -> CompilerConfig:
        """The explicit config, or the one active in the current context."""
        return self._config if self._config is not None else get_compile_config()

    # =========================================================================
    # Entry points
    # =========================================================================

    def compile(self, source: str, source_file: str | None = None) -> str:
        """Compile DSL text to markup.

        Raises:
            ParseError: The DSL contains an unclosed construct.
        """
        return self.compile_document(lex(source, source_file))

    def compile_document(self, document: Document) -> str:
        """Compile an already-lexed document."""
        ctx = CompileContext(self.config)
        nodes: Iterable[Node] = document.nodes
        if ctx.config.word_wrap:
            nodes = self._tokenizer.tokenize(nodes)

        mb = MarkupBuilder()
        for node in nodes:
            self._compile_node(node, mb, ctx)
        if ctx.config.wrap_pages and ctx.in_page_paragraph:
            mb.append("</p>\n")

        logger.debug(
            "Compiled %d nodes (%d words, %d lines)",
            len(document),
            ctx.word_index,
            ctx.line_number,
        )
        return mb.build()

    def compile_word_from_dsl(self, dsl: str, attributes: Mapping[str, str]) -> str:
        """Recompile one edited word as a ``<w>`` in the configured shape.

        ``attributes`` are the original element's attributes (lemma,
        me:msa, ...) and are emitted in sorted key order. Word indices are
        not tracked.
        """
        nodes = self._parse_fragment(dsl)
        if nodes is None:
            return f"<w><!-- parse error: {escape_xml(dsl)} --></w>\n"
        for node in nodes:
            if isinstance(node, Word):
                attrs = "".join(
                    f' {key}="{escape_xml(attributes[key])}"' for key in sorted(attributes)
                )
                return self._fragment_element(
                    "w", node.children, CompileContext(self.config), attrs
                )
        return f"<w><!-- no word content: {escape_xml(dsl)} --></w>\n"

    def compile_punctuation_from_dsl(self, dsl: str) -> str:
        """Recompile one edited punctuation mark as a ``<pc>`` in the configured shape."""
        nodes = self._parse_fragment(dsl)
        if nodes is None:
            return f"<pc><!-- parse error: {escape_xml(dsl)} --></pc>\n"
        for node in nodes:
            if isinstance(node, Punctuation):
                return self._fragment_element("pc", node.children, CompileContext(self.config))
        return f"<pc>{escape_xml(dsl)}</pc>\n"

    def compile_fragment_from_dsl(self, dsl: str) -> str:
        """Compile inserted or block content without word-index tracking."""
        return self._fragment(dsl, CompileContext(self.config))

    # =========================================================================
    # Node dispatch
    # =========================================================================

    def _compile_node(self, node: Node, mb: MarkupBuilder, ctx: CompileContext) -> None:
        match node:
            case Text(content=content):
                mb.append(escape_xml(content))
            case LineBreak(label=label):
                ctx.line_number += 1
                if label is not None:
                    mb.append_line(f'<lb n="{escape_xml(label)}"/>')
                elif ctx.config.auto_line_numbers:
                    mb.append_line(f'<lb n="{ctx.line_number}"/>')
                else:
                    mb.append_line("<lb/>")
            case PageBreak(label=label):
                self._compile_page_break(label, mb, ctx)
            case Abbreviation(abbr=abbr, expansion=expansion):
                mb.append(
                    f"<choice><abbr>{escape_xml(abbr)}</abbr>"
                    f"<expan>{escape_xml(expansion)}</expan></choice>"
                )
            case Gap(quantity=quantity, supplied=supplied):
                mb.append(gap_marker(quantity))
                if supplied is not None:
                    mb.append(f"<supplied>{escape_xml(supplied)}</supplied>")
            case Supplied(text=text):
                mb.append(f"<supplied>{escape_xml(text)}</supplied>")
            case Deletion(text=text):
                mb.append(f"<del>{escape_xml(text)}</del>")
            case Addition(text=text):
                mb.append(f"<add>{escape_xml(text)}</add>")
            case Note(text=text):
                mb.append(f"<note>{escape_xml(text)}</note>")
            case Unclear(text=text):
                mb.append(f"<unclear>{escape_xml(text)}</unclear>")
            case Entity(name=name):
                resolved = self._entities.resolve(name)
                mb.append(f"&{name};" if resolved is None else escape_xml(resolved))
            case CompoundJoin():
                mb.append(" ")
            case SuppliedBlock(text=text):
                inner = self._fragment(text, CompileContext(ctx.config))
                mb.append(f"<supplied>{inner}</supplied>")
            case Head(text=text):
                inner = self._fragment(text, CompileContext(ctx.config))
                mb.append(f"<head>{inner}</head>")
            case Norm(text=text):
                mb.append(self._normalized_fragment(text, ctx.config))
            case Word(children=children):
                if ctx.config.multi_level:
                    self._compile_word_levels(children, mb, ctx)
                else:
                    self._compile_word_single(children, mb, ctx)
            case Punctuation(children=children):
                if ctx.config.multi_level:
                    self._compile_punctuation_levels(children, mb)
                else:
                    self._compile_punctuation_single(children, mb, ctx)
            # WordContinuation and WordBoundary render as nothing

    def _compile_page_break(self, label: str, mb: MarkupBuilder, ctx: CompileContext) -> None:
        if not ctx.config.wrap_pages:
            mb.append_line(f'<pb n="{escape_xml(label)}"/>')
            return
        if ctx.in_page_paragraph:
            mb.append_line("</p>")
        mb.append_line(f'<pb n="{escape_xml(label)}"/>')
        mb.append_line("<p>")
        ctx.in_page_paragraph = True

    def _compile_children(self, children: Iterable[Node], ctx: CompileContext) -> str:
        inner = MarkupBuilder()
        for child in children:
            self._compile_node(child, inner, ctx)
        return inner.build()

    # =========================================================================
    # Words and punctuation
    # =========================================================================

    def _compile_word_single(
        self, children: tuple[Node, ...], mb: MarkupBuilder, ctx: CompileContext
    ) -> None:
        content = self._compile_children(children, ctx)
        if not content:
            return
        index = ctx.word_index
        ctx.word_index += 1
        mb.append("<w")
        mb.append(self._lemma_attributes(index))
        mb.append(self._annotation_attributes(index))
        mb.append(">")
        mb.append(content)
        mb.append(self._note_elements(index))
        mb.append_line("</w>")

    def _compile_word_levels(
        self, children: tuple[Node, ...], mb: MarkupBuilder, ctx: CompileContext
    ) -> None:
        index = ctx.word_index
        ctx.word_index += 1

        facs = self.facsimile(children)
        dipl = self.diplomatic(children)
        stored = self._stored_normalized(index)
        norm = escape_xml(stored) if stored is not None else self.normalized(children)
        if not (facs or dipl or norm):
            return

        facs = inject_character_tags(facs, character_ranges(self._annotations, index))
        mb.append(
            _levels(
                "w",
                facs,
                dipl,
                norm,
                attrs=self._lemma_attributes(index) + self._annotation_attributes(index),
                notes=self._note_elements(index),
            )
        )

    def _compile_punctuation_single(
        self, children: tuple[Node, ...], mb: MarkupBuilder, ctx: CompileContext
    ) -> None:
        content = self._compile_children(children, ctx)
        if content:
            mb.append_line(f"<pc>{content}</pc>")

    def _compile_punctuation_levels(self, children: tuple[Node, ...], mb: MarkupBuilder) -> None:
        facs = self.facsimile(children)
        dipl = self.diplomatic(children)
        norm = self.normalized(children)
        if facs or dipl or norm:
            mb.append(_levels("pc", facs, dipl, norm))

    # =========================================================================
    # Fragments
    # =========================================================================

    def _parse_fragment(self, dsl: str) -> list[Group | Break | Block] | None:
        """Lex and group a DSL fragment, or None if it does not lex."""
        try:
            document = lex(dsl)
        except ParseError as e:
            logger.debug("Fragment did not parse: %s", e)
            return None
        return self._tokenizer.tokenize(document.nodes)

    def _fragment(self, dsl: str, ctx: CompileContext) -> str:
        nodes = self._parse_fragment(dsl)
        if nodes is None:
            return f"<!-- parse error: {escape_xml(dsl)} -->"

        mb = MarkupBuilder()
        for node in nodes:
            match node:
                case Word(children=children):
                    mb.append(self._fragment_element("w", children, ctx))
                case Punctuation(children=children):
                    mb.append(self._fragment_element("pc", children, ctx))
                case LineBreak() | PageBreak():
                    mb.append(_break_tag(node))
                case _:
                    self._compile_node(node, mb, ctx)
        return mb.build()

    def _fragment_element(
        self, tag: str, children: tuple[Node, ...], ctx: CompileContext, attrs: str = ""
    ) -> str:
        """One ``<w>`` or ``<pc>`` without word-index tracking.

        Multi-level configs get the three readings; otherwise the content is
        compiled inline, so no ``me:`` prefix reaches a plain document.
        """
        if ctx.config.multi_level:
            facs = self.facsimile(children)
            dipl = self.diplomatic(children)
            norm = self.normalized(children)
            if not (facs or dipl or norm):
                return ""
            return _levels(tag, facs, dipl, norm, attrs=attrs)
        content = self._compile_children(children, ctx)
        if not content:
            return ""
        return f"<{tag}{attrs}>{content}</{tag}>\n"

    def _normalized_fragment(self, dsl: str, config: CompilerConfig) -> str:
        """Content that exists only at the normalized level (``.norm{...}``).

        Facsimile and diplomatic readings are left empty. Nothing is
        produced outside multi-level mode.
        """
        if not config.multi_level:
            return ""
        nodes = self._parse_fragment(dsl)
        if nodes is None:
            return f"<!-- parse error: {escape_xml(dsl)} -->"

        mb = MarkupBuilder()
        for node in nodes:
            match node:
                case Word(children=children):
                    norm = self.normalized(children)
                    if norm:
                        mb.append(_levels("w", "", "", norm))
                case Punctuation(children=children):
                    norm = self.normalized(children)
                    if norm:
                        mb.append(_levels("pc", "", "", norm))
                case LineBreak() | PageBreak():
                    mb.append(_break_tag(node))
                case SuppliedBlock(text=text):
                    mb.append(f"<supplied>{self._normalized_fragment(text, config)}</supplied>")
                case Norm(text=text):
                    mb.append(self._normalized_fragment(text, config))
                case _:
                    mb.append(self._node_to_normalized(node))
        return mb.build()


__all__ = ["CompileContext", "Compiler"]
