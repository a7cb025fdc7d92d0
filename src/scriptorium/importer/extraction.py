"""Segment extraction from a parsed tagged document.

The Extractor walks the children of a ``<body>`` element and cuts them
into segments:

    <div>                   -> StructuralSegment (open)
      <pb n="1r"/>          -> PageBreakSegment
      <lb n="1"/>           -> LineBreakSegment
      <w lemma="maðr">      -> WordSegment, DSL from the facsimile level
        <choice>
          <me:facs>maþr</me:facs>
          <me:dipl>maþr</me:dipl>
          <me:norm>maðr</me:norm>
        </choice>
      </w>
    </div>                  -> StructuralSegment (close)

Element content is converted to DSL recursively:

    <supplied>t</supplied>  -> <t>        <del>t</del>      -> -{t}-
    <add>t</add>            -> +{t}+      <unclear>t</unclear> -> ?{t}?
    <note>t</note>          -> ^{t}       <gap quantity="3"/> -> [...3]
    <lb n="5"/> in a word   -> ~//{5}     &eth;             -> :eth:

MENOTA abbreviations (``<am>`` in the facsimile level or ``<ex>`` in the
diplomatic level) become ``.abbr[facs]{dipl}``.

Thread Safety:
Extractor instances are single-use. Create one per extraction pass.

"""

from __future__ import annotations

from scriptorium.importer.segments import (
    HandShiftSegment,
    LineBreakSegment,
    PageBreakSegment,
    PunctuationSegment,
    Segment,
    StructuralSegment,
    WhitespaceSegment,
    WordSegment,
)
from scriptorium.importer.xmltree import (
    ContentItem,
    XmlNode,
    attributes,
    child_elements,
    close_tag,
    content_items,
    find_descendant,
    has_element_children,
    is_comment,
    is_element,
    is_entity,
    local_name,
    open_tag,
    serialize_node,
    text_content,
)
from scriptorium.lexer import format_break
from scriptorium.markup import escape_text
from scriptorium.utils.logger import get_logger

logger = get_logger(__name__)

# Editorial elements outside words: local name -> DSL wrapper
_INLINE_WRAPPERS: dict[str, tuple[str, str]] = {
    "del": ("-{", "}-"),
    "add": ("+{", "}+"),
    "unclear": ("?{", "}?"),
    "note": ("^{", "}"),
    "head": (".head{", "}"),
}


class _DslWriter:
    """DSL accumulator that remembers whether an inline ``<lb>`` was seen."""

    __slots__ = ("_parts", "inline_lb")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self.inline_lb = False

    def write(self, s: str) -> None:
        if s:
            self._parts.append(s)

    def ends_with_space(self) -> bool:
        return bool(self._parts) and self._parts[-1].endswith(" ")

    def getvalue(self) -> str:
        return "".join(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)


def gap_dsl(element: XmlNode, supplied: str | None = None) -> str:
    """``<gap quantity="3"/>`` -> ``[...3]``, with an optional reading.

    Only the digits of ``quantity`` are kept.
    """
    digits = "".join(c for c in element.get("quantity", "") if c in "0123456789")
    reading = f"<{supplied.strip()}>" if supplied and supplied.strip() else ""
    return f"[...{digits}{reading}]"


class Extractor:
    """Cut a body element into an ordered, addressable segment list.

    Usage:
        >>> from scriptorium.importer.xmltree import parse_document, find_body
        >>> body = find_body(parse_document("<TEI><body><p>a b</p></body></TEI>"))
        >>> [type(s).__name__ for s in Extractor().extract(body)]
        ['StructuralSegment', 'WordSegment', 'WhitespaceSegment', 'WordSegment', 'StructuralSegment']

    """

    __slots__ = ("_next_id",)

    def __init__(self) -> None:
        self._next_id = 0

    def extract(self, body: XmlNode) -> list[Segment]:
        """Segments for the content of ``body`` (its own tags are not included)."""
        segments: list[Segment] = []
        for item in content_items(body):
            self._process(item, segments)
        logger.debug("Extracted %d segments", len(segments))
        return segments

    def _id(self) -> int:
        segment_id = self._next_id
        self._next_id += 1
        return segment_id

    # =========================================================================
    # Node dispatch
    # =========================================================================

    def _process(self, item: ContentItem, segments: list[Segment]) -> None:
        if isinstance(item, str):
            self._process_text(item, segments)
        elif is_comment(item):
            segments.append(StructuralSegment(self._id(), f"<!--{item.text or ''}-->"))
        elif is_entity(item):
            segments.append(WordSegment(self._id(), f"&{item.name};", f":{item.name}:"))
        elif is_element(item):
            self._process_element(item, segments)

    def _process_element(self, element: XmlNode, segments: list[Segment]) -> None:
        name = local_name(element)
        match name:
            case "w":
                segments.append(self._extract_word(element))
            case "pc":
                segments.append(self._extract_punctuation(element))
            case "lb":
                segments.append(LineBreakSegment(self._id(), dict(attributes(element))))
            case "pb":
                segments.append(PageBreakSegment(self._id(), dict(attributes(element))))
            case "handShift":
                segments.append(HandShiftSegment(self._id(), dict(attributes(element))))
            case "choice":
                segments.append(self._extract_choice(element))
            case "gap":
                segments.append(self._inline_segment(element, gap_dsl(element)))
            case "supplied":
                self._extract_supplied(element, segments)
            case "am":
                content = ""
                if not has_element_children(element):
                    content = self._inner_dsl(element, _DslWriter())
                if content:
                    segments.append(self._inline_segment(element, content))
                else:
                    self._emit_structural(element, segments)
            case _ if name in _INLINE_WRAPPERS:
                content = self._inner_dsl(element, _DslWriter())
                if content:
                    prefix, suffix = _INLINE_WRAPPERS[name]
                    segments.append(self._inline_segment(element, f"{prefix}{content}{suffix}"))
                else:
                    self._emit_structural(element, segments)
            case _:
                self._emit_structural(element, segments)

    def _process_text(self, text: str, segments: list[Segment]) -> None:
        """Split a text run into word and whitespace segments."""
        if not text.strip():
            segments.append(WhitespaceSegment(self._id(), text))
            return
        word: list[str] = []
        space: list[str] = []
        for char in text:
            if char.isspace():
                if word:
                    self._append_text_word("".join(word), segments)
                    word.clear()
                space.append(char)
            else:
                if space:
                    segments.append(WhitespaceSegment(self._id(), "".join(space)))
                    space.clear()
                word.append(char)
        if word:
            self._append_text_word("".join(word), segments)
        if space:
            segments.append(WhitespaceSegment(self._id(), "".join(space)))

    def _append_text_word(self, word: str, segments: list[Segment]) -> None:
        segments.append(WordSegment(self._id(), escape_text(word), word))

    def _emit_structural(self, element: XmlNode, segments: list[Segment]) -> None:
        if not element.text and len(element) == 0:
            segments.append(StructuralSegment(self._id(), serialize_node(element)))
            return
        segments.append(StructuralSegment(self._id(), open_tag(element)))
        for item in content_items(element):
            self._process(item, segments)
        segments.append(StructuralSegment(self._id(), close_tag(element)))

    def _inline_segment(self, element: XmlNode, dsl: str) -> WordSegment:
        return WordSegment(self._id(), serialize_node(element), dsl)

    def _extract_supplied(self, element: XmlNode, segments: list[Segment]) -> None:
        if has_element_children(element):
            content = self._inner_dsl(element, _DslWriter(), allow_norm=False)
            dsl = f".supplied{{{content}}}" if content else ""
        else:
            content = self._inner_dsl(element, _DslWriter())
            dsl = f"<{content}>" if content else ""
        if dsl:
            segments.append(self._inline_segment(element, dsl))
        else:
            self._emit_structural(element, segments)

    # =========================================================================
    # Words, punctuation and choices
    # =========================================================================

    def _extract_word(self, element: XmlNode) -> WordSegment:
        original_xml = serialize_node(element)
        out = _DslWriter()
        dsl = self._abbreviation_dsl(element, out)
        if dsl is None:
            dsl = self._level_dsl(element, out, allow_norm=True)
        return WordSegment(
            self._id(),
            original_xml,
            dsl,
            dict(attributes(element)),
            out.inline_lb,
        )

    def _extract_punctuation(self, element: XmlNode) -> PunctuationSegment:
        original_xml = serialize_node(element)
        dsl = self._level_dsl(element, _DslWriter(), allow_norm=True)
        return PunctuationSegment(self._id(), original_xml, dsl)

    def _extract_choice(self, element: XmlNode) -> WordSegment:
        original_xml = serialize_node(element)
        out = _DslWriter()
        dsl = self._choice_dsl(element, out, allow_norm=True)
        return WordSegment(
            self._id(),
            original_xml,
            dsl,
            dict(attributes(element)),
            out.inline_lb,
        )

    def _choice_dsl(self, element: XmlNode, out: _DslWriter, allow_norm: bool) -> str:
        """DSL for a ``<choice>``: abbr/expan pair, MENOTA levels, or content."""
        abbr = expan = None
        for child in child_elements(element):
            match local_name(child):
                case "abbr":
                    abbr = self._children_dsl(child, out, allow_norm)
                case "expan":
                    expan = self._children_dsl(child, out, allow_norm)
        if abbr is not None and expan is not None:
            return f".abbr[{abbr}]{{{expan}}}"
        dsl = self._abbreviation_dsl(element, out)
        if dsl is None:
            dsl = self._level_dsl(element, out, allow_norm)
        return dsl

    def _abbreviation_dsl(self, element: XmlNode, out: _DslWriter) -> str | None:
        """``.abbr[facs]{dipl}`` for MENOTA abbreviation markup, else None.

        Requires both a facsimile and a diplomatic level, with an ``am``
        marker in the former or an ``ex`` expansion in the latter.
        """
        facs = find_descendant(element, "facs")
        dipl = find_descendant(element, "dipl")
        if facs is None or dipl is None:
            return None
        if find_descendant(facs, "am") is None and find_descendant(dipl, "ex") is None:
            return None
        abbr = self._inner_dsl(facs, out)
        expansion = self._inner_dsl(dipl, out)
        if not abbr or not expansion:
            return None
        return f".abbr[{abbr}]{{{expansion}}}"

    def _level_text(self, element: XmlNode, level: str, out: _DslWriter) -> str | None:
        node = find_descendant(element, level)
        if node is None:
            return None
        return self._inner_dsl(node, out) or None

    def _level_dsl(self, element: XmlNode, out: _DslWriter, allow_norm: bool) -> str:
        """DSL from the first non-empty level, or from the content itself.

        Content present only at the normalized level is wrapped as
        ``.norm{...}`` when ``allow_norm`` is set.
        """
        facs = self._level_text(element, "facs", out)
        dipl = self._level_text(element, "dipl", out)
        norm = self._level_text(element, "norm", out)
        if facs is None and dipl is None and norm is not None:
            return f".norm{{{norm}}}" if allow_norm else norm
        text = facs or dipl or norm
        if text is not None:
            return text
        facs_node = find_descendant(element, "facs")
        target = facs_node if facs_node is not None else element
        return self._children_dsl(target, out, allow_norm).strip()

    # =========================================================================
    # DSL conversion
    # =========================================================================

    def _inner_dsl(self, element: XmlNode, out: _DslWriter, allow_norm: bool = True) -> str:
        """Trimmed DSL for the content of ``element``."""
        return self._children_dsl(element, out, allow_norm).strip()

    def _children_dsl(self, element: XmlNode, out: _DslWriter, allow_norm: bool) -> str:
        """DSL for the content of ``element``; inline breaks are flagged on ``out``."""
        writer = _DslWriter()
        items = content_items(element)
        skip_next = False
        for i, item in enumerate(items):
            if skip_next:
                skip_next = False
                continue
            following = items[i + 1] if i + 1 < len(items) else None
            if isinstance(item, str):
                _write_text(item, writer, following is not None)
            elif is_entity(item):
                writer.write(f":{item.name}:")
            elif is_element(item):
                skip_next = self._element_dsl(item, writer, allow_norm, following)
        out.inline_lb = out.inline_lb or writer.inline_lb
        return writer.getvalue()

    def _element_dsl(
        self,
        element: XmlNode,
        out: _DslWriter,
        allow_norm: bool,
        following: ContentItem | None,
    ) -> bool:
        """Write DSL for one element inside word content.

        Returns:
            True if the following sibling was consumed (a ``<supplied>``
            reading attached to a ``<gap>``).
        """
        name = local_name(element)
        match name:
            case "choice":
                out.write(self._choice_dsl(element, out, allow_norm))
            case "w":
                if out and not out.ends_with_space():
                    out.write(" ")
                dsl = self._abbreviation_dsl(element, out)
                out.write(dsl if dsl is not None else self._level_dsl(element, out, allow_norm))
            case "pc":
                out.write(self._level_dsl(element, out, allow_norm))
            case "c":
                inner = self._children_dsl(element, out, allow_norm)
                out.write(inner or text_content(element))
            case "supplied":
                if has_element_children(element):
                    inner = self._inner_dsl(element, out, allow_norm=False)
                    if inner:
                        out.write(f".supplied{{{inner}}}")
                else:
                    inner = self._inner_dsl(element, out, allow_norm)
                    if inner:
                        out.write(f"<{inner}>")
            case "gap":
                supplied = None
                if (
                    following is not None
                    and not isinstance(following, str)
                    and is_element(following)
                    and local_name(following) == "supplied"
                ):
                    supplied = self._inner_dsl(following, out, allow_norm) or None
                out.write(gap_dsl(element, supplied))
                return supplied is not None
            case "lb":
                out.inline_lb = True
                out.write(format_break("//", element.get("n"), inline=True))
            case "dipl" | "norm":
                pass
            case _ if name in _INLINE_WRAPPERS and name != "head":
                inner = self._inner_dsl(element, out, allow_norm)
                if inner:
                    prefix, suffix = _INLINE_WRAPPERS[name]
                    out.write(f"{prefix}{inner}{suffix}")
            case _:
                out.write(self._children_dsl(element, out, allow_norm))
        return False


def _write_text(content: str, out: _DslWriter, has_following: bool) -> None:
    """Write a text run with internal whitespace collapsed.

    A leading space is kept only after earlier output, a trailing one only
    when more content follows.
    """
    collapsed = " ".join(content.split())
    if not collapsed:
        return
    if content[0].isspace() and out and not out.ends_with_space():
        out.write(" ")
    out.write(collapsed)
    if content[-1].isspace() and has_following and not out.ends_with_space():
        out.write(" ")


def extract_segments(body: XmlNode) -> list[Segment]:
    """Extract segments from a body element with a fresh Extractor."""
    return Extractor().extract(body)


def has_multilevel_structure(body: XmlNode) -> bool:
    """Whether any ``<w>`` has a ``facs`` level child, directly or in a ``<choice>``."""
    for node in body.iter():
        if not is_element(node) or local_name(node) != "w":
            continue
        for child in child_elements(node):
            name = local_name(child)
            if name == "facs":
                return True
            if name == "choice" and any(local_name(g) == "facs" for g in child_elements(child)):
                return True
    return False


__all__ = ["Extractor", "extract_segments", "gap_dsl", "has_multilevel_structure"]
