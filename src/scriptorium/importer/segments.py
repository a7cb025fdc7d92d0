"""Segment model for round-trip editing of tagged documents.

A document body is cut into an ordered list of segments:

- editable: words, punctuation, line and page breaks
- structural: open/close tags and comments, kept verbatim
- whitespace: formatting between elements, kept verbatim

Every segment has an id from one counter per extraction pass, strictly
increasing in document order, so patches can address them.

Thread Safety:
Segments and manifests are immutable.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from scriptorium.markup import format_empty_tag


@dataclass(frozen=True, slots=True)
class StructuralSegment:
    """Markup preserved verbatim, e.g. ``<div type="chapter">`` or ``</p>``."""

    id: int
    xml: str


@dataclass(frozen=True, slots=True)
class WordSegment:
    """A word element (or inline editorial element) with its DSL reading."""

    id: int
    original_xml: str
    dsl: str
    attributes: dict[str, str] = field(default_factory=dict)
    has_inline_lb: bool = False


@dataclass(frozen=True, slots=True)
class PunctuationSegment:
    id: int
    original_xml: str
    dsl: str


@dataclass(frozen=True, slots=True)
class LineBreakSegment:
    id: int
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PageBreakSegment:
    id: int
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class HandShiftSegment:
    id: int
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class WhitespaceSegment:
    id: int
    content: str


type Segment = (
    StructuralSegment
    | WordSegment
    | PunctuationSegment
    | LineBreakSegment
    | PageBreakSegment
    | HandShiftSegment
    | WhitespaceSegment
)


def serialize_segment(segment: Segment) -> str:
    """Markup for a segment emitted unchanged.

    Break segments are rebuilt as empty elements with sorted attributes.
    """
    match segment:
        case StructuralSegment(xml=xml):
            return xml
        case WordSegment(original_xml=xml) | PunctuationSegment(original_xml=xml):
            return xml
        case LineBreakSegment(attributes=attrs):
            return format_empty_tag("lb", attrs)
        case PageBreakSegment(attributes=attrs):
            return format_empty_tag("pb", attrs)
        case HandShiftSegment(attributes=attrs):
            return format_empty_tag("handShift", attrs)
        case WhitespaceSegment(content=content):
            return content
    raise TypeError(f"Not a segment: {segment!r}")


@dataclass(frozen=True, slots=True)
class ImportManifest:
    """Everything needed to rebuild an imported document after editing.

    Attributes:
        segments: Body content segments in document order
        is_multilevel: Whether words carry facsimile/diplomatic/normalized levels
        preamble: Source text before the body's open tag
        body_open_tag: The body's open tag exactly as written in the source
        postamble: Source text after ``</body>``

    """

    segments: tuple[Segment, ...]
    is_multilevel: bool = False
    preamble: str = ""
    body_open_tag: str = "<body>"
    postamble: str = ""

    def export(self, body_inner: str) -> str:
        """Reassemble the full document around new body content."""
        return f"{self.preamble}{self.body_open_tag}{body_inner}</body>{self.postamble}"


__all__ = [
    "HandShiftSegment",
    "ImportManifest",
    "LineBreakSegment",
    "PageBreakSegment",
    "PunctuationSegment",
    "Segment",
    "StructuralSegment",
    "WhitespaceSegment",
    "WordSegment",
    "serialize_segment",
]
