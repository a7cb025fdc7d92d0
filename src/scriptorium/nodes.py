"""Typed AST nodes for the transcription DSL.

All nodes are frozen dataclasses with slots, so they compare by value, can be
shared between threads, and dispatch naturally with ``match``.

Node Hierarchy:
Node (base)
├── Inline (word-internal content)
│   ├── Text
│   ├── Abbreviation      .abbr[a]{b}
│   ├── Gap               [...], [...3], [...<t>], [...3<t>]
│   ├── Supplied          <t>
│   ├── Deletion          -{t}-
│   ├── Addition          +{t}+
│   ├── Note              ^{t}
│   ├── Unclear           ?{t}?
│   ├── Entity            :name:
│   └── CompoundJoin      ~
├── Break
│   ├── LineBreak         //, //5
│   └── PageBreak         ///12v
├── Block (DSL body compiled recursively)
│   ├── SuppliedBlock     .supplied{...}
│   ├── Head              .head{...}
│   └── Norm              .norm{...}
├── Marker (consumed by the WordTokenizer)
│   ├── WordContinuation  ~ before a break
│   └── WordBoundary      |
└── Group (produced by the WordTokenizer only)
    ├── Word
    └── Punctuation

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all DSL nodes."""


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal transcribed text."""

    content: str


@dataclass(frozen=True, slots=True)
class Abbreviation(Node):
    """Abbreviated form with its expansion.

    DSL: .abbr[dni]{domini}
    TEI: <choice><abbr>dni</abbr><expan>domini</expan></choice>

    """

    abbr: str
    expansion: str


@dataclass(frozen=True, slots=True)
class Gap(Node):
    """Illegible or lost characters, optionally with an editorial reading.

    DSL: [...] [...3] [...<ok>] [...3<ok>]

    """

    quantity: int | None = None
    supplied: str | None = None


@dataclass(frozen=True, slots=True)
class Supplied(Node):
    """Text supplied by the editor. DSL: <text>"""

    text: str


@dataclass(frozen=True, slots=True)
class Deletion(Node):
    """Text deleted by the scribe. DSL: -{text}-"""

    text: str


@dataclass(frozen=True, slots=True)
class Addition(Node):
    """Text added by the scribe. DSL: +{text}+"""

    text: str


@dataclass(frozen=True, slots=True)
class Note(Node):
    """Inline editorial note. DSL: ^{text}"""

    text: str


@dataclass(frozen=True, slots=True)
class Unclear(Node):
    """Uncertain reading. DSL: ?{text}?"""

    text: str


@dataclass(frozen=True, slots=True)
class Entity(Node):
    """Named character entity. DSL: :eth:"""

    name: str


@dataclass(frozen=True, slots=True)
class CompoundJoin(Node):
    """Join point between parts of one word (upp~haf)."""


# =============================================================================
# Breaks
# =============================================================================


@dataclass(frozen=True, slots=True)
class LineBreak(Node):
    """Line break with an optional numeric label. DSL: // or //5"""

    label: str | None = None


@dataclass(frozen=True, slots=True)
class PageBreak(Node):
    """Page or folio break. DSL: ///12v"""

    label: str = ""


# =============================================================================
# Block Constructs
# =============================================================================


@dataclass(frozen=True, slots=True)
class SuppliedBlock(Node):
    """Editorially supplied passage whose body is DSL. DSL: .supplied{...}"""

    text: str


@dataclass(frozen=True, slots=True)
class Head(Node):
    """Heading whose body is DSL. DSL: .head{...}"""

    text: str


@dataclass(frozen=True, slots=True)
class Norm(Node):
    """Content present only at the normalized level. DSL: .norm{...}"""

    text: str


# =============================================================================
# Tokenizer Markers
# =============================================================================


@dataclass(frozen=True, slots=True)
class WordContinuation(Node):
    """Marks that the current word continues across the following break."""


@dataclass(frozen=True, slots=True)
class WordBoundary(Node):
    """Explicit word boundary. DSL: |"""


# =============================================================================
# Groups
# =============================================================================


@dataclass(frozen=True, slots=True)
class Word(Node):
    """A run of word-internal nodes compiled as one <w> element."""

    children: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class Punctuation(Node):
    """A punctuation mark compiled as one <pc> element."""

    children: tuple[Node, ...]


# PEP 695 type aliases for node families
type Break = LineBreak | PageBreak

type Block = SuppliedBlock | Head | Norm

type Group = Word | Punctuation

# Classes that the tokenizer treats as word-internal
INLINE_TYPES: tuple[type[Node], ...] = (
    Text,
    Abbreviation,
    Gap,
    Supplied,
    Deletion,
    Addition,
    Note,
    Unclear,
    Entity,
    CompoundJoin,
)


@dataclass(frozen=True, slots=True)
class Document:
    """Ordered, immutable result of lexing one DSL string."""

    nodes: tuple[Node, ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.nodes)


__all__ = [
    "INLINE_TYPES",
    "Abbreviation",
    "Addition",
    "Block",
    "Break",
    "CompoundJoin",
    "Deletion",
    "Document",
    "Entity",
    "Gap",
    "Group",
    "Head",
    "LineBreak",
    "Node",
    "Norm",
    "Note",
    "PageBreak",
    "Punctuation",
    "Supplied",
    "SuppliedBlock",
    "Text",
    "Unclear",
    "Word",
    "WordBoundary",
    "WordContinuation",
]
