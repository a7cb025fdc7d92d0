"""Round-trip patching: reconcile edited DSL with an imported segment list.

Both sides are reduced to content tokens (words, punctuation, line and
page breaks) and aligned:

1. Trim the common prefix and suffix (Keep)
2. Align the middle with an LCS table, backtracking to Keep / Insert /
   Delete, preferring Insert on ties
3. Merge each Delete immediately followed by an Insert into a Modify

Example:
    Original: [A, B, C, E]
    Edited:   [A, B, X, E]
    Patches:  Keep(A), Keep(B), Modify(C -> X), Keep(E)

Reconstruction then walks the original segments, emitting kept segments
verbatim and recompiling only modified and inserted content.

Thread Safety:
All functions are pure. Patch operations are immutable.

"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from scriptorium.errors import ParseError
from scriptorium.importer.flatten import segments_to_dsl
from scriptorium.importer.segments import (
    LineBreakSegment,
    PageBreakSegment,
    PunctuationSegment,
    Segment,
    WordSegment,
    serialize_segment,
)
from scriptorium.lexer import format_break, lex
from scriptorium.nodes import (
    Abbreviation,
    Addition,
    CompoundJoin,
    Deletion,
    Entity,
    Gap,
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
    WordBoundary,
    WordContinuation,
)
from scriptorium.tokenizer import tokenize
from scriptorium.utils.logger import get_logger

if TYPE_CHECKING:
    from scriptorium.compiler import Compiler

logger = get_logger(__name__)

# Above this many middle tokens on both sides, alignment is skipped
LCS_TOKEN_LIMIT = 1000


# =============================================================================
# Patch operations
# =============================================================================


@dataclass(frozen=True, slots=True)
class Keep:
    segment_id: int


@dataclass(frozen=True, slots=True)
class Modify:
    segment_id: int
    new_dsl: str


@dataclass(frozen=True, slots=True)
class Insert:
    dsl: str


@dataclass(frozen=True, slots=True)
class Delete:
    segment_id: int


type PatchOperation = Keep | Modify | Insert | Delete


class Token(NamedTuple):
    """A content token: DSL text plus the segment it came from, if any."""

    content: str
    segment_id: int | None = None


# =============================================================================
# DSL rendering of nodes
# =============================================================================


def node_to_dsl(node: Node) -> str:
    """Render a node back to DSL text.

    Word continuations and compound joins both render as ``~``. Breaks
    inside a word are written in their braced ``~//{n}`` form.
    """
    match node:
        case Text(content=content):
            return content
        case LineBreak(label=label):
            return format_break("//", label)
        case PageBreak(label=label):
            return format_break("///", label)
        case Abbreviation(abbr=abbr, expansion=expansion):
            return f".abbr[{abbr}]{{{expansion}}}"
        case Gap(quantity=quantity, supplied=supplied):
            count = str(quantity) if quantity is not None else ""
            reading = f"<{supplied}>" if supplied is not None else ""
            return f"[...{count}{reading}]"
        case Supplied(text=text):
            return f"<{text}>"
        case SuppliedBlock(text=text):
            return f".supplied{{{text}}}"
        case Norm(text=text):
            return f".norm{{{text}}}"
        case Head(text=text):
            return f".head{{{text}}}"
        case Deletion(text=text):
            return f"-{{{text}}}-"
        case Addition(text=text):
            return f"+{{{text}}}+"
        case Note(text=text):
            return f"^{{{text}}}"
        case Unclear(text=text):
            return f"?{{{text}}}?"
        case Entity(name=name):
            return f":{name}:"
        case WordContinuation() | CompoundJoin():
            return "~"
        case WordBoundary():
            return "|"
        case Word(children=children) | Punctuation(children=children):
            return "".join(_word_child_dsl(child) for child in children)
    raise TypeError(f"Unknown node type: {type(node).__name__}")


def _word_child_dsl(node: Node) -> str:
    match node:
        case LineBreak(label=label):
            return format_break("//", label, inline=True)
        case PageBreak(label=label):
            return format_break("///", label, inline=True)
    return node_to_dsl(node)


# =============================================================================
# Tokens
# =============================================================================


def segment_tokens(segments: Iterable[Segment]) -> list[Token]:
    """Content tokens of an original segment list, tagged with segment ids."""
    tokens: list[Token] = []
    for segment in segments:
        match segment:
            case WordSegment(id=sid, dsl=dsl) | PunctuationSegment(id=sid, dsl=dsl):
                if dsl.strip():
                    tokens.append(Token(dsl, sid))
            case LineBreakSegment(id=sid, attributes=attrs):
                tokens.append(Token(format_break("//", attrs.get("n")), sid))
            case PageBreakSegment(id=sid, attributes=attrs):
                tokens.append(Token(format_break("///", attrs.get("n")), sid))
    return tokens


def dsl_tokens(dsl: str) -> list[Token]:
    """Content tokens of edited DSL text.

    Text that does not lex yields no tokens.
    """
    try:
        document = lex(dsl)
    except ParseError as e:
        logger.debug("Edited DSL does not lex, no tokens: %s", e)
        return []
    return [
        Token(node_to_dsl(node))
        for node in tokenize(document.nodes)
        if isinstance(node, (Word, Punctuation, LineBreak, PageBreak, Head, SuppliedBlock, Norm))
    ]


# =============================================================================
# Alignment
# =============================================================================


def compute_patches(
    segments: Sequence[Segment],
    edited_dsl: str,
    limit: int = LCS_TOKEN_LIMIT,
) -> list[PatchOperation]:
    """Patch operations that turn ``segments`` into ``edited_dsl``.

    Args:
        segments: Segments from the original import
        edited_dsl: The user's edited DSL text
        limit: Middle-range size above which alignment is skipped on both sides

    Returns:
        Operations in document order.
    """
    original = segment_tokens(segments)
    if segments_to_dsl(segments).strip() == edited_dsl.strip():
        return [Keep(token.segment_id) for token in original]

    patches = diff_tokens(original, dsl_tokens(edited_dsl), limit)
    if logger.isEnabledFor(logging.DEBUG):
        counts: dict[str, int] = {}
        for op in patches:
            counts[type(op).__name__] = counts.get(type(op).__name__, 0) + 1
        logger.debug("Computed %d patches: %s", len(patches), counts)
    return patches


def diff_tokens(
    original: Sequence[Token],
    edited: Sequence[Token],
    limit: int = LCS_TOKEN_LIMIT,
) -> list[PatchOperation]:
    """Align token sequences, trimming the common prefix and suffix first."""
    m, n = len(original), len(edited)
    start = 0
    while start < m and start < n and original[start].content == edited[start].content:
        start += 1

    original_end, edited_end = m, n
    while (
        original_end > start
        and edited_end > start
        and original[original_end - 1].content == edited[edited_end - 1].content
    ):
        original_end -= 1
        edited_end -= 1

    patches: list[PatchOperation] = [Keep(token.segment_id) for token in original[:start]]
    patches.extend(
        align_lcs(original[start:original_end], edited[start:edited_end], limit)
    )
    patches.extend(Keep(token.segment_id) for token in original[original_end:])
    return merge_modifications(patches)


def align_lcs(
    original: Sequence[Token],
    edited: Sequence[Token],
    limit: int = LCS_TOKEN_LIMIT,
) -> list[PatchOperation]:
    """Keep / Insert / Delete operations from a longest-common-subsequence table.

    When both sides exceed ``limit`` tokens, the whole original range is
    deleted and the whole edited range inserted.
    """
    m, n = len(original), len(edited)
    if m > limit and n > limit:
        logger.warning(
            "Token ranges too large for alignment (%d x %d), replacing the whole range", m, n
        )
        ops: list[PatchOperation] = [Delete(token.segment_id) for token in original]
        ops.extend(Insert(token.content) for token in edited)
        return ops

    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        a = original[i - 1].content
        for j in range(1, n + 1):
            if a == edited[j - 1].content:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])

    ops = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and original[i - 1].content == edited[j - 1].content:
            ops.append(Keep(original[i - 1].segment_id))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            ops.append(Insert(edited[j - 1].content))
            j -= 1
        else:
            ops.append(Delete(original[i - 1].segment_id))
            i -= 1
    ops.reverse()
    return ops


def merge_modifications(ops: Sequence[PatchOperation]) -> list[PatchOperation]:
    """Merge each Delete immediately followed by an Insert into a Modify."""
    result: list[PatchOperation] = []
    i = 0
    while i < len(ops):
        op = ops[i]
        if isinstance(op, Delete) and i + 1 < len(ops) and isinstance(ops[i + 1], Insert):
            result.append(Modify(op.segment_id, ops[i + 1].dsl))
            i += 2
            continue
        result.append(op)
        i += 1
    return result


# =============================================================================
# Reconstruction
# =============================================================================


def reconstruct(
    segments: Iterable[Segment],
    patches: Sequence[PatchOperation],
    compiler: Compiler,
) -> str:
    """Rebuild body markup from the original segments and patch operations.

    Structural, whitespace and hand-shift segments are always emitted
    verbatim. An operation whose segment id does not match the current
    content segment is left for a later segment.
    """
    parts: list[str] = []
    pos = 0
    count = len(patches)

    for segment in segments:
        if not isinstance(
            segment, (WordSegment, PunctuationSegment, LineBreakSegment, PageBreakSegment)
        ):
            parts.append(serialize_segment(segment))
            continue

        while pos < count and isinstance(patches[pos], Insert):
            parts.append(compiler.compile_fragment_from_dsl(patches[pos].dsl))
            pos += 1

        op = patches[pos] if pos < count else None
        if op is None or op.segment_id != segment.id:
            parts.append(serialize_segment(segment))
            continue

        pos += 1
        match op:
            case Keep():
                parts.append(serialize_segment(segment))
            case Modify(new_dsl=new_dsl):
                parts.append(_recompile(segment, new_dsl, compiler))
            case Delete():
                pass

    for op in patches[pos:]:
        if isinstance(op, Insert):
            parts.append(compiler.compile_fragment_from_dsl(op.dsl))

    return "".join(parts)


def _recompile(segment: Segment, new_dsl: str, compiler: Compiler) -> str:
    match segment:
        case WordSegment(attributes=attrs):
            if new_dsl.lstrip().startswith(".head{"):
                return compiler.compile_fragment_from_dsl(new_dsl)
            return compiler.compile_word_from_dsl(new_dsl, attrs)
        case PunctuationSegment():
            return compiler.compile_punctuation_from_dsl(new_dsl)
        case _:
            return serialize_segment(segment)


__all__ = [
    "LCS_TOKEN_LIMIT",
    "Delete",
    "Insert",
    "Keep",
    "Modify",
    "PatchOperation",
    "Token",
    "align_lcs",
    "compute_patches",
    "diff_tokens",
    "dsl_tokens",
    "merge_modifications",
    "node_to_dsl",
    "reconstruct",
    "segment_tokens",
]
