"""Priority-ordered scanner for the transcription DSL.

At each position the lexer tries the DSL constructs from the most specific
prefix to the least specific one (``///`` before ``//``, ``~///`` before
``~//`` before ``~``). Characters that start no construct accumulate in a
text buffer that is flushed as a Text node before the next construct.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Callable

from scriptorium.errors import ParseError
from scriptorium.lexer.scanners import DelimiterScannerMixin
from scriptorium.nodes import (
    Abbreviation,
    Addition,
    CompoundJoin,
    Deletion,
    Document,
    Entity,
    Gap,
    Head,
    LineBreak,
    Node,
    Norm,
    Note,
    PageBreak,
    Supplied,
    SuppliedBlock,
    Text,
    Unclear,
    WordBoundary,
    WordContinuation,
)
from scriptorium.utils.logger import get_logger

logger = get_logger(__name__)

# Braced blocks whose body is itself DSL
_BLOCK_PREFIXES: tuple[tuple[str, Callable[[str], Node]], ...] = (
    (".supplied{", SuppliedBlock),
    (".norm{", Norm),
    (".head{", Head),
)

# Single-brace inline constructs: prefix, node class, trailing char (or "")
_INLINE_BRACES: tuple[tuple[str, Callable[[str], Node], str], ...] = (
    ("-{", Deletion, "-"),
    ("+{", Addition, "+"),
    ("^{", Note, ""),
    ("?{", Unclear, "?"),
)


class Lexer(DelimiterScannerMixin):
    """Scanner turning DSL text into a flat Document.

    Usage:
            >>> Lexer("word //5 next").parse().nodes
            (Text(content='word '), LineBreak(label='5'), Text(content=' next'))

    Thread Safety:
        Lexer instances are single-use. Create one per source string.

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_start",  # Offset where the construct being scanned began
        "_source_file",
        "_nodes",
        "_text",
    )

    def __init__(self, source: str, source_file: str | None = None) -> None:
        """Initialize lexer with source text.

        Args:
            source: DSL source text
            source_file: Optional source file path for error messages
        """
        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._start = 0
        self._source_file = source_file
        self._nodes: list[Node] = []
        self._text: list[str] = []

    def parse(self) -> Document:
        """Scan the whole source.

        Returns:
            Document holding the flat node sequence.

        Raises:
            ParseError: An opened construct is never closed. No partial
                document is returned.
        """
        source = self._source
        while self._pos < self._source_len:
            self._start = self._pos
            if not self._scan_construct():
                self._text.append(source[self._pos])
                self._pos += 1
        self._flush_text()
        return Document(tuple(self._nodes))

    # =========================================================================
    # Construct dispatch
    # =========================================================================

    def _scan_construct(self) -> bool:
        """Recognize one construct at the cursor.

        Returns:
            True if a construct was consumed, False if the current character
            is plain text.
        """
        source = self._source
        pos = self._pos

        if source.startswith("///", pos):
            self._flush_text()
            self._pos += 3
            self._nodes.append(PageBreak(self._consume_break_label(until_whitespace=True)))
            return True

        if source.startswith("//", pos):
            self._flush_text()
            self._pos += 2
            self._nodes.append(LineBreak(self._consume_break_label() or None))
            return True

        for prefix, block_cls in _BLOCK_PREFIXES:
            if source.startswith(prefix, pos):
                self._flush_text()
                self._pos += len(prefix)
                self._nodes.append(block_cls(self._consume_braced_block()))
                return True

        if source.startswith(".abbr[", pos):
            self._flush_text()
            self._pos += 6
            abbr = self._consume_bracketed("]")
            self._expect("{")
            expansion = self._consume_bracketed("}")
            self._nodes.append(Abbreviation(abbr, expansion))
            return True

        if source.startswith("[...", pos):
            self._flush_text()
            self._pos += 4
            self._nodes.append(self._scan_gap())
            return True

        if source.startswith("<", pos) and not source.startswith("<<", pos):
            self._flush_text()
            self._pos += 1
            self._nodes.append(Supplied(self._consume_until(">")))
            return True

        for prefix, inline_cls, trailer in _INLINE_BRACES:
            if source.startswith(prefix, pos):
                self._flush_text()
                self._pos += 2
                text = self._consume_bracketed("}")
                if trailer:
                    self._expect(trailer)
                self._nodes.append(inline_cls(text))
                return True

        if source.startswith(":", pos):
            name = self._try_entity()
            if name is not None:
                self._flush_text()
                self._nodes.append(Entity(name))
                return True
            return False

        if source.startswith("~", pos):
            self._flush_text()
            self._scan_tilde()
            return True

        if source.startswith("|", pos):
            self._flush_text()
            self._pos += 1
            self._nodes.append(WordBoundary())
            return True

        return False

    def _scan_gap(self) -> Gap:
        """Scan the rest of ``[...N<text>]`` after the ``[...`` prefix."""
        digits = self._consume_digits()
        quantity = int(digits) if digits else None
        supplied = None
        if self._pos < self._source_len and self._source[self._pos] == "<":
            self._pos += 1
            supplied = self._consume_until(">")
        self._expect("]")
        return Gap(quantity, supplied)

    def _scan_tilde(self) -> None:
        """Scan ``~///label``, ``~//label`` or a bare compound join.

        Labels inside a word are a digit run or braced, so letters after the
        break stay text.
        """
        source = self._source
        if source.startswith("~///", self._pos):
            self._pos += 4
            label = self._consume_break_label()
            self._nodes.append(WordContinuation())
            self._nodes.append(PageBreak(label))
        elif source.startswith("~//", self._pos):
            self._pos += 3
            label = self._consume_break_label()
            self._nodes.append(WordContinuation())
            self._nodes.append(LineBreak(label or None))
        else:
            self._pos += 1
            self._nodes.append(CompoundJoin())

    # =========================================================================
    # Helpers
    # =========================================================================

    def _flush_text(self) -> None:
        if self._text:
            self._nodes.append(Text("".join(self._text)))
            self._text.clear()

    def _location(self, offset: int) -> tuple[int, int]:
        """Convert an absolute offset to a 1-indexed (line, column) pair."""
        lineno = self._source.count("\n", 0, offset) + 1
        col = offset - self._source.rfind("\n", 0, offset)
        return lineno, col

    def _error(self, message: str) -> ParseError:
        lineno, col = self._location(self._start)
        logger.debug("DSL parse failure at %d:%d: %s", lineno, col, message)
        return ParseError(message, lineno, col, self._source_file)


def format_break(marker: str, label: str | None, *, inline: bool = False) -> str:
    """DSL for a break that lexes back to the same label.

    ``marker`` is ``//`` or ``///``. Inside a word the break is written
    ``~//{label}`` so following letters are not read as part of the label.
    Elsewhere a line-break label is bare only when it is all digits, and a
    page-break label only when it has no whitespace.

    Example:
        >>> format_break("//", "5a")
        '//{5a}'
        >>> format_break("//", "2", inline=True)
        '~//{2}'
    """
    prefix = f"~{marker}" if inline else marker
    if not label:
        return prefix
    if inline:
        braced = True
    elif marker == "///":
        braced = label.startswith("{") or any(c.isspace() for c in label)
    else:
        braced = not all(c in "0123456789" for c in label)
    return f"{prefix}{{{label}}}" if braced else f"{prefix}{label}"


def lex(source: str, source_file: str | None = None) -> Document:
    """Lex DSL text into a flat Document.

    Convenience wrapper around ``Lexer(source).parse()``.
    """
    return Lexer(source, source_file).parse()
