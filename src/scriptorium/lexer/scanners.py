"""Delimiter scanning mixin for the DSL lexer.

Every bracketed DSL construct is consumed by one of the helpers here. They
advance ``_pos`` past the closing delimiter and return the enclosed text, or
raise ParseError located at the start of the construct being scanned.
"""

from __future__ import annotations

from scriptorium.errors import ParseError

_OPENERS = frozenset("{[<")
_CLOSERS = frozenset("}]>")


class DelimiterScannerMixin:
    """Mixin providing bracket, block and entity scanning.

    Expects the host class to provide ``_source``, ``_source_len``, ``_pos``
    and ``_error``.

    """

    # These will be set by the Lexer class
    _source: str
    _source_len: int
    _pos: int

    def _error(self, message: str) -> ParseError:
        """Build a ParseError at the current construct. Implemented by Lexer."""
        raise NotImplementedError

    def _consume_bracketed(self, end: str) -> str:
        """Consume up to the matching ``end`` with nested-depth counting.

        Depth starts at 1. ``end`` closes one level, any of ``{ [ <`` opens
        one, and a different closer only closes a level while depth > 1.
        """
        source = self._source
        start = self._pos
        depth = 1
        while self._pos < self._source_len:
            char = source[self._pos]
            if char == end:
                depth -= 1
                if depth == 0:
                    self._pos += 1
                    return source[start : self._pos - 1]
            elif char in _OPENERS:
                depth += 1
            elif char in _CLOSERS and depth > 1:
                depth -= 1
            self._pos += 1
        raise self._error(f"Unclosed bracket, expected '{end}'")

    def _consume_braced_block(self) -> str:
        """Consume a ``{...}`` block body, counting only braces."""
        source = self._source
        start = self._pos
        depth = 1
        while self._pos < self._source_len:
            char = source[self._pos]
            if char == "}":
                depth -= 1
                if depth == 0:
                    self._pos += 1
                    return source[start : self._pos - 1]
            elif char == "{":
                depth += 1
            self._pos += 1
        raise self._error("Unclosed bracket, expected '}'")

    def _consume_until(self, end: str) -> str:
        """Consume up to the first ``end`` with no nesting."""
        idx = self._source.find(end, self._pos)
        if idx == -1:
            self._pos = self._source_len
            raise self._error(f"Expected '{end}'")
        text = self._source[self._pos : idx]
        self._pos = idx + 1
        return text

    def _consume_until_whitespace(self) -> str:
        start = self._pos
        source = self._source
        while self._pos < self._source_len and not source[self._pos].isspace():
            self._pos += 1
        return source[start : self._pos]

    def _consume_break_label(self, *, until_whitespace: bool = False) -> str:
        """Consume a break label: ``{label}``, else a digit run.

        Top-level page breaks pass ``until_whitespace`` and read any
        non-whitespace run instead of digits.
        """
        if self._pos < self._source_len and self._source[self._pos] == "{":
            self._pos += 1
            return self._consume_until("}")
        if until_whitespace:
            return self._consume_until_whitespace()
        return self._consume_digits()

    def _consume_digits(self) -> str:
        start = self._pos
        source = self._source
        while self._pos < self._source_len and source[self._pos] in "0123456789":
            self._pos += 1
        return source[start : self._pos]

    def _expect(self, char: str) -> None:
        """Consume ``char`` or raise a ParseError naming what was found."""
        if self._pos < self._source_len and self._source[self._pos] == char:
            self._pos += 1
            return
        if self._pos < self._source_len:
            found = repr(self._source[self._pos])
        else:
            found = "end of input"
        raise self._error(f"Expected '{char}', found {found}")

    def _try_entity(self) -> str | None:
        """Try to read ``:name:`` at the cursor.

        Returns the name, or None with the cursor left untouched when the
        colon does not start a well-formed entity.
        """
        source = self._source
        pos = self._pos + 1
        name_start = pos
        while pos < self._source_len and (source[pos].isalnum() or source[pos] == "_"):
            pos += 1
        if pos == name_start or pos >= self._source_len or source[pos] != ":":
            return None
        self._pos = pos + 1
        return source[name_start:pos]
