"""Lexer for the transcription DSL.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, lex
├── core.py              # Lexer class (priority dispatch + text buffering)
└── scanners.py          # Delimiter scanning mixin (brackets, blocks, entities)

Usage:
    >>> from scriptorium.lexer import lex
    >>> lex(".abbr[dni]{domini}").nodes
    (Abbreviation(abbr='dni', expansion='domini'),)

"""

from scriptorium.lexer.core import Lexer, format_break, lex

__all__ = ["Lexer", "format_break", "lex"]
