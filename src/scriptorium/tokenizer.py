"""Word and punctuation grouping for lexed DSL nodes.

The WordTokenizer is a two-state machine over the flat node sequence:

    [BETWEEN_WORDS] ──text/entity/inline──▶ [IN_WORD]
          ▲                                    │
          └──────whitespace/punctuation/|──────┘

Words continue across a line or page break when the break is preceded by
``~`` (explicit continuation) or when the word so far ends in a letter
(implicit continuation, the usual scribal hyphenation). Block constructs and
``|`` always end the current word.

Thread Safety:
WordTokenizer holds only its immutable punctuation set. tokenize() keeps all
state in locals, so one instance can be shared across threads.

"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto

from scriptorium.nodes import (
    INLINE_TYPES,
    Block,
    Break,
    Entity,
    Group,
    Head,
    LineBreak,
    Node,
    Norm,
    PageBreak,
    Punctuation,
    SuppliedBlock,
    Text,
    Word,
    WordBoundary,
    WordContinuation,
)

DEFAULT_PUNCTUATION = frozenset(".,;:!?()[]")


class TokenizerState(Enum):
    """Tokenizer states."""

    BETWEEN_WORDS = auto()
    IN_WORD = auto()


class WordTokenizer:
    """Group a flat node stream into Word and Punctuation nodes.

    Usage:
            >>> from scriptorium.lexer import lex
            >>> WordTokenizer().tokenize(lex("upp~haf.").nodes)
            [Word(children=(Text(content='upp'), CompoundJoin(), Text(content='haf'))), Punctuation(children=(Text(content='.'),))]

    """

    __slots__ = ("_punctuation",)

    def __init__(self, punctuation: Iterable[str] = DEFAULT_PUNCTUATION) -> None:
        self._punctuation = frozenset(punctuation)

    def tokenize(self, nodes: Iterable[Node]) -> list[Group | Break | Block]:
        """Group nodes into words.

        The output never contains WordContinuation or WordBoundary.
        """
        result: list[Group | Break | Block] = []
        word: list[Node] = []
        state = TokenizerState.BETWEEN_WORDS
        continuation = False

        def flush_word() -> None:
            if word:
                result.append(Word(tuple(word)))
                word.clear()

        for node in nodes:
            match node:
                case WordBoundary():
                    flush_word()
                    state = TokenizerState.BETWEEN_WORDS
                    continuation = False
                case WordContinuation():
                    continuation = True
                case LineBreak() | PageBreak():
                    if continuation:
                        word.append(node)
                        continuation = False
                    elif state is TokenizerState.IN_WORD and _ends_with_letter(word):
                        word.append(node)
                    else:
                        flush_word()
                        result.append(node)
                        state = TokenizerState.BETWEEN_WORDS
                case Head() | SuppliedBlock() | Norm():
                    flush_word()
                    result.append(node)
                    state = TokenizerState.BETWEEN_WORDS
                    continuation = False
                case Text(content=content):
                    state = self._scan_text(content, result, word, state)
                    continuation = False
                case Word() | Punctuation():
                    flush_word()
                    result.append(node)
                    state = TokenizerState.BETWEEN_WORDS
                    continuation = False
                case _ if isinstance(node, INLINE_TYPES):
                    word.append(node)
                    state = TokenizerState.IN_WORD
                    continuation = False

        flush_word()
        return result

    def _scan_text(
        self,
        content: str,
        result: list[Group | Break | Block],
        word: list[Node],
        state: TokenizerState,
    ) -> TokenizerState:
        """Split one text run on whitespace and punctuation.

        Characters after the last boundary stay in ``word``; the word is not
        closed at the end of the run.
        """
        buffer: list[str] = []
        for char in content:
            if char.isspace() or char in self._punctuation:
                if buffer:
                    word.append(Text("".join(buffer)))
                    buffer.clear()
                if word:
                    result.append(Word(tuple(word)))
                    word.clear()
                if not char.isspace():
                    result.append(Punctuation((Text(char),)))
                state = TokenizerState.BETWEEN_WORDS
            else:
                buffer.append(char)
                state = TokenizerState.IN_WORD
        if buffer:
            word.append(Text("".join(buffer)))
        return state


def _ends_with_letter(word: list[Node]) -> bool:
    """Whether the last textual content of ``word`` is alphabetic.

    Entities count as letters. Nodes that carry no text are skipped.
    """
    for node in reversed(word):
        match node:
            case Text(content=content) if content:
                return content[-1].isalpha()
            case Entity():
                return True
    return False


def tokenize(nodes: Iterable[Node]) -> list[Group | Break | Block]:
    """Group nodes with the default punctuation set."""
    return WordTokenizer().tokenize(nodes)


__all__ = ["DEFAULT_PUNCTUATION", "TokenizerState", "WordTokenizer", "tokenize"]
