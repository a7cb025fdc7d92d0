"""Flatten a segment list into editable DSL text."""

from __future__ import annotations

from collections.abc import Iterable

from scriptorium.importer.segments import (
    LineBreakSegment,
    PageBreakSegment,
    PunctuationSegment,
    Segment,
    WhitespaceSegment,
    WordSegment,
)
from scriptorium.lexer import format_break


def segments_to_dsl(segments: Iterable[Segment]) -> str:
    """DSL projection of a segment list.

    Words are separated by a space where whitespace preceded them in the
    source. Punctuation attaches to the previous token. Line breaks start a
    new line with ``//n``, page breaks a line of their own with ``///n``.
    Labels the lexer would not read back whole are braced (``//{5a}``).
    Structural and hand-shift segments do not appear.
    """
    parts: list[str] = []
    pending_space = False
    after_page_break = False

    for segment in segments:
        match segment:
            case WordSegment(dsl=dsl):
                if after_page_break:
                    parts.append("\n")
                elif pending_space and parts and not parts[-1].endswith(" "):
                    parts.append(" ")
                parts.append(dsl)
                pending_space = after_page_break = False
            case PunctuationSegment(dsl=dsl):
                if after_page_break:
                    parts.append("\n")
                parts.append(dsl)
                pending_space = after_page_break = False
            case LineBreakSegment(attributes=attrs):
                parts.append(f"\n{format_break('//', attrs.get('n'))} ")
                pending_space = after_page_break = False
            case PageBreakSegment(attributes=attrs):
                parts.append(f"\n{format_break('///', attrs.get('n'))}")
                pending_space = False
                after_page_break = True
            case WhitespaceSegment(content=content):
                if any(c in content for c in " \t\n"):
                    pending_space = True
            case _:
                pass

    return "".join(parts).strip()


__all__ = ["segments_to_dsl"]
