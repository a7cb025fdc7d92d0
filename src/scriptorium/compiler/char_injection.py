"""Character-range ``<c>`` tag injection into facsimile markup.

Character annotations address visible characters of a word's facsimile
text: markup tags are skipped and an entity reference such as ``&eth;``
counts as a single character. For the word ``Maðr`` with an initial on
character 0:

    M&eth;r  ->  <c type="initial">M</c>&eth;r

Ranges are half-open. Ranges sharing a start open longest-first, so
nested ranges produce properly nested elements.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple

from scriptorium.annotations import (
    AnnotationSet,
    AnnotationType,
    CharTarget,
    MenotaObservationType,
    MenotaPaleographicValue,
)
from scriptorium.markup import MarkupBuilder, escape_xml


class CharRange(NamedTuple):
    start: int
    end: int
    char_type: str


def character_ranges(annotations: AnnotationSet | None, word_index: int) -> list[CharRange]:
    """Collect the ``<c>`` ranges for one word, in opening order."""
    if annotations is None:
        return []
    ranges: list[CharRange] = []
    for annotation in annotations.for_word(word_index):
        if annotation.type is not AnnotationType.PALEOGRAPHIC:
            continue
        match (annotation.target, annotation.value):
            case (
                CharTarget(char_start=start, char_end=end),
                MenotaPaleographicValue(
                    observation_type=MenotaObservationType.CHARACTER, char_type=char_type
                ),
            ) if char_type is not None and end > start:
                ranges.append(CharRange(start, end, char_type.value))
    ranges.sort(key=lambda r: (r.start, -r.end))
    return ranges


def _units(xml: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_tag, text)`` pieces: whole tags, whole entity refs, single chars."""
    pos = 0
    length = len(xml)
    while pos < length:
        char = xml[pos]
        if char == "<":
            end = xml.find(">", pos)
            end = length if end == -1 else end + 1
            yield True, xml[pos:end]
            pos = end
        elif char == "&":
            end = xml.find(";", pos)
            end = length if end == -1 else end + 1
            yield False, xml[pos:end]
            pos = end
        else:
            yield False, char
            pos += 1


def inject_character_tags(xml: str, ranges: list[CharRange]) -> str:
    """Wrap the character ranges of ``xml`` in ``<c type="...">`` elements.

    Args:
        xml: Facsimile markup of one word
        ranges: Ranges sorted by start ascending, end descending

    Returns:
        The markup with tags injected; unchanged when ``ranges`` is empty.
    """
    if not ranges:
        return xml

    mb = MarkupBuilder()
    open_ends: list[int] = []
    pending = 0
    index = 0

    for is_tag, text in _units(xml):
        if is_tag:
            mb.append(text)
            continue
        while pending < len(ranges) and ranges[pending].start == index:
            mb.append(f'<c type="{escape_xml(ranges[pending].char_type)}">')
            open_ends.append(ranges[pending].end)
            pending += 1
        mb.append(text)
        index += 1
        closing = open_ends.count(index)
        if closing:
            open_ends = [end for end in open_ends if end != index]
            mb.append("</c>" * closing)

    mb.append("</c>" * len(open_ends))
    return mb.build()


__all__ = ["CharRange", "character_ranges", "inject_character_tags"]
