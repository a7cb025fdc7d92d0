"""Markup accumulation and XML escaping.

MarkupBuilder appends fragments to a list and joins once at the end, which
keeps compilation O(n) regardless of how many small fragments a document
produces.

Thread Safety:
Builders are local to one compile or reconstruct call. The escaping helpers
are pure functions.

"""

from __future__ import annotations

from collections.abc import Mapping

_XML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&apos;",
    }
)

_TEXT_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;"})


def escape_xml(s: str) -> str:
    """Escape all five XML special characters.

    Used for compiled content and attribute values.

        >>> escape_xml("a<b & 'c'")
        'a&lt;b &amp; &apos;c&apos;'
    """
    return s.translate(_XML_ESCAPES)


def escape_text(s: str) -> str:
    """Escape text content the way an XML serializer does (& < > only)."""
    return s.translate(_TEXT_ESCAPES)


def format_empty_tag(name: str, attributes: Mapping[str, str]) -> str:
    """Render an empty element with attributes in sorted key order.

        >>> format_empty_tag("lb", {"n": "2", "ed": "A"})
        '<lb ed="A" n="2"/>'
    """
    parts = [f"<{name}"]
    for key in sorted(attributes):
        parts.append(f' {key}="{escape_xml(attributes[key])}"')
    parts.append("/>")
    return "".join(parts)


class MarkupBuilder:
    """Efficient markup accumulator.

    Usage:
            >>> mb = MarkupBuilder()
            >>> _ = mb.append("<w>").append("orð").append_line("</w>")
            >>> mb.build()
            '<w>orð</w>\\n'

    Thread Safety:
        Instance is local to each compile() call.

    """

    __slots__ = ("_parts",)

    def __init__(self) -> None:
        self._parts: list[str] = []

    def append(self, s: str) -> MarkupBuilder:
        """Append a fragment (empty strings are skipped)."""
        if s:
            self._parts.append(s)
        return self

    def append_line(self, s: str = "") -> MarkupBuilder:
        """Append a fragment followed by a newline."""
        if s:
            self._parts.append(s)
        self._parts.append("\n")
        return self

    def build(self) -> str:
        """Join all fragments into the final string."""
        return "".join(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)


__all__ = [
    "MarkupBuilder",
    "escape_text",
    "escape_xml",
    "format_empty_tag",
]
