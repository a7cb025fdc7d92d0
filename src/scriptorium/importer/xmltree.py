"""lxml tree helpers for extraction and verbatim re-serialization.

lxml keeps character data in ``.text`` and ``.tail`` rather than in text
nodes. ``content_items`` flattens an element's content back into document
order, yielding ``str`` for text runs and lxml nodes for elements,
comments and unresolved entity references.

``serialize_node`` writes markup with qualified names, attributes in
document order and no namespace declarations, so fragments can be spliced
back into their original context.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from lxml import etree

from scriptorium.errors import TeiImportError
from scriptorium.markup import escape_text, escape_xml

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# lxml node objects: _Element, _Comment, _Entity, _ProcessingInstruction
type XmlNode = Any
type ContentItem = str | XmlNode


def parse_document(xml: str) -> XmlNode:
    """Parse a document, keeping entity references unresolved.

    Returns:
        The root element.

    Raises:
        TeiImportError: The document is not well-formed.
    """
    parser = etree.XMLParser(resolve_entities=False, strip_cdata=False)
    try:
        return etree.fromstring(xml.encode("utf-8"), parser)
    except etree.XMLSyntaxError as e:
        raise TeiImportError(f"Failed to parse XML: {e}") from e


def is_element(node: XmlNode) -> bool:
    return isinstance(node.tag, str)


def is_comment(node: XmlNode) -> bool:
    return node.tag is etree.Comment


def is_entity(node: XmlNode) -> bool:
    return node.tag is etree.Entity


def local_name(element: XmlNode) -> str:
    """``{http://www.menota.org/ns/1.0}facs`` -> ``facs``."""
    return etree.QName(element).localname


def qualified_name(element: XmlNode) -> str:
    """Element name with its source prefix, e.g. ``me:facs``."""
    name = local_name(element)
    return f"{element.prefix}:{name}" if element.prefix else name


def attributes(element: XmlNode) -> list[tuple[str, str]]:
    """Attributes in document order, namespaced keys written as ``prefix:name``."""
    result: list[tuple[str, str]] = []
    prefixes: dict[str, str] | None = None
    for key, value in element.attrib.items():
        if key.startswith("{"):
            namespace, _, name = key[1:].partition("}")
            if namespace == XML_NAMESPACE:
                key = f"xml:{name}"
            else:
                if prefixes is None:
                    prefixes = {uri: p for p, uri in element.nsmap.items() if p}
                prefix = prefixes.get(namespace)
                key = f"{prefix}:{name}" if prefix else name
        result.append((key, value))
    return result


def content_items(element: XmlNode) -> list[ContentItem]:
    """Text runs and child nodes of ``element`` in document order.

    Empty text runs are omitted.
    """
    items: list[ContentItem] = []
    if element.text:
        items.append(element.text)
    for child in element:
        items.append(child)
        if child.tail:
            items.append(child.tail)
    return items


def child_elements(element: XmlNode) -> Iterator[XmlNode]:
    return (child for child in element if is_element(child))


def has_element_children(element: XmlNode) -> bool:
    return any(True for _ in child_elements(element))


def find_descendant(element: XmlNode, name: str) -> XmlNode | None:
    """First descendant element (document order) with local name ``name``."""
    for node in element.iterdescendants():
        if is_element(node) and local_name(node) == name:
            return node
    return None


def text_content(element: XmlNode) -> str:
    return "".join(element.itertext())


def open_tag(element: XmlNode) -> str:
    parts = [f"<{qualified_name(element)}"]
    for key, value in attributes(element):
        parts.append(f' {key}="{escape_xml(value)}"')
    parts.append(">")
    return "".join(parts)


def close_tag(element: XmlNode) -> str:
    return f"</{qualified_name(element)}>"


def serialize_node(node: XmlNode) -> str:
    """Serialize a node and its content (not its tail)."""
    parts: list[str] = []
    _serialize_into(node, parts)
    return "".join(parts)


def _serialize_into(node: XmlNode, parts: list[str]) -> None:
    if is_comment(node):
        parts.append(f"<!--{node.text or ''}-->")
        return
    if is_entity(node):
        parts.append(f"&{node.name};")
        return
    if not is_element(node):
        return

    tag = open_tag(node)
    if not node.text and len(node) == 0:
        parts.append(tag[:-1] + "/>")
        return
    parts.append(tag)
    if node.text:
        parts.append(escape_text(node.text))
    for child in node:
        _serialize_into(child, parts)
        if child.tail:
            parts.append(escape_text(child.tail))
    parts.append(close_tag(node))


def find_body(root: XmlNode) -> XmlNode | None:
    """The root itself or its first descendant with local name ``body``."""
    if is_element(root) and local_name(root) == "body":
        return root
    return find_descendant(root, "body")


__all__ = [
    "ContentItem",
    "XmlNode",
    "attributes",
    "child_elements",
    "close_tag",
    "content_items",
    "find_body",
    "find_descendant",
    "has_element_children",
    "is_comment",
    "is_element",
    "is_entity",
    "local_name",
    "open_tag",
    "parse_document",
    "qualified_name",
    "serialize_node",
    "text_content",
]
