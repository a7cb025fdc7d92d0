"""MENOTA transcription levels for word content.

Each word is rendered three times:

- facsimile (``<me:facs>``): what is on the page. Entities stay as
  references unless the dictionary gives a base letter or marks them as
  combining, abbreviations show their abbreviated form, editorial
  supplements are omitted.
- diplomatic (``<me:dipl>``): entities resolved to characters (combining
  marks dropped, base letters substituted), abbreviations expanded,
  supplied text shown.
- normalized (``<me:norm>``): the diplomatic reading with the level
  dictionary's character and ligature substitutions applied, and compound
  joins closed up.

"""

from __future__ import annotations

from collections.abc import Iterable

from scriptorium.entities import EntityRegistry
from scriptorium.markup import escape_xml
from scriptorium.nodes import (
    Abbreviation,
    Addition,
    CompoundJoin,
    Deletion,
    Entity,
    Gap,
    Node,
    Note,
    Supplied,
    Text,
    Unclear,
)
from scriptorium.normalizer import LevelDictionary


def gap_marker(quantity: int | None) -> str:
    if quantity is not None:
        return f'<gap reason="illegible" quantity="{quantity}" unit="chars"/>'
    return '<gap reason="illegible"/>'


def _element(tag: str, text: str) -> str:
    return f"<{tag}>{escape_xml(text)}</{tag}>"


class LevelRendererMixin:
    """Facsimile, diplomatic and normalized renderings of word children.

    Expects the host class to provide ``_entities`` and ``_dictionary``.
    Nodes with no reading at a level (breaks, blocks) render as "".

    """

    # These will be set by the Compiler class
    _entities: EntityRegistry
    _dictionary: LevelDictionary | None

    def _normalize(self, text: str) -> str:
        if self._dictionary is None:
            return text
        return self._dictionary.normalize_text(text)

    def _resolve_entity(self, name: str) -> str | None:
        """Diplomatic reading of an entity, or None if it stays a reference.

        Combining marks resolve to "". A dictionary base letter wins over
        the registry character.
        """
        if self._dictionary is not None:
            if self._dictionary.is_combining_mark(name):
                return ""
            base = self._dictionary.entity_base_letter(name)
            if base is not None:
                return base
        return self._entities.resolve(name)

    def _facsimile_entity(self, name: str) -> str:
        """Facsimile reading of an entity.

        The reference is kept unless the dictionary maps the entity to a base
        letter (substituted) or marks it as a combining mark (dropped).
        """
        if self._dictionary is not None:
            if self._dictionary.is_combining_mark(name):
                return ""
            base = self._dictionary.entity_base_letter(name)
            if base is not None:
                return escape_xml(base)
        return f"&{name};"

    # =========================================================================
    # Facsimile
    # =========================================================================

    def facsimile(self, nodes: Iterable[Node]) -> str:
        return "".join(self._node_to_facsimile(node) for node in nodes)

    def _node_to_facsimile(self, node: Node) -> str:
        match node:
            case Text(content=content):
                return escape_xml(content)
            case Entity(name=name):
                return self._facsimile_entity(name)
            case Abbreviation(abbr=abbr):
                return _element("abbr", abbr)
            case Gap(quantity=quantity):
                return gap_marker(quantity)
            case Unclear(text=text):
                return _element("unclear", text)
            case Deletion(text=text):
                return _element("del", text)
            case Addition(text=text):
                return _element("add", text)
            case Note(text=text):
                return _element("note", text)
            case CompoundJoin():
                return " "
        return ""

    # =========================================================================
    # Diplomatic
    # =========================================================================

    def diplomatic(self, nodes: Iterable[Node]) -> str:
        return "".join(self._node_to_diplomatic(node) for node in nodes)

    def _node_to_diplomatic(self, node: Node) -> str:
        match node:
            case Text(content=content):
                return escape_xml(content)
            case Entity(name=name):
                resolved = self._resolve_entity(name)
                return f"&{name};" if resolved is None else escape_xml(resolved)
            case Abbreviation(expansion=expansion):
                return _element("expan", expansion)
            case Gap(supplied=supplied):
                return _element("supplied", supplied) if supplied else ""
            case Supplied(text=text):
                return _element("supplied", text)
            case Unclear(text=text):
                return _element("unclear", text)
            case Deletion(text=text):
                return _element("del", text)
            case Addition(text=text):
                return _element("add", text)
            case Note(text=text):
                return _element("note", text)
            case CompoundJoin():
                return " "
        return ""

    # =========================================================================
    # Normalized
    # =========================================================================

    def normalized(self, nodes: Iterable[Node]) -> str:
        return "".join(self._node_to_normalized(node) for node in nodes)

    def _node_to_normalized(self, node: Node) -> str:
        norm = self._normalize
        match node:
            case Text(content=content):
                return escape_xml(norm(content))
            case Entity(name=name):
                resolved = self._resolve_entity(name)
                return f"&{name};" if resolved is None else escape_xml(norm(resolved))
            case Abbreviation(expansion=expansion):
                return _element("expan", norm(expansion))
            case Gap(supplied=supplied):
                return _element("supplied", norm(supplied)) if supplied else ""
            case Supplied(text=text):
                return _element("supplied", norm(text))
            case Unclear(text=text):
                return _element("unclear", norm(text))
            case Deletion(text=text):
                return _element("del", norm(text))
            case Addition(text=text):
                return _element("add", norm(text))
            case Note(text=text):
                return _element("note", norm(text))
        return ""
