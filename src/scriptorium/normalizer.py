"""Level dictionary for deriving diplomatic and normalized text.

Loaded from two JSON documents:

    {"diplomatic": {"combining_marks": ["combtilde", ...]},
     "normalized": {"character_mappings": {"ð": "d", ...},
                    "ligature_expansions": {"æ": "ae", ...}}}

    {"mappings": {"rrot": "r", "slong": "s", ...}}

The first drives which entities vanish at the diplomatic level and how
characters are rewritten at the normalized level; the second maps entity
names to their diplomatic base letters.

Thread Safety:
Build once, then share. All query methods are read-only.

"""

from __future__ import annotations

import json
from collections.abc import Mapping

from scriptorium.utils.logger import get_logger

logger = get_logger(__name__)


class LevelDictionary:
    """Combining marks, entity base letters and character substitutions."""

    __slots__ = ("_combining_marks", "_char_mappings", "_ligatures", "_entity_mappings")

    def __init__(
        self,
        combining_marks: set[str] | frozenset[str] = frozenset(),
        char_mappings: Mapping[str, str] | None = None,
        ligatures: Mapping[str, str] | None = None,
        entity_mappings: Mapping[str, str] | None = None,
    ) -> None:
        self._combining_marks = frozenset(combining_marks)
        self._char_mappings = _first_char_keys(char_mappings or {})
        self._ligatures = _first_char_keys(ligatures or {})
        self._entity_mappings = dict(entity_mappings or {})

    @classmethod
    def from_json(cls, text: str) -> LevelDictionary:
        """Parse the level dictionary document.

        Raises:
            ValueError: The JSON is malformed or a section is missing.
        """
        data = json.loads(text)
        try:
            marks = data["diplomatic"]["combining_marks"]
            normalized = data["normalized"]
            char_mappings = normalized["character_mappings"]
            ligatures = normalized["ligature_expansions"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Failed to parse dictionary: missing {e}") from e
        return cls(set(marks), char_mappings, ligatures)

    def load_entity_mappings(self, text: str) -> None:
        """Replace entity base-letter mappings from a ``{"mappings": {...}}`` document."""
        data = json.loads(text)
        mappings = data.get("mappings") if isinstance(data, dict) else None
        if not isinstance(mappings, dict):
            raise ValueError("Failed to parse entity mappings: missing 'mappings'")
        self._entity_mappings = dict(mappings)

    def add_entity_mappings(self, mappings: Mapping[str, str]) -> None:
        """Add or override entity base-letter mappings."""
        self._entity_mappings.update(mappings)

    def is_combining_mark(self, entity_name: str) -> bool:
        return entity_name in self._combining_marks

    def entity_base_letter(self, entity_name: str) -> str | None:
        """Diplomatic base letter for an entity, if one is mapped."""
        return self._entity_mappings.get(entity_name)

    def normalize_char(self, char: str) -> str | None:
        """Normalized form of one character, or None when unchanged.

        Character mappings take precedence over ligature expansions.
        """
        mapped = self._char_mappings.get(char)
        if mapped is None:
            mapped = self._ligatures.get(char)
        return mapped

    def normalize_text(self, text: str) -> str:
        """Apply character and ligature substitutions one character at a time."""
        char_mappings = self._char_mappings
        ligatures = self._ligatures
        return "".join(char_mappings.get(c, ligatures.get(c, c)) for c in text)


def _first_char_keys(mapping: Mapping[str, str]) -> dict[str, str]:
    """Key a substitution table by the first character of each key."""
    result: dict[str, str] = {}
    for key, value in mapping.items():
        if not key:
            continue
        if len(key) > 1:
            logger.debug("Substitution key %r longer than one character; using %r", key, key[0])
        result[key[0]] = value
    return result


__all__ = ["LevelDictionary"]
