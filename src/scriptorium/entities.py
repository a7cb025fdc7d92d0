"""Registry of named character entities.

Maps entity names used in the DSL (``:eth:``) to the characters they stand
for, and characters back to names. Definitions load from the JSON format

    {"version": "1.0", "name": "MUFI subset",
     "entities": {"eth": {"unicode": "U+00F0", "char": "ð",
                          "description": "latin small letter eth",
                          "category": "letter"}}}

Thread Safety:
Loading mutates the registry; do it before sharing. Lookups are read-only.

"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class EntityDefinition:
    """One named character."""

    unicode: str
    char: str
    description: str = ""
    category: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntityDefinition:
        return cls(
            unicode=data.get("unicode", ""),
            char=data["char"],
            description=data.get("description", ""),
            category=data.get("category", ""),
        )


class EntityRegistry:
    """Forward (name -> character) and reverse (character -> name) lookup.

    When several names share a character, the first one loaded wins the
    reverse mapping.

    Usage:
        >>> registry = EntityRegistry()
        >>> registry.add("eth", EntityDefinition("U+00F0", "ð"))
        >>> registry.resolve("eth"), registry.reverse_lookup("ð")
        ('ð', 'eth')

    """

    __slots__ = ("_entities", "_reverse")

    def __init__(self) -> None:
        self._entities: dict[str, EntityDefinition] = {}
        self._reverse: dict[str, str] = {}

    @classmethod
    def from_json(cls, text: str) -> EntityRegistry:
        registry = cls()
        registry.load_json(text)
        return registry

    @classmethod
    def from_file(cls, path: str | Path) -> EntityRegistry:
        registry = cls()
        registry.load_json(Path(path).read_text(encoding="utf-8"))
        return registry

    def load_json(self, text: str) -> None:
        """Merge definitions from a JSON definition file's contents.

        Raises:
            ValueError: The JSON is malformed or lacks an "entities" table.
        """
        data = json.loads(text)
        entities = data.get("entities") if isinstance(data, dict) else None
        if not isinstance(entities, dict):
            raise ValueError("Entity definition file has no 'entities' object")
        for name, definition in entities.items():
            self.add(name, EntityDefinition.from_dict(definition))

    def add(self, name: str, definition: EntityDefinition) -> None:
        self._entities[name] = definition
        self._reverse.setdefault(definition.char, name)

    def get(self, name: str) -> EntityDefinition | None:
        return self._entities.get(name)

    def resolve(self, name: str) -> str | None:
        """Return the character for ``name``, or None if unknown."""
        definition = self._entities.get(name)
        return definition.char if definition else None

    def reverse_lookup(self, char: str) -> str | None:
        """Return the entity name registered for ``char``, or None."""
        return self._reverse.get(char)

    def names(self) -> list[str]:
        return sorted(self._entities)

    def __contains__(self, name: object) -> bool:
        return name in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entities)


__all__ = ["EntityDefinition", "EntityRegistry"]
